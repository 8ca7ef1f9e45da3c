"""Withhold Check SDK - normalization, reconciliation and retry logic."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_check_settings,
    get_setting,
    set_setting,
    unset_setting,
    get_vocabulary_path,
    DEFAULT_VOCABULARY_PATH,
)

from .errors import (
    AcquisitionError,
    ParseError,
    SettingsError,
    VocabularyError,
)

from .schemas import (
    TaxCategory,
    COMBINED_CATEGORIES,
    FilingStatus,
    CalculationRequest,
    REQUIRED_REQUEST_FIELDS,
    TaxBreakdown,
    CategoryComparison,
    ReconciliationResult,
    AttemptOutcome,
    CalculationReport,
    CheckSettings,
    LabelVocabulary,
)

from .normalize import (
    parse_amount,
    normalize,
    load_vocabulary,
    source_vocabulary,
)

from .reconcile import (
    reconcile,
    split_fica,
    other_subtotal,
    OTHER_CATEGORIES,
    comparison_pairs,
    counterpart_amount,
    MEDICARE_RATE,
    SOCIAL_SECURITY_RATE,
    FICA_RATE,
)

from .retry import (
    acquire_with_retry,
    run_attempt,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_TOLERANCE_PCT,
)

from .service import calculate_taxes

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_check_settings",
    "get_setting",
    "set_setting",
    "unset_setting",
    "get_vocabulary_path",
    "DEFAULT_VOCABULARY_PATH",
    # Errors
    "AcquisitionError",
    "ParseError",
    "SettingsError",
    "VocabularyError",
    # Schemas
    "TaxCategory",
    "COMBINED_CATEGORIES",
    "FilingStatus",
    "CalculationRequest",
    "REQUIRED_REQUEST_FIELDS",
    "TaxBreakdown",
    "CategoryComparison",
    "ReconciliationResult",
    "AttemptOutcome",
    "CalculationReport",
    "CheckSettings",
    "LabelVocabulary",
    # Normalizer
    "parse_amount",
    "normalize",
    "load_vocabulary",
    "source_vocabulary",
    # Reconciliation
    "reconcile",
    "split_fica",
    "other_subtotal",
    "OTHER_CATEGORIES",
    "comparison_pairs",
    "counterpart_amount",
    "MEDICARE_RATE",
    "SOCIAL_SECURITY_RATE",
    "FICA_RATE",
    # Retry
    "acquire_with_retry",
    "run_attempt",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_TOLERANCE_PCT",
    # Service
    "calculate_taxes",
]
