"""Pydantic schemas for withhold-check data validation.

Config-file schemas use extra='forbid' so a typo in settings.json or
vocabulary.yaml fails loudly instead of being silently ignored.
"""

import math
import re
from enum import Enum
from typing import Dict, List, Literal, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# Tax categories
# =============================================================================


class TaxCategory(str, Enum):
    """Canonical tax-component identity shared by every source.

    FICA is a combined category: it only appears in breakdowns from sources
    that report Medicare and Social Security as one figure.
    """

    FEDERAL_WITHHOLDING = "federal_withholding"
    STATE_WITHHOLDING = "state_withholding"
    LOCAL_TAX = "local_tax"
    MEDICARE = "medicare"
    SOCIAL_SECURITY = "social_security"
    SDI = "sdi"
    FLI = "fli"
    NET_PAY = "net_pay"
    FICA = "fica"

    @property
    def label(self) -> str:
        """Human-readable label used in API and CLI output."""
        return DISPLAY_LABELS[self]


DISPLAY_LABELS = {
    TaxCategory.FEDERAL_WITHHOLDING: "Federal Withholding",
    TaxCategory.STATE_WITHHOLDING: "State Tax Withholding",
    TaxCategory.LOCAL_TAX: "Local Tax",
    TaxCategory.MEDICARE: "Medicare",
    TaxCategory.SOCIAL_SECURITY: "Social Security",
    TaxCategory.SDI: "State Disability Insurance (SDI)",
    TaxCategory.FLI: "Family Leave Insurance (FLI)",
    TaxCategory.NET_PAY: "Net Pay",
    TaxCategory.FICA: "FICA",
}

# Combined category -> the split categories it sums
COMBINED_CATEGORIES: Dict[TaxCategory, Tuple[TaxCategory, ...]] = {
    TaxCategory.FICA: (TaxCategory.MEDICARE, TaxCategory.SOCIAL_SECURITY),
}


# =============================================================================
# Request
# =============================================================================


class FilingStatus(str, Enum):
    """Federal filing status accepted by both calculators."""

    SINGLE = "SINGLE"
    MARRIED = "MARRIED"
    MARRIED_SEPARATELY = "MARRIED_SEPARATELY"
    HEAD_OF_HOUSEHOLD = "HEAD_OF_HOUSEHOLD"
    NONRESIDENT_ALIEN = "NONRESIDENT_ALIEN"

    @property
    def state_code(self) -> str:
        """State filing status code ('S' or 'M').

        Head of household and nonresident alien file as single for state
        withholding purposes.
        """
        return "M" if self is FilingStatus.MARRIED else "S"

    @classmethod
    def parse(cls, value: str) -> "FilingStatus":
        """Parse a filing status from enum names, friendly text or menu numbers.

        Examples: "SINGLE", "Married Filing Jointly", "head of household", "2"
        """
        if isinstance(value, cls):
            return value
        key = re.sub(r"[\s\-]+", "_", str(value).strip()).upper()
        if key in _FILING_STATUS_ALIASES:
            return _FILING_STATUS_ALIASES[key]
        try:
            return cls[key]
        except KeyError:
            raise ValueError(
                f"Unknown filing status '{value}'. "
                f"Expected one of: {', '.join(s.value for s in cls)}"
            )


_FILING_STATUS_ALIASES = {
    "1": FilingStatus.SINGLE,
    "2": FilingStatus.MARRIED,
    "3": FilingStatus.HEAD_OF_HOUSEHOLD,
    "4": FilingStatus.NONRESIDENT_ALIEN,
    "S": FilingStatus.SINGLE,
    "M": FilingStatus.MARRIED,
    "MFJ": FilingStatus.MARRIED,
    "MFS": FilingStatus.MARRIED_SEPARATELY,
    "HOH": FilingStatus.HEAD_OF_HOUSEHOLD,
    "MARRIED_FILING_JOINTLY": FilingStatus.MARRIED,
    "MARRIED_FILING_SEPARATELY": FilingStatus.MARRIED_SEPARATELY,
}

REQUIRED_REQUEST_FIELDS = ["salary", "state", "address", "city", "zipcode", "filingStatus"]


class CalculationRequest(BaseModel):
    """Salary and filing parameters sent to both calculators."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    salary: float = Field(..., gt=0, description="Annual gross salary")
    withholding: float = Field(default=0, ge=0, description="Additional federal withholding")
    state: str = Field(..., min_length=1, description="U.S. state name, e.g. 'New York'")
    address: str = Field(..., min_length=1, description="Work street address")
    city: str = Field(..., min_length=1)
    zipcode: str = Field(..., pattern=r"^\d{5}(-\d{4})?$", description="5-digit ZIP or ZIP+4")
    filing_status: FilingStatus = Field(..., alias="filingStatus")

    @field_validator("withholding", mode="before")
    @classmethod
    def _default_withholding(cls, value):
        return 0 if value is None or value == "" else value

    @field_validator("filing_status", mode="before")
    @classmethod
    def _parse_filing_status(cls, value):
        if value is None or value == "":
            return value
        return FilingStatus.parse(value)

    @property
    def state_slug(self) -> str:
        """State name as used in calculator URLs ('New York' -> 'new-york')."""
        return re.sub(r"\s+", "-", self.state.lower())


# =============================================================================
# Breakdowns and reconciliation
# =============================================================================


class TaxBreakdown(BaseModel):
    """Amounts per canonical category for one source.

    Every category of the source's vocabulary is present in ``amounts``.
    A category that was not found on the page holds 0.0 and is listed in
    ``missing``; 0.0 outside ``missing`` is a zero the source reported.
    """

    model_config = ConfigDict(extra="forbid")

    source: str = Field(default="", description="Source name (e.g. 'paycheckcity')")
    amounts: Dict[TaxCategory, float] = Field(default_factory=dict)
    missing: Set[TaxCategory] = Field(default_factory=set)

    @field_validator("amounts")
    @classmethod
    def _non_negative(cls, amounts):
        negative = [c.value for c, v in amounts.items() if v < 0]
        if negative:
            raise ValueError(f"Negative amounts not allowed: {', '.join(negative)}")
        non_finite = [c.value for c, v in amounts.items() if not math.isfinite(v)]
        if non_finite:
            raise ValueError(f"Non-finite amounts not allowed: {', '.join(non_finite)}")
        return amounts

    def has(self, category: TaxCategory) -> bool:
        return category in self.amounts

    def get(self, category: TaxCategory, default: float = 0.0) -> float:
        return self.amounts.get(category, default)

    def combined(self, category: TaxCategory) -> Optional[float]:
        """Value of a combined category, summing the split side if needed.

        Returns None when the breakdown has neither the combined figure nor
        every one of its parts.
        """
        if category in self.amounts:
            return self.amounts[category]
        parts = COMBINED_CATEGORIES.get(category, ())
        if parts and all(p in self.amounts for p in parts):
            return sum(self.amounts[p] for p in parts)
        return None

    def is_split(self, category: TaxCategory) -> bool:
        """True if the breakdown reports the parts of ``category`` separately."""
        parts = COMBINED_CATEGORIES.get(category, ())
        return bool(parts) and all(p in self.amounts for p in parts)


class CategoryComparison(BaseModel):
    """Percentage-of-salary comparison for one category."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    category: TaxCategory
    amount_a: float
    amount_b: float
    pct_a: float = Field(..., description="amount_a / salary * 100")
    pct_b: float = Field(..., description="amount_b / salary * 100")
    deviation: float = Field(..., description="|pct_a - pct_b| in percentage points")
    within: bool


class ReconciliationResult(BaseModel):
    """Verdict and merged breakdown for one pair of source breakdowns."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    within_threshold: bool
    tolerance_pct: float
    salary: float
    comparisons: List[CategoryComparison] = Field(default_factory=list)
    merged: TaxBreakdown
    filled: List[TaxCategory] = Field(
        default_factory=list, description="Categories of A substituted from B"
    )
    percentages: Dict[TaxCategory, float] = Field(
        default_factory=dict, description="Merged amounts as percent of salary"
    )

    @property
    def deviations(self) -> Dict[TaxCategory, float]:
        return {c.category: c.deviation for c in self.comparisons}

    @property
    def worst(self) -> Optional[CategoryComparison]:
        """Comparison with the largest deviation (None if nothing compared)."""
        if not self.comparisons:
            return None
        return max(self.comparisons, key=lambda c: c.deviation)


class AttemptOutcome(BaseModel):
    """What happened on one acquisition + reconciliation attempt."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    attempt: int = Field(..., ge=1)
    kind: Literal["success", "source_failure", "mismatch"]
    result: Optional[ReconciliationResult] = None
    source: Optional[str] = Field(default=None, description="Failing source, for source_failure")
    reason: Optional[str] = None


class CalculationReport(BaseModel):
    """Final outcome of the retry loop.

    A report with ``ok=False`` is the failure value returned on exhaustion;
    callers test the report itself (``if not report: ...``).
    """

    model_config = ConfigDict(extra="forbid")

    ok: bool
    result: Optional[ReconciliationResult] = None
    attempts: List[AttemptOutcome] = Field(default_factory=list)
    reason: Optional[Literal["mismatch", "source_failure"]] = None

    def __bool__(self) -> bool:
        return self.ok

    @property
    def breakdown(self) -> Optional[TaxBreakdown]:
        return self.result.merged if self.result else None

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)


# =============================================================================
# Config files
# =============================================================================


class CheckSettings(BaseModel):
    """Validated contents of settings.json."""

    model_config = ConfigDict(extra="forbid")

    tolerance_pct: float = Field(
        default=1.5, ge=0,
        description="Max percentage-point deviation per category for agreement",
    )
    max_attempts: int = Field(default=3, ge=1)
    exclude_net_pay: bool = Field(
        default=True, description="Leave Net Pay out of threshold checks and gap-filling",
    )
    vocabulary: Optional[str] = Field(default=None, description="Path to a custom vocabulary.yaml")
    headless: bool = True
    ws_endpoint: Optional[str] = Field(
        default=None, description="CDP websocket of a remote browser (launch locally if unset)",
    )
    timeout_ms: int = Field(default=30000, gt=0)
    host: str = "127.0.0.1"
    port: int = Field(default=3000, gt=0, lt=65536)


class LabelVocabulary(BaseModel):
    """Validated contents of vocabulary.yaml.

    Maps each source to the ordered label variants accepted for each
    canonical category. Earlier variants take priority.
    """

    model_config = ConfigDict(extra="forbid")

    sources: Dict[str, Dict[TaxCategory, List[str]]]

    @model_validator(mode="after")
    def _non_empty_variants(self):
        for source, categories in self.sources.items():
            if not categories:
                raise ValueError(f"Source '{source}' has no categories")
            for category, variants in categories.items():
                if not variants or not all(v.strip() for v in variants):
                    raise ValueError(
                        f"Source '{source}' category '{category.value}' needs at least one non-blank label"
                    )
        return self
