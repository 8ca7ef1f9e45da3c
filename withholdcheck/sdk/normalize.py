"""Map raw calculator labels onto canonical tax categories.

Each calculator shows its results as label/value rows whose wording varies
by site and over time. The label variants live in vocabulary.yaml so that
markup drift is a config change, not a code change.

A category whose label is not found gets 0.0 and is listed in
``TaxBreakdown.missing``. Downstream reconciliation treats that zero as
"not found" and may backfill it from the other source.
"""

import logging
import math
import re
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import yaml
from pydantic import ValidationError

from .config import get_vocabulary_path
from .errors import ParseError, VocabularyError
from .schemas import LabelVocabulary, TaxBreakdown, TaxCategory

logger = logging.getLogger(__name__)

RawValue = Union[str, int, float, None]
RawRows = Sequence[Tuple[str, RawValue]]

# Plain decimal digits only (no nan, inf or "1_000" forms)
_AMOUNT_RE = re.compile(r"[0-9]+(\.[0-9]*)?|\.[0-9]+")


def parse_amount(value: RawValue) -> float:
    """Extract a numeric amount from displayed text.

    Strips currency symbols, thousands separators and whitespace. Amounts in
    parentheses or with a leading minus are negative.

    Examples:
        "$1,234.56" -> 1234.56
        "($50.00)"  -> -50.0

    Raises:
        ParseError: If nothing numeric remains
    """
    if isinstance(value, bool):
        raise ParseError(f"Not an amount: {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ParseError(f"Not an amount: {value!r}")
        return float(value)
    if value is None:
        raise ParseError("Empty amount")

    cleaned = re.sub(r"[$,\s]", "", str(value))
    is_negative = cleaned.startswith("-") or (cleaned.startswith("(") and cleaned.endswith(")"))
    cleaned = cleaned.strip("()").lstrip("-")

    if not cleaned:
        raise ParseError(f"Empty amount: {value!r}")

    if not _AMOUNT_RE.fullmatch(cleaned):
        raise ParseError(f"Not an amount: {value!r}")

    amount = float(cleaned)
    return -amount if is_negative else amount


def load_vocabulary(path: Optional[Path] = None) -> LabelVocabulary:
    """Load and validate the label vocabulary.

    Args:
        path: Explicit vocabulary.yaml. Defaults to the configured or
              packaged vocabulary (see config.get_vocabulary_path).

    Raises:
        VocabularyError: If the file is missing or fails validation
    """
    vocab_path = get_vocabulary_path(path)
    if not vocab_path.exists():
        raise VocabularyError(f"Vocabulary not found: {vocab_path}")

    try:
        data = yaml.safe_load(vocab_path.read_text()) or {}
        return LabelVocabulary.model_validate(data)
    except (yaml.YAMLError, ValidationError) as e:
        raise VocabularyError(f"Invalid vocabulary in {vocab_path}:\n{e}")


def source_vocabulary(vocabulary: LabelVocabulary, source: str) -> Dict[TaxCategory, List[str]]:
    """Get one source's category -> label variants mapping."""
    try:
        return vocabulary.sources[source]
    except KeyError:
        raise VocabularyError(
            f"No vocabulary for source '{source}'. "
            f"Known sources: {', '.join(sorted(vocabulary.sources))}"
        )


def normalize(
    raw: Union[RawRows, Mapping[str, RawValue]],
    vocabulary: Mapping[TaxCategory, Iterable[str]],
    source: str = "",
) -> TaxBreakdown:
    """Build a canonical breakdown from raw label/value rows.

    For each category, label variants are tried in order; for a variant the
    first row whose trimmed label equals it exactly is used.

    Args:
        raw: (label, value) rows in page order, or a {label: value} mapping
        vocabulary: Category -> ordered label variants for this source
        source: Source name recorded on the breakdown

    Returns:
        TaxBreakdown with every vocabulary category present
    """
    rows = list(raw.items()) if isinstance(raw, Mapping) else list(raw)
    by_label: Dict[str, RawValue] = {}
    for label, value in rows:
        # First row wins for duplicate labels
        by_label.setdefault(str(label).strip(), value)

    amounts: Dict[TaxCategory, float] = {}
    missing = set()
    matched_labels = set()

    for category, variants in vocabulary.items():
        label = next((v for v in variants if v.strip() in by_label), None)
        if label is None:
            amounts[category] = 0.0
            missing.add(category)
            continue

        matched_labels.add(label.strip())
        try:
            amount = parse_amount(by_label[label.strip()])
        except ParseError as e:
            logger.warning(f"{source or 'source'}: {category.value} label '{label}' unparseable ({e}), using 0")
            amounts[category] = 0.0
            missing.add(category)
            continue

        # Parenthesised deductions come through negative; store the withheld magnitude
        amounts[category] = abs(amount)

    unmatched = [label for label in by_label if label not in matched_labels]
    if unmatched:
        logger.debug(f"{source or 'source'}: ignored labels {unmatched}")
    if missing:
        logger.debug(f"{source or 'source'}: not found {sorted(c.value for c in missing)}")

    return TaxBreakdown(source=source, amounts=amounts, missing=missing)
