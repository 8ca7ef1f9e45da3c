"""Cross-check two calculators' breakdowns against each other.

SDK layer - pure logic, no I/O.

Both breakdowns are compared as percent of salary, category by category.
The sources never share an identical taxonomy: one reports Medicare and
Social Security separately, the other a single FICA figure, so split
categories are summed before comparing.

Gap-filling: a zero in source A means "not found" (see normalize). When
source B has a positive figure for that category, the merged breakdown
takes B's value, splitting combined figures by statutory rate. Deviations
are always computed on the pre-fill values.
"""

import logging
from typing import Dict, List, Optional, Tuple

from .schemas import (
    COMBINED_CATEGORIES,
    CategoryComparison,
    ReconciliationResult,
    TaxBreakdown,
    TaxCategory,
)

logger = logging.getLogger(__name__)

# Employee FICA rates in percent; FICA = 7.65
MEDICARE_RATE = 1.45
SOCIAL_SECURITY_RATE = 6.2
FICA_RATE = MEDICARE_RATE + SOCIAL_SECURITY_RATE

SPLIT_RATES: Dict[TaxCategory, Dict[TaxCategory, float]] = {
    TaxCategory.FICA: {
        TaxCategory.MEDICARE: MEDICARE_RATE,
        TaxCategory.SOCIAL_SECURITY: SOCIAL_SECURITY_RATE,
    },
}

_ORDER = {category: i for i, category in enumerate(TaxCategory)}

# State payroll taxes reported together as "Other"
OTHER_CATEGORIES = (TaxCategory.SDI, TaxCategory.FLI)


def split_fica(total: float) -> Tuple[float, float]:
    """Split a combined FICA amount into (medicare, social_security).

    Uses the 1.45 / 6.2 employee rates, rounded to cents.
    """
    medicare = round(total * MEDICARE_RATE / FICA_RATE, 2)
    social_security = round(total * SOCIAL_SECURITY_RATE / FICA_RATE, 2)
    return medicare, social_security


def other_subtotal(breakdown: TaxBreakdown) -> Optional[float]:
    """Sum of SDI and FLI for display (None if the breakdown has neither)."""
    present = [c for c in OTHER_CATEGORIES if breakdown.has(c)]
    if not present:
        return None
    return round(sum(breakdown.get(c) for c in present), 2)


def _split_share(combined: TaxCategory, part: TaxCategory, total: float) -> float:
    rates = SPLIT_RATES[combined]
    return total * rates[part] / sum(rates.values())


def _percent(amount: float, salary: float) -> float:
    return amount / salary * 100


def comparison_pairs(
    a: TaxBreakdown,
    b: TaxBreakdown,
    exclude_net_pay: bool = True,
) -> List[Tuple[TaxCategory, float, float]]:
    """Categories both sources can speak to, with each side's amount.

    Split parts (Medicare, Social Security) are compared individually only
    when both sides report them split; otherwise they are compared as their
    combined category.
    """
    split_parts = {p for parts in COMBINED_CATEGORIES.values() for p in parts}
    pairs = []

    for category in TaxCategory:
        if category in COMBINED_CATEGORIES or category in split_parts:
            continue
        if exclude_net_pay and category is TaxCategory.NET_PAY:
            continue
        if a.has(category) and b.has(category):
            pairs.append((category, a.get(category), b.get(category)))

    for combined, parts in COMBINED_CATEGORIES.items():
        if a.is_split(combined) and b.is_split(combined):
            pairs.extend((p, a.get(p), b.get(p)) for p in parts)
            continue
        amount_a = a.combined(combined)
        amount_b = b.combined(combined)
        if amount_a is not None and amount_b is not None:
            pairs.append((combined, amount_a, amount_b))

    pairs.sort(key=lambda pair: _ORDER[pair[0]])
    return pairs


def counterpart_amount(b: TaxBreakdown, category: TaxCategory) -> Optional[float]:
    """B's value for one of A's categories, deriving it when B reports it differently."""
    if b.has(category):
        return b.get(category)

    if category in COMBINED_CATEGORIES:
        return b.combined(category)

    for combined, parts in COMBINED_CATEGORIES.items():
        if category in parts and b.has(combined):
            return _split_share(combined, category, b.get(combined))

    return None


def reconcile(
    a: TaxBreakdown,
    b: TaxBreakdown,
    salary: float,
    tolerance_pct: float,
    exclude_net_pay: bool = True,
) -> ReconciliationResult:
    """Compare two breakdowns and build the merged, gap-filled breakdown.

    Args:
        a: Primary source breakdown (its categories shape the merged result)
        b: Secondary source breakdown
        salary: Annual salary both sources were computed for
        tolerance_pct: Max allowed |pct_a - pct_b| per category, in
                       percentage points of salary (e.g. 1.0 or 1.5)
        exclude_net_pay: Leave Net Pay out of the threshold check and
                         gap-filling

    Returns:
        ReconciliationResult. within_threshold is False when the two
        sources share no comparable category.

    Raises:
        ValueError: If salary is not positive or tolerance is negative
    """
    if salary <= 0:
        raise ValueError(f"Salary must be positive, got {salary}")
    if tolerance_pct < 0:
        raise ValueError(f"Tolerance must not be negative, got {tolerance_pct}")

    # Step 1-3: compare pre-fill values
    comparisons = []
    for category, amount_a, amount_b in comparison_pairs(a, b, exclude_net_pay):
        pct_a = _percent(amount_a, salary)
        pct_b = _percent(amount_b, salary)
        deviation = abs(pct_a - pct_b)
        comparisons.append(CategoryComparison(
            category=category,
            amount_a=amount_a,
            amount_b=amount_b,
            pct_a=pct_a,
            pct_b=pct_b,
            deviation=deviation,
            # Rounded so float noise can't flip an exact-boundary verdict
            within=round(deviation, 6) <= tolerance_pct,
        ))

    if not comparisons:
        logger.warning(f"No comparable categories between '{a.source}' and '{b.source}'")
    within_threshold = bool(comparisons) and all(c.within for c in comparisons)

    # Step 4: gap-fill A's unconfirmed zeros from B
    merged_amounts = dict(a.amounts)
    missing = set(a.missing)
    filled = []

    for category in sorted(a.amounts, key=_ORDER.get):
        if merged_amounts[category] != 0:
            continue
        if exclude_net_pay and category is TaxCategory.NET_PAY:
            continue
        value = counterpart_amount(b, category)
        if value is not None and value > 0:
            merged_amounts[category] = round(value, 2)
            missing.discard(category)
            filled.append(category)

    if filled:
        logger.debug(f"Filled from '{b.source}': {[c.value for c in filled]}")

    merged = TaxBreakdown(source=a.source, amounts=merged_amounts, missing=missing)

    # Step 5: presentation percentages from the merged values
    percentages = {
        category: round(_percent(amount, salary), 2)
        for category, amount in merged_amounts.items()
    }

    return ReconciliationResult(
        within_threshold=within_threshold,
        tolerance_pct=tolerance_pct,
        salary=salary,
        comparisons=comparisons,
        merged=merged,
        filled=filled,
        percentages=percentages,
    )
