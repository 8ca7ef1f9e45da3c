"""Response bodies for the calculate endpoint."""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from withholdcheck.sdk.reconcile import other_subtotal
from withholdcheck.sdk.schemas import CalculationReport, TaxCategory

_ORDER = {category: i for i, category in enumerate(TaxCategory)}


class CalculationResponse(BaseModel):
    """Merged breakdown keyed by display label (e.g. 'Federal Withholding')."""

    breakdown: Dict[str, float]
    percentages: Dict[str, float] = Field(..., description="Percent of salary, 2 dp")
    deviations: Dict[str, float] = Field(..., description="Percentage-point gap between sources")
    filled: List[str] = Field(default_factory=list, description="Categories taken from source B")
    not_found: List[str] = Field(default_factory=list, alias="notFound")
    within_threshold: bool = Field(..., alias="withinThreshold")
    tolerance_pct: float = Field(..., alias="tolerancePct")
    other: Optional[float] = Field(default=None, description="SDI + FLI subtotal")
    other_pct: Optional[float] = Field(default=None, alias="otherPct")
    attempts: int

    @classmethod
    def from_report(cls, report: CalculationReport) -> "CalculationResponse":
        result = report.result
        merged = result.merged
        categories = sorted(merged.amounts, key=_ORDER.get)
        other = other_subtotal(merged)
        return cls(
            breakdown={c.label: merged.amounts[c] for c in categories},
            percentages={c.label: result.percentages[c] for c in categories},
            deviations={c.category.label: round(c.deviation, 4) for c in result.comparisons},
            filled=[c.label for c in result.filled],
            notFound=[c.label for c in sorted(merged.missing, key=_ORDER.get)],
            withinThreshold=result.within_threshold,
            tolerancePct=result.tolerance_pct,
            attempts=report.attempt_count,
            other=other,
            otherPct=None if other is None else round(other / result.salary * 100, 2),
        )
