"""FastAPI dependencies."""
from typing import Callable

from withholdcheck.sdk.schemas import CalculationReport, CalculationRequest
from withholdcheck.sdk.service import calculate_taxes

Calculator = Callable[[CalculationRequest], CalculationReport]


def get_calculator() -> Calculator:
    """The request -> report function used by the calculate endpoint.

    Tests override this to avoid driving real browsers.
    """
    return calculate_taxes
