"""Source adapter contract.

A source adapter drives one public calculator and returns the label/value
rows it displays. It knows nothing about canonical categories; mapping
labels is the normalizer's job.
"""

from typing import List, Protocol, Tuple

from ..sdk.errors import AcquisitionError
from ..sdk.schemas import CalculationRequest

RawRow = Tuple[str, str]


class SourceAdapter(Protocol):
    """Anything that can fetch raw rows for a request through a session."""

    name: str

    def fetch(self, session, request: CalculationRequest) -> List[RawRow]:
        """Return (label, displayed value) rows.

        Raises:
            AcquisitionError: If the calculator could not be driven
        """
        ...


__all__ = ["AcquisitionError", "RawRow", "SourceAdapter"]
