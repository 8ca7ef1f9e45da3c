"""Source adapters for the public withholding calculators.

Source A (paycheckcity) reports Medicare and Social Security separately;
source B (smartasset) reports them as one FICA figure.
"""

from typing import Tuple

from .base import AcquisitionError, RawRow, SourceAdapter
from .browser import BrowserSession
from .paycheckcity import PaycheckCityAdapter
from .smartasset import SmartAssetAdapter

ADAPTERS = {
    PaycheckCityAdapter.name: PaycheckCityAdapter,
    SmartAssetAdapter.name: SmartAssetAdapter,
}


def get_adapter(name: str) -> SourceAdapter:
    """Get an adapter instance by source name.

    Raises:
        ValueError: If no adapter has that name
    """
    try:
        return ADAPTERS[name]()
    except KeyError:
        raise ValueError(f"Unknown source '{name}'. Known sources: {', '.join(sorted(ADAPTERS))}")


def default_adapters() -> Tuple[SourceAdapter, SourceAdapter]:
    """(source A, source B) in comparison order."""
    return PaycheckCityAdapter(), SmartAssetAdapter()


__all__ = [
    "AcquisitionError",
    "RawRow",
    "SourceAdapter",
    "BrowserSession",
    "PaycheckCityAdapter",
    "SmartAssetAdapter",
    "ADAPTERS",
    "get_adapter",
    "default_adapters",
]
