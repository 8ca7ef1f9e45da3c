"""Direct-call entry point: request in, report out.

Fills in everything the caller leaves unset from settings.json: retry
policy, browser options, vocabulary and the default pair of calculators.

Usage:
    from withholdcheck.sdk import CalculationRequest, calculate_taxes

    report = calculate_taxes(CalculationRequest(
        salary=65000, state="New York", address="35 Hudson Yards",
        city="New York", zipcode="10001", filingStatus="SINGLE",
    ))
    if not report:
        print("Sources never agreed")
"""

import logging
from functools import partial
from pathlib import Path
from typing import Optional, Sequence

from .config import get_check_settings
from .normalize import load_vocabulary
from .retry import SessionFactory, acquire_with_retry
from .schemas import CalculationReport, CalculationRequest, CheckSettings, LabelVocabulary

logger = logging.getLogger(__name__)


def browser_session_factory(settings: CheckSettings) -> SessionFactory:
    """Session factory opening one browser per attempt with the configured options."""
    from ..adapters.browser import BrowserSession

    return partial(
        BrowserSession,
        headless=settings.headless,
        ws_endpoint=settings.ws_endpoint,
        timeout_ms=settings.timeout_ms,
    )


def calculate_taxes(
    request: CalculationRequest,
    settings: Optional[CheckSettings] = None,
    adapters: Optional[Sequence] = None,
    session_factory: Optional[SessionFactory] = None,
    vocabulary: Optional[LabelVocabulary] = None,
) -> CalculationReport:
    """Cross-checked withholding breakdown for one request.

    Args:
        request: Validated request
        settings: Policy and browser settings (default: settings.json)
        adapters: (source A, source B) (default: paycheckcity, smartasset)
        session_factory: Session context-manager factory (default: browser)
        vocabulary: Label vocabulary (default: configured vocabulary.yaml)

    Returns:
        CalculationReport; falsy when attempts were exhausted
    """
    if settings is None:
        settings = get_check_settings()
    if vocabulary is None:
        vocabulary = load_vocabulary(Path(settings.vocabulary) if settings.vocabulary else None)
    if adapters is None:
        from ..adapters import default_adapters
        adapters = default_adapters()
    if session_factory is None:
        session_factory = browser_session_factory(settings)

    logger.info(
        f"Calculating salary={request.salary:.2f} state={request.state} "
        f"filing_status={request.filing_status.value} "
        f"sources={[a.name for a in adapters]}"
    )

    return acquire_with_retry(
        request,
        adapters,
        vocabulary,
        session_factory=session_factory,
        max_attempts=settings.max_attempts,
        tolerance_pct=settings.tolerance_pct,
        exclude_net_pay=settings.exclude_net_pay,
    )
