"""Acquire both breakdowns and retry until they agree.

State machine per request:

    Attempting(n) -> Success             (sources agree within tolerance)
                  -> Attempting(n + 1)   (mismatch or acquisition error, n < max)
                  -> Exhausted           (n == max)

Each attempt redoes the full acquisition from both sources inside one
session; nothing is carried over from a previous attempt. Exhaustion is
returned as a failed CalculationReport, not raised.
"""

import logging
from contextlib import nullcontext
from typing import Callable, ContextManager, Optional, Sequence

from .errors import AcquisitionError
from .normalize import normalize, source_vocabulary
from .reconcile import reconcile
from .schemas import (
    AttemptOutcome,
    CalculationReport,
    CalculationRequest,
    LabelVocabulary,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_TOLERANCE_PCT = 1.5

SessionFactory = Callable[[], ContextManager]


def run_attempt(
    attempt: int,
    request: CalculationRequest,
    adapters: Sequence,
    vocabulary: LabelVocabulary,
    session_factory: SessionFactory,
    tolerance_pct: float,
    exclude_net_pay: bool,
) -> AttemptOutcome:
    """Run one acquisition + normalize + reconcile pass.

    Both adapters run one after the other against the same session, which
    is released before this returns.
    """
    source_a, source_b = adapters
    vocab_a = source_vocabulary(vocabulary, source_a.name)
    vocab_b = source_vocabulary(vocabulary, source_b.name)

    try:
        with session_factory() as session:
            raw_a = source_a.fetch(session, request)
            raw_b = source_b.fetch(session, request)
    except AcquisitionError as e:
        logger.warning(f"Attempt {attempt}: acquisition failed ({e})")
        return AttemptOutcome(
            attempt=attempt,
            kind="source_failure",
            source=e.source,
            reason=e.message,
        )

    breakdown_a = normalize(raw_a, vocab_a, source=source_a.name)
    breakdown_b = normalize(raw_b, vocab_b, source=source_b.name)
    result = reconcile(
        breakdown_a,
        breakdown_b,
        request.salary,
        tolerance_pct,
        exclude_net_pay=exclude_net_pay,
    )

    if result.within_threshold:
        logger.info(f"Attempt {attempt}: sources agree within {tolerance_pct} pts")
        return AttemptOutcome(attempt=attempt, kind="success", result=result)

    worst = result.worst
    if worst is None:
        reason = "no comparable categories"
    else:
        reason = f"{worst.category.value} differs by {worst.deviation:.2f} pts"
    logger.warning(f"Attempt {attempt}: sources disagree ({reason})")
    return AttemptOutcome(attempt=attempt, kind="mismatch", result=result, reason=reason)


def acquire_with_retry(
    request: CalculationRequest,
    adapters: Sequence,
    vocabulary: LabelVocabulary,
    session_factory: Optional[SessionFactory] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    tolerance_pct: float = DEFAULT_TOLERANCE_PCT,
    exclude_net_pay: bool = True,
) -> CalculationReport:
    """Fetch from both sources and reconcile, up to max_attempts times.

    Args:
        request: Salary and filing parameters, passed unchanged to both sources
        adapters: (source A, source B); A's categories shape the merged result
        vocabulary: Label vocabulary holding both sources
        session_factory: Returns a context manager yielding the session handed
                         to the adapters (defaults to no session)
        max_attempts: Attempt budget (count-based, no wall-clock limit)
        tolerance_pct: Max percentage-point deviation per category
        exclude_net_pay: Leave Net Pay out of the threshold check

    Returns:
        CalculationReport - ok with the agreeing attempt's result, or a
        failure report listing every attempt
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
    if len(adapters) != 2:
        raise ValueError(f"Expected exactly two adapters, got {len(adapters)}")
    if session_factory is None:
        session_factory = nullcontext

    attempts = []
    for attempt in range(1, max_attempts + 1):
        logger.info(f"Attempt {attempt}/{max_attempts}")
        outcome = run_attempt(
            attempt,
            request,
            adapters,
            vocabulary,
            session_factory,
            tolerance_pct,
            exclude_net_pay,
        )
        attempts.append(outcome)

        if outcome.kind == "success":
            return CalculationReport(ok=True, result=outcome.result, attempts=attempts)

    reached_reconcile = any(o.kind == "mismatch" for o in attempts)
    reason = "mismatch" if reached_reconcile else "source_failure"
    logger.error(f"Giving up after {max_attempts} attempt(s): {reason}")
    return CalculationReport(ok=False, attempts=attempts, reason=reason)
