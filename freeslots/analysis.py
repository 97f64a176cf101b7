import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from . import matching
from .enrichment import GeminiClient, Malformed, build_prompt, extract_array
from .models import CommonAvailability, Student

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Remote:
    """Result parsed from the enrichment service, passed through unchecked."""

    result: List[Any]


@dataclass(frozen=True)
class Fallback:
    result: List[CommonAvailability]
    reason: str


AnalysisOutcome = Union[Remote, Fallback]


def _fallback(students: List[Student], reason: str) -> Fallback:
    logger.warning("Falling back to local slot matching: %s", reason)
    return Fallback(result=matching.compute_common_availability(students), reason=reason)


async def analyze_outcome(
    students: List[Student], client: Optional[GeminiClient] = None
) -> AnalysisOutcome:
    """Ask the enrichment service once, or compute locally if that fails.

    Never raises. ``client=None`` skips the remote call.
    """
    students = list(students)

    if client is None:
        return _fallback(students, "enrichment disabled")

    try:
        text = await client.generate(build_prompt(students))
        parsed = extract_array(text)
    except Exception as e:
        return _fallback(students, str(e) or type(e).__name__)

    if isinstance(parsed, Malformed):
        return _fallback(students, parsed.reason)

    logger.info("Using enrichment result for %d students", len(students))
    return Remote(result=parsed.data)


async def analyze_common_slots(
    students: List[Student], client: Optional[GeminiClient] = None
) -> List[Any]:
    """Common free slots per day for ``students``.

    An empty roster gives ``[]``. Otherwise the result is either the
    enrichment service's array or :func:`matching.compute_common_availability`.
    """
    if not students:
        return []
    outcome = await analyze_outcome(students, client)
    return outcome.result
