"""
Streaming accumulator for one generation attempt.

Collects text deltas from a provider stream, re-parses the cumulative
buffer after every delta and reports a snapshot to the observer whenever
the buffer decodes into something that can be displayed. When the stream
ends, ``finalize`` picks the best available final report.

One accumulator belongs to exactly one attempt; never share or reuse it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from infographix.core.exceptions import MalformedOutputError
from infographix.llm.json_repair import REPAIR_FAILED, parse_partial_json, strict_loads

logger = logging.getLogger(__name__)

Report = Dict[str, Any]
PartialCallback = Callable[[Report], None]


def is_displayable_report(value: Any) -> bool:
    """A report can be shown once it has a non-empty title and a sections list."""
    return (
        isinstance(value, dict)
        and bool(value.get("title"))
        and isinstance(value.get("sections"), list)
    )


class StreamAccumulator:
    """
    Feeds provider deltas through the partial JSON parser.

    Usage:
        acc = StreamAccumulator(on_partial=render)
        async for delta in stream:
            acc.feed(delta)
        report = acc.finalize()
    """

    def __init__(self, on_partial: Optional[PartialCallback] = None) -> None:
        self.on_partial = on_partial
        self._full_text = ""
        self.last_valid_partial: Optional[Report] = None
        self.deltas_received = 0
        self.partials_emitted = 0

    @property
    def full_text(self) -> str:
        return self._full_text

    def feed(self, delta: str) -> Optional[Report]:
        """
        Append ``delta`` and try to decode the whole buffer.

        Returns the new snapshot when one was produced (and delivered to
        ``on_partial``), otherwise ``None``.
        """
        if not delta:
            return None

        self.deltas_received += 1
        self._full_text += delta

        partial = parse_partial_json(self._full_text)
        if partial is REPAIR_FAILED or not is_displayable_report(partial):
            return None

        self.last_valid_partial = partial
        self.partials_emitted += 1
        if self.on_partial is not None:
            self.on_partial(partial)
        return partial

    def finalize(self, full_text: Optional[str] = None) -> Report:
        """
        Produce the final report.

        Tries, in order: a strict parse of the complete text, the last
        displayable partial, one more repair pass over the complete text.

        Raises:
            MalformedOutputError: when none of the three yields a report.
        """
        text = self._full_text if full_text is None else full_text

        try:
            final = strict_loads(text)
            if isinstance(final, dict):
                return final
            logger.warning(f"[STREAM] Final output is JSON but not an object ({type(final).__name__})")
        except (ValueError, RecursionError) as e:
            logger.warning(f"[STREAM] Final JSON parse failed, attempting partial recovery: {e}")

        if self.last_valid_partial is not None:
            logger.info(
                f"[STREAM] Using last valid partial with "
                f"{len(self.last_valid_partial.get('sections', []))} sections"
            )
            return self.last_valid_partial

        repaired = parse_partial_json(text)
        if isinstance(repaired, dict):
            logger.info("[STREAM] Recovered report by repairing the complete output")
            return repaired

        logger.error(f"[STREAM] No recoverable report in {len(text)} chars of output")
        raise MalformedOutputError(text_length=len(text))
