"""Decision maker that turns each candidate into a decision."""

from __future__ import annotations

import time

from .objects import TriggerCandidate, TriggerDecision

_CLOCK_HZ = 62_500_000
_UINT32 = 1 << 32


class TriggerDecisionMakerSupernova:
    """Emits one decision per candidate, stamped with the current clock tick."""

    def __call__(self, candidate: TriggerCandidate) -> list[TriggerDecision]:
        algorithm = int(time.monotonic() * _CLOCK_HZ) % _UINT32
        return [
            TriggerDecision(
                time_start=candidate.time_start,
                time_end=candidate.time_end,
                time_trigger=candidate.time_candidate,
                trigger_number=0,
                run_number=0,
                trigger_type=0,
                detid=0,
                algorithm=algorithm,
                version=candidate.version,
                inputs=[candidate],
            )
        ]