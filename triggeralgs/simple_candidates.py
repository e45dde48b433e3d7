"""Candidate makers that group activities by count or pass them through."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .objects import CandidateAlgorithm, CandidateType, TriggerActivity, TriggerCandidate

logger = logging.getLogger(__name__)


class TriggerCandidateMakerADCSimpleWindow:
    """Emits one candidate for every activity."""

    def __init__(self) -> None:
        self.activity_count = 0

    def __call__(self, activity: TriggerActivity) -> list[TriggerCandidate]:
        self.activity_count += 1
        logger.debug("[TCM:ADCSW] Emitting an ADCSimpleWindow TriggerCandidate %d", self.activity_count - 1)
        return [
            TriggerCandidate(
                time_start=activity.time_start,
                time_end=activity.time_end,
                time_candidate=activity.time_activity,
                detid=activity.detid,
                type=CandidateType.ADC_SIMPLE_WINDOW,
                algorithm=CandidateAlgorithm.ADC_SIMPLE_WINDOW,
                inputs=[activity],
            )
        ]

    def configure(self, config: Mapping[str, Any]) -> None:
        """This maker takes no settings."""


class TriggerCandidateMakerBundleN:
    """Bundles a fixed number of consecutive activities into one candidate."""

    def __init__(self) -> None:
        self.bundle_size = 100
        self.current_tc = TriggerCandidate()

    def bundle_condition(self) -> bool:
        return len(self.current_tc.inputs) == self.bundle_size

    def _finish(self) -> TriggerCandidate:
        tc = self.current_tc
        front = tc.inputs[0]
        tc.time_start = front.time_start
        tc.time_end = tc.inputs[-1].time_end
        tc.time_candidate = front.time_start
        tc.detid = front.detid
        tc.type = CandidateType.BUNDLE
        tc.algorithm = CandidateAlgorithm.BUNDLE
        self.current_tc = TriggerCandidate()
        return tc

    def __call__(self, input_ta: TriggerActivity) -> list[TriggerCandidate]:
        self.current_tc.inputs.append(input_ta)
        out = []
        if self.bundle_condition():
            logger.debug("[TC:BN] Emitting BundleN TriggerCandidate with %d TAs.", len(self.current_tc.inputs))
            out.append(self._finish())
        if len(self.current_tc.inputs) > self.bundle_size:
            logger.info("[TC:BN] Emitting large BundleN TriggerCandidate with %d TAs.", len(self.current_tc.inputs))
            out.append(self._finish())
        return out

    def configure(self, config: Mapping[str, Any]) -> None:
        if isinstance(config, Mapping) and "bundle_size" in config:
            self.bundle_size = config["bundle_size"]


class _TPCountCandidateMaker:
    """Groups activities until their primitive count would exceed a limit."""

    _type = CandidateType.UNKNOWN
    _algorithm = CandidateAlgorithm.UNKNOWN

    def __init__(self) -> None:
        self.max_tp_count = 1000
        self.current_tc = TriggerCandidate()
        self.current_tp_count = 0

    def _start_new(self, input_ta: TriggerActivity) -> None:
        self.current_tc = TriggerCandidate(inputs=[input_ta])
        self.current_tp_count = len(input_ta.inputs)

    def _finish(self) -> TriggerCandidate:
        tc = self.current_tc
        first, last = tc.inputs[0], tc.inputs[-1]
        tc.time_start = first.time_start
        tc.time_end = last.time_end
        tc.time_candidate = last.time_start
        tc.detid = first.detid
        tc.type = self._type
        tc.algorithm = self._algorithm
        return tc

    def _process(self, input_ta: TriggerActivity) -> list[TriggerCandidate]:
        if not self.current_tc.inputs:
            self._start_new(input_ta)
            return []
        if len(input_ta.inputs) + self.current_tp_count > self.max_tp_count:
            tc = self._finish()
            self._start_new(input_ta)
            return [tc]
        self.current_tc.inputs.append(input_ta)
        self.current_tp_count += len(input_ta.inputs)
        return []

    def _configure(self, config: Mapping[str, Any]) -> None:
        if "max_tp_count" in config:
            self.max_tp_count = config["max_tp_count"]


class TriggerCandidateMakerChannelDistance(_TPCountCandidateMaker):
    """Candidate maker for channel-distance activities."""

    _type = CandidateType.CHANNEL_DISTANCE
    _algorithm = CandidateAlgorithm.CHANNEL_DISTANCE

    def __call__(self, input_ta: TriggerActivity) -> list[TriggerCandidate]:
        return self._process(input_ta)

    def configure(self, config: Mapping[str, Any]) -> None:
        self._configure(config)


class TriggerCandidateMakerDBSCAN(_TPCountCandidateMaker):
    """Candidate maker for DBSCAN cluster activities."""

    _type = CandidateType.DBSCAN
    _algorithm = CandidateAlgorithm.DBSCAN

    def __call__(self, input_ta: TriggerActivity) -> list[TriggerCandidate]:
        return self._process(input_ta)

    def configure(self, config: Mapping[str, Any]) -> None:
        self._configure(config)