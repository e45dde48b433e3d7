"""Makers that pass through every n-th input."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .objects import (
    ActivityAlgorithm,
    ActivityType,
    CandidateAlgorithm,
    CandidateType,
    TriggerActivity,
    TriggerCandidate,
    TriggerPrimitive,
)

logger = logging.getLogger(__name__)


class TriggerActivityMakerPrescale:
    """Turns every n-th primitive into a single-primitive activity."""

    def __init__(self) -> None:
        self.prescale = 1
        self.primitive_count = 0

    def __call__(self, input_tp: TriggerPrimitive) -> list[TriggerActivity]:
        count = self.primitive_count
        self.primitive_count += 1
        if count % self.prescale != 0:
            return []
        logger.debug("[TAM:Pr] Emitting prescaled TriggerActivity %d", count)
        return [
            TriggerActivity(
                time_start=input_tp.time_start,
                time_end=input_tp.time_start + input_tp.time_over_threshold,
                time_peak=input_tp.time_peak,
                time_activity=0,
                channel_start=input_tp.channel,
                channel_end=input_tp.channel,
                channel_peak=input_tp.channel,
                adc_integral=input_tp.adc_integral,
                adc_peak=input_tp.adc_peak,
                detid=input_tp.detid,
                type=ActivityType.TPC,
                algorithm=ActivityAlgorithm.PRESCALE,
                inputs=[input_tp],
            )
        ]

    def configure(self, config: Mapping[str, Any]) -> None:
        if isinstance(config, Mapping) and "prescale" in config:
            self.prescale = config["prescale"]
        logger.info("[TAM:Pr] Using activity prescale %s", self.prescale)


class TriggerCandidateMakerPrescale:
    """Turns every n-th activity into a candidate with a readout margin."""

    def __init__(self) -> None:
        self.prescale = 1
        self.activity_count = 0
        self.readout_window_ticks_before = 0
        self.readout_window_ticks_after = 0

    def __call__(self, activity: TriggerActivity) -> list[TriggerCandidate]:
        count = self.activity_count
        self.activity_count += 1
        if count % self.prescale != 0:
            return []
        logger.debug("[TCM:Pr] Emitting prescaled TriggerCandidate %d", count)
        return [
            TriggerCandidate(
                time_start=activity.time_start - self.readout_window_ticks_before,
                time_end=activity.time_end + self.readout_window_ticks_after,
                time_candidate=activity.time_start,
                detid=activity.detid,
                type=CandidateType.PRESCALE,
                algorithm=CandidateAlgorithm.PRESCALE,
                inputs=[activity],
            )
        ]

    def configure(self, config: Mapping[str, Any]) -> None:
        # Readout margins are only read alongside a prescale value.
        if isinstance(config, Mapping) and "prescale" in config:
            self.prescale = config["prescale"]
            if "readout_window_ticks_before" in config:
                self.readout_window_ticks_before = config["readout_window_ticks_before"]
            if "readout_window_ticks_after" in config:
                self.readout_window_ticks_after = config["readout_window_ticks_after"]
        logger.info("[TCM:Pr] Using candidate prescale %s", self.prescale)