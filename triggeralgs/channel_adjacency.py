"""Candidate maker that windows channel-adjacency activities."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .objects import (
    BadConfiguration,
    CandidateAlgorithm,
    CandidateType,
    TAWindow,
    TriggerActivity,
    TriggerCandidate,
)

logger = logging.getLogger(__name__)

_NAME = "TriggerCandidateMakerChannelAdjacencyPlugin"


class TriggerCandidateMakerChannelAdjacency:
    """Emits a candidate when a window of activities passes an ADC or channel threshold."""

    def __init__(self) -> None:
        self.trigger_on_adc = False
        self.trigger_on_n_channels = False
        self.adc_threshold = 1_200_000
        self.n_channels_threshold = 8
        self.window_length = 80_000
        self.readout_window_ticks_before = 30_000
        self.readout_window_ticks_after = 30_000
        self.current_window = TAWindow()
        self.activity_count = 0
        self.tc_number = 0

    def __call__(self, activity: TriggerActivity) -> list[TriggerCandidate]:
        window = self.current_window
        if window.is_empty():
            window.reset(activity)
            self.activity_count += 1
        elif activity.time_start - window.time_start < self.window_length:
            logger.debug("[TCM:CA] Window not yet complete, adding the activity to the window.")
            window.add(activity)
        else:
            logger.debug("[TCM:CA] TAWindow is at required length but threshold not met, shifting window along.")
            window.move(activity, self.window_length)

        out = []
        if self.trigger_on_adc and window.adc_integral > self.adc_threshold:
            self.tc_number += 1
            tc = self.construct_tc()
            logger.debug(
                "[TCM:CA] tc.time_start=%d tc.time_end=%d len(tc.inputs) %d",
                tc.time_start,
                tc.time_end,
                len(tc.inputs),
            )
            out.append(tc)
            window.clear()
        elif self.trigger_on_n_channels and window.n_channels_hit() > self.n_channels_threshold:
            self.tc_number += 1
            out.append(self.construct_tc())
            window.clear()

        self.activity_count += 1
        return out

    def configure(self, config: Mapping[str, Any]) -> None:
        if isinstance(config, Mapping):
            for key in (
                "trigger_on_adc",
                "trigger_on_n_channels",
                "adc_threshold",
                "n_channels_threshold",
                "window_length",
                "readout_window_ticks_before",
                "readout_window_ticks_after",
            ):
                if key in config:
                    setattr(self, key, config[key])
        if not self.trigger_on_adc and not self.trigger_on_n_channels:
            logger.error("[TCM:CA] Not triggering! All trigger flags are false!")
            raise BadConfiguration(_NAME)

    def construct_tc(self) -> TriggerCandidate:
        window = self.current_window
        latest = window.inputs[-1]
        return TriggerCandidate(
            time_start=window.time_start - self.readout_window_ticks_before,
            time_end=window.time_start + self.readout_window_ticks_after,
            time_candidate=window.time_start,
            detid=latest.detid,
            type=CandidateType.CHANNEL_ADJACENCY,
            algorithm=CandidateAlgorithm.CHANNEL_ADJACENCY,
            inputs=list(window.inputs),
        )