"""Candidate maker that windows Michel electron activities, or passes them through."""

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

_NAME = "TriggerCandidateMakerMichelElectronPlugin"

_SETTINGS = (
    "trigger_on_adc",
    "trigger_on_n_channels",
    "adc_threshold",
    "n_channels_threshold",
    "window_length",
    "readout_window_ticks_before",
    "readout_window_ticks_after",
)


class TriggerCandidateMakerMichelElectron:
    """Emits a candidate when a window of activities passes an ADC threshold.

    With neither trigger flag set, every activity becomes a candidate of its own.
    """

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
            if not self.trigger_on_adc and not self.trigger_on_n_channels:
                logger.debug("[TCM:ME] Constructing TC.")
                tc = self.construct_tc()
                window.clear()
                return [tc]
            return []

        out: list[TriggerCandidate] = []
        if activity.time_start - window.time_start < self.window_length:
            logger.debug("[TCM:ME] Window not yet complete, adding the activity to the window.")
            window.add(activity)
        elif window.adc_integral > self.adc_threshold and self.trigger_on_adc:
            logger.debug("[TCM:ME] ADC integral in window is greater than specified threshold.")
            out.append(self.construct_tc())
            logger.debug("[TCM:ME] Resetting window with activity.")
            window.reset(activity)
        elif window.n_channels_hit() > self.n_channels_threshold and self.trigger_on_n_channels:
            self.tc_number += 1
            window.reset(activity)
            logger.info("[TCM:ME] Should not see this!")
        else:
            logger.debug("[TCM:ME] Window is at required length but threshold not met, shifting window along.")
            window.move(activity, self.window_length)

        self.activity_count += 1
        return out

    def configure(self, config: Mapping[str, Any]) -> None:
        if isinstance(config, Mapping):
            for key in _SETTINGS:
                if key in config:
                    setattr(self, key, config[key])
        if self.trigger_on_adc and self.trigger_on_n_channels:
            logger.error("[TCM:ME] Triggering on ADC count and number of channels is not supported.")
            raise BadConfiguration(_NAME)
        if not self.trigger_on_adc and not self.trigger_on_n_channels:
            logger.debug("[TCM:ME] Both trigger flags are false. Passing TAs through 1:1.")

    def construct_tc(self) -> TriggerCandidate:
        """Build a candidate from the activities in the current window."""
        window = self.current_window
        latest = window.inputs[-1]
        last_tp = latest.inputs[-1]
        return TriggerCandidate(
            time_start=window.time_start - self.readout_window_ticks_before,
            time_end=last_tp.time_start + last_tp.time_over_threshold + self.readout_window_ticks_after,
            time_candidate=window.time_start,
            detid=latest.detid,
            type=CandidateType.MICHEL_ELECTRON,
            algorithm=CandidateAlgorithm.MICHEL_ELECTRON,
            inputs=list(window.inputs),
        )