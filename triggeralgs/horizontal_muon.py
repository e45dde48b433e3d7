"""Activity and candidate makers that look for long horizontal tracks."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .objects import (
    ActivityAlgorithm,
    ActivityType,
    BadConfiguration,
    CandidateAlgorithm,
    CandidateType,
    TAWindow,
    TPWindow,
    TriggerActivity,
    TriggerCandidate,
    TriggerPrimitive,
)

logger = logging.getLogger(__name__)

_TC_NAME = "TriggerCandidateMakerHorizontalMuonPlugin"

# Channel gaps, beyond the neighbouring wire, bridged while tolerance remains.
_TOLERATED_GAPS = frozenset({2, 3, 4, 5})

_TA_SETTINGS = (
    "trigger_on_adc",
    "trigger_on_n_channels",
    "adc_threshold",
    "n_channels_threshold",
    "window_length",
    "trigger_on_adjacency",
    "adj_tolerance",
    "adjacency_threshold",
    "print_tp_info",
    "prescale",
    "trigger_on_tot",
    "tot_threshold",
)

_TC_SETTINGS = (
    "trigger_on_adc",
    "trigger_on_n_channels",
    "adc_threshold",
    "n_channels_threshold",
    "window_length",
    "readout_window_ticks_before",
    "readout_window_ticks_after",
)


class TriggerActivityMakerHorizontalMuon:
    """Builds activities from windows of primitives with large ADC, multiplicity or adjacency."""

    def __init__(self) -> None:
        self.trigger_on_adc = False
        self.trigger_on_n_channels = False
        self.trigger_on_adjacency = True
        self.trigger_on_tot = False
        self.adc_threshold = 1_200_000
        self.n_channels_threshold = 8
        self.adj_tolerance = 4
        self.adjacency_threshold = 15
        self.window_length = 8000
        self.tot_threshold = 2000
        self.prescale = 1
        self.print_tp_info = False
        self.max_adjacency = 0
        self.ta_count = 0
        self.current_window = TPWindow()

    def __call__(self, input_tp: TriggerPrimitive) -> list[TriggerActivity]:
        window = self.current_window
        if self.print_tp_info:
            logger.debug(
                "[TAM:HM] TP Start Time: %d, TP ADC Sum: %d, TP TOT: %d, TP ADC Peak: %d, TP Offline Channel ID: %d",
                input_tp.time_start,
                input_tp.adc_integral,
                input_tp.time_over_threshold,
                input_tp.adc_peak,
                input_tp.channel,
            )
            logger.debug("[TAM:HM] Adjacency of current window is: %d", self.check_adjacency())

        if window.is_empty():
            window.reset(input_tp)
            return []

        out: list[TriggerActivity] = []
        if input_tp.time_start - window.time_start < self.window_length:
            window.add(input_tp)
        elif window.adc_integral > self.adc_threshold and self.trigger_on_adc:
            self._emit_prescaled(input_tp, out)
            if out:
                logger.debug(
                    "[TAM:HM] Emitting ADC threshold trigger with %d window ADC integral.",
                    out[0].adc_integral,
                )
        elif window.n_channels_hit() > self.n_channels_threshold and self.trigger_on_n_channels:
            n_channels = window.n_channels_hit()
            self._emit_prescaled(input_tp, out)
            if out:
                logger.debug("[TAM:HM] Emitting multiplicity trigger with %d unique channels hit.", n_channels)
        elif self.trigger_on_adjacency and (adjacency := self.check_adjacency()) > self.adjacency_threshold:
            self.ta_count += 1
            if self.ta_count % self.prescale == 0:
                self.max_adjacency = max(self.max_adjacency, adjacency)
                logger.debug(
                    "[TAM:HM] Emitting track and multiplicity TA with adjacency %d and multiplicity %d. "
                    "The ADC integral of this TA is %d and the longest track seen so far is %d",
                    adjacency,
                    window.n_channels_hit(),
                    window.adc_integral,
                    self.max_adjacency,
                )
                out.append(self.construct_ta())
                window.reset(input_tp)
        elif self.trigger_on_tot and input_tp.time_over_threshold > self.tot_threshold:
            logger.debug(
                "[TAM:HM] Emitting a TA due to a TP with a very large time over threshold: "
                "%d ticks and offline channel: %d",
                input_tp.time_over_threshold,
                input_tp.channel,
            )
            out.append(self.construct_ta())
            window.reset(input_tp)
        else:
            window.move(input_tp, self.window_length)
        return out

    def _emit_prescaled(self, input_tp: TriggerPrimitive, out: list[TriggerActivity]) -> None:
        self.ta_count += 1
        if self.ta_count % self.prescale == 0:
            out.append(self.construct_ta())
            self.current_window.reset(input_tp)

    def configure(self, config: Mapping[str, Any]) -> None:
        if isinstance(config, Mapping):
            for key in _TA_SETTINGS:
                if key in config:
                    setattr(self, key, config[key])

    def construct_ta(self) -> TriggerActivity:
        """Build an activity from the primitives in the current window."""
        window = self.current_window
        last = window.inputs[-1]
        ta = TriggerActivity(
            time_start=last.time_start,
            time_end=last.time_start + last.time_over_threshold,
            time_peak=last.time_peak,
            time_activity=last.time_peak,
            channel_start=last.channel,
            channel_end=last.channel,
            channel_peak=last.channel,
            adc_integral=window.adc_integral,
            adc_peak=last.adc_integral,
            detid=last.detid,
            type=ActivityType.TPC,
            algorithm=ActivityAlgorithm.HORIZONTAL_MUON,
            inputs=list(window.inputs),
        )
        for tp in ta.inputs:
            ta.time_start = min(ta.time_start, tp.time_start)
            ta.time_end = max(ta.time_end, tp.time_start + tp.time_over_threshold)
            ta.channel_start = min(ta.channel_start, tp.channel)
            ta.channel_end = max(ta.channel_end, tp.channel)
            if tp.adc_peak > ta.adc_peak:
                ta.time_peak = tp.time_peak
                ta.adc_peak = tp.adc_peak
                ta.channel_peak = tp.channel
        return ta

    def check_adjacency(self) -> int:
        """Longest run of consecutive hit channels, bridging small gaps up to the tolerance."""
        channels = sorted(tp.channel for tp in self.current_window.inputs)
        adj = 1
        longest = 0
        tol_count = 0
        for channel, next_channel in zip(channels, channels[1:] + channels[:1]):
            if next_channel == 0:
                next_channel = channel - 1
            gap = next_channel - channel
            if gap == 0:
                continue
            if gap == 1:
                adj += 1
            elif gap in _TOLERATED_GAPS and tol_count < self.adj_tolerance:
                adj += 1
                tol_count += gap
            else:
                longest = max(longest, adj)
                adj = 1
                tol_count = 0
        return longest

    def check_tot(self) -> int:
        """Summed time over threshold of the primitives in the current window."""
        return sum(tp.time_over_threshold for tp in self.current_window.inputs)


class TriggerCandidateMakerHorizontalMuon:
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
            logger.debug("[TCM:HM] Window not yet complete, adding the activity to the window.")
            window.add(activity)
        else:
            logger.debug("[TCM:HM] TAWindow is at required length but threshold not met, shifting window along.")
            window.move(activity, self.window_length)

        out = []
        if window.adc_integral > self.adc_threshold and self.trigger_on_adc:
            self.tc_number += 1
            tc = self.construct_tc()
            logger.debug(
                "[TCM:HM] tc.time_start=%d tc.time_end=%d len(tc.inputs) %d",
                tc.time_start,
                tc.time_end,
                len(tc.inputs),
            )
            out.append(tc)
            window.clear()
        elif window.n_channels_hit() > self.n_channels_threshold and self.trigger_on_n_channels:
            self.tc_number += 1
            out.append(self.construct_tc())
            window.clear()

        self.activity_count += 1
        return out

    def configure(self, config: Mapping[str, Any]) -> None:
        if isinstance(config, Mapping):
            for key in _TC_SETTINGS:
                if key in config:
                    setattr(self, key, config[key])
        if self.trigger_on_adc and self.trigger_on_n_channels:
            logger.error("[TCM:HM] Triggering on ADC count and number of channels is not supported.")
            raise BadConfiguration(_TC_NAME)
        if not self.trigger_on_adc and not self.trigger_on_n_channels:
            logger.error("[TCM:HM] Not triggering! All trigger flags are false!")
            raise BadConfiguration(_TC_NAME)

    def construct_tc(self) -> TriggerCandidate:
        window = self.current_window
        latest = window.inputs[-1]
        return TriggerCandidate(
            time_start=window.time_start - self.readout_window_ticks_before,
            time_end=window.time_start + self.readout_window_ticks_after,
            time_candidate=window.time_start,
            detid=latest.detid,
            type=CandidateType.HORIZONTAL_MUON,
            algorithm=CandidateAlgorithm.HORIZONTAL_MUON,
            inputs=list(window.inputs),
        )