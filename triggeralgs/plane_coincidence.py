"""Activity and candidate makers that look for coincident activity across wire planes."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
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

_TC_NAME = "TriggerCandidateMakerPlaneCoincidencePlugin"

# Plane numbers as returned by a channel map.
PLANE_U = 0
PLANE_Y = 1
PLANE_Z = 2

# Channel gaps, beyond the neighbouring wire, bridged while tolerance remains.
_TOLERATED_GAPS = frozenset({2, 3})

_TA_SETTINGS = (
    "trigger_on_adc",
    "trigger_on_n_channels",
    "adc_threshold",
    "n_channels_threshold",
    "window_length",
    "trigger_on_adjacency",
    "adj_tolerance",
    "adjacency_threshold",
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


class TriggerActivityMakerPlaneCoincidence:
    """Emits an activity when summed ADC over all planes is large and collection hits are adjacent.

    ``plane_of`` maps an offline channel to its plane: 0 for the first
    induction plane (U), 1 for the second (Y), 2 for collection (Z); any
    other value marks an unconnected channel.
    """

    def __init__(self, plane_of: Callable[[int], int]) -> None:
        self.plane_of = plane_of
        self.trigger_on_adc = False
        self.trigger_on_n_channels = False
        self.trigger_on_adjacency = True
        self.adc_threshold = 1_200_000
        self.n_channels_threshold = 8
        self.window_length = 8000
        self.adj_tolerance = 3
        self.adjacency_threshold = 15
        self.primitive_count = 0
        self.induction1_window = TPWindow()
        self.induction2_window = TPWindow()
        self.collection_window = TPWindow()

    def _windows(self) -> dict[int, TPWindow]:
        return {
            PLANE_U: self.induction1_window,
            PLANE_Y: self.induction2_window,
            PLANE_Z: self.collection_window,
        }

    def __call__(self, input_tp: TriggerPrimitive) -> list[TriggerActivity]:
        plane = self.plane_of(input_tp.channel)
        windows = self._windows()
        window = windows.get(plane)

        if window is not None and window.is_empty():
            window.reset(input_tp)
            self.primitive_count += 1
            return []

        if window is not None and input_tp.time_start - window.time_start < self.window_length:
            window.add(input_tp)

        collection = self.collection_window
        out: list[TriggerActivity] = []
        collection_complete = input_tp.time_start - collection.time_start > self.window_length
        total_adc = sum(w.adc_integral for w in windows.values())

        if not collection_complete:
            pass
        elif total_adc > self.adc_threshold and self.check_adjacency(collection) >= self.adjacency_threshold:
            logger.debug(
                "[TAM:PC] Emitting low energy trigger with %d U %d Y induction ADC sums and %d adjacent collection hits.",
                self.induction1_window.adc_integral,
                self.induction2_window.adc_integral,
                self.check_adjacency(collection),
            )
            logger.debug(
                "[TAM:PC] Collection window: start %d, %d TPs, %d channels, ADC %d, TOT %d",
                collection.time_start,
                len(collection.inputs),
                collection.n_channels_hit(),
                collection.adc_integral,
                self.check_tot(collection),
            )
            out.append(self.construct_ta(collection))
            for window_plane, each in windows.items():
                if window_plane == plane:
                    each.reset(input_tp)
                else:
                    each.clear()
        elif window is not None:
            window.move(input_tp, self.window_length)

        self.primitive_count += 1
        return out

    def configure(self, config: Mapping[str, Any]) -> None:
        if isinstance(config, Mapping):
            for key in _TA_SETTINGS:
                if key in config:
                    setattr(self, key, config[key])

    def construct_ta(self, window: TPWindow) -> TriggerActivity:
        """Build an activity from the primitives in ``window``."""
        latest = window.inputs[-1]
        return TriggerActivity(
            time_start=window.time_start,
            time_end=latest.time_start + latest.time_over_threshold,
            time_peak=latest.time_peak,
            time_activity=latest.time_peak,
            channel_start=latest.channel,
            channel_end=latest.channel,
            channel_peak=latest.channel,
            adc_integral=window.adc_integral,
            adc_peak=latest.adc_peak,
            detid=latest.detid,
            type=ActivityType.TPC,
            algorithm=ActivityAlgorithm.PLANE_COINCIDENCE,
            inputs=list(window.inputs),
        )

    def check_adjacency(self, window: TPWindow) -> int:
        """Longest run of consecutive hit channels in ``window``, bridging small gaps."""
        channels = sorted(tp.channel for tp in window.inputs)
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

    def check_tot(self, window: TPWindow) -> int:
        """Summed time over threshold of the primitives in ``window``."""
        return sum(tp.time_over_threshold for tp in window.inputs)


class TriggerCandidateMakerPlaneCoincidence:
    """Emits candidates from windows of plane-coincidence activities, or passes them through."""

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
                logger.debug("[TCM:PC] Constructing TC. Activity count: %d", self.activity_count)
                tc = self.construct_tc()
                window.clear()
                return [tc]
            return []

        out: list[TriggerCandidate] = []
        if activity.time_start - window.time_start < self.window_length:
            window.add(activity)
        elif window.adc_integral > self.adc_threshold and self.trigger_on_adc:
            logger.debug("[TCM:PC] ADC integral in window is greater than specified threshold.")
            out.append(self.construct_tc())
            window.reset(activity)
        elif window.n_channels_hit() > self.n_channels_threshold and self.trigger_on_n_channels:
            self.tc_number += 1
            window.reset(activity)
            logger.info("[TCM:PC] Should not see this!")
        else:
            logger.debug("[TCM:PC] TAWindow is at required length but threshold not met, shifting window along.")
            window.move(activity, self.window_length)

        self.activity_count += 1
        return out

    def configure(self, config: Mapping[str, Any]) -> None:
        if isinstance(config, Mapping):
            for key in _TC_SETTINGS:
                if key in config:
                    setattr(self, key, config[key])
        if self.trigger_on_n_channels:
            logger.error("[TCM:PC] Using trigger_on_n_channels is not supported.")
            raise BadConfiguration(_TC_NAME)
        if not self.trigger_on_adc:
            logger.debug("[TCM:PC] Both trigger flags are false. Passing TAs through 1:1.")

    def construct_tc(self) -> TriggerCandidate:
        window = self.current_window
        latest = window.inputs[-1]
        last_tp = latest.inputs[-1]
        return TriggerCandidate(
            time_start=window.time_start - self.readout_window_ticks_before,
            time_end=last_tp.time_start + last_tp.time_over_threshold + self.readout_window_ticks_after,
            time_candidate=window.time_start,
            detid=latest.detid,
            type=CandidateType.PLANE_COINCIDENCE,
            algorithm=CandidateAlgorithm.PLANE_COINCIDENCE,
            inputs=list(window.inputs),
        )