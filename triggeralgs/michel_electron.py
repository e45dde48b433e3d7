"""Activity maker that looks for Michel electron candidates in windows of primitives."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from .objects import (
    ActivityAlgorithm,
    ActivityType,
    TPWindow,
    TriggerActivity,
    TriggerPrimitive,
)

logger = logging.getLogger(__name__)

# Channel gaps, beyond the neighbouring wire, bridged while tolerance remains.
_TOLERATED_GAPS = frozenset({2, 3, 4, 5})

# Width of the running mean used to smooth ADC values along a track.
_CONVOLVE_WIDTH = 6

# Conversion factors from channel and tick separations to millimetres.
_WIRE_PITCH_MM = 4.67
_TICK_TO_MM = 0.028

# Limits on hit separation for a gradient to be taken between two hits.
_MAX_TICK_SEPARATION = 1000
_MAX_CHANNEL_SEPARATION = 6

_MIN_GRADIENTS = 10
_KINK_FACTOR = 2.5

_SETTINGS = (
    "trigger_on_adc",
    "trigger_on_n_channels",
    "adc_threshold",
    "n_channels_threshold",
    "window_length",
    "trigger_on_adjacency",
    "adj_tolerance",
    "adjacency_threshold",
)


class TriggerActivityMakerMichelElectron:
    """Emits an activity when a long track in the window shows a Bragg peak and a kink."""

    def __init__(self) -> None:
        self.trigger_on_adc = False
        self.trigger_on_n_channels = False
        self.trigger_on_adjacency = True
        self.adc_threshold = 1_200_000
        self.n_channels_threshold = 8
        self.window_length = 8000
        self.adj_tolerance = 4
        self.adjacency_threshold = 15
        self.primitive_count = 0
        self.current_window = TPWindow()

    def __call__(self, input_tp: TriggerPrimitive) -> list[TriggerActivity]:
        window = self.current_window
        if window.is_empty():
            window.reset(input_tp)
            self.primitive_count += 1
            return []

        out: list[TriggerActivity] = []
        if input_tp.time_start - window.time_start < self.window_length:
            window.add(input_tp)
        elif len(track_hits := self.longest_activity()) > self.adjacency_threshold:
            # The window is full and holds a long track; it is neither grown
            # nor moved unless the track passes both checks.
            if self.check_bragg_peak(track_hits) and self.check_kinks(track_hits):
                logger.debug("[TAM:ME] Emitting a trigger for candidate Michel event.")
                out.append(self.construct_ta())
                window.reset(input_tp)
        else:
            window.move(input_tp, self.window_length)

        self.primitive_count += 1
        return out

    def configure(self, config: Mapping[str, Any]) -> None:
        if isinstance(config, Mapping):
            for key in _SETTINGS:
                if key in config:
                    setattr(self, key, config[key])

    def construct_ta(self) -> TriggerActivity:
        """Build an activity from the primitives in the current window."""
        window = self.current_window
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
            algorithm=ActivityAlgorithm.MICHEL_ELECTRON,
            inputs=list(window.inputs),
        )

    def longest_activity(self) -> list[TriggerPrimitive]:
        """Hits of the longest run of adjacent channels in the current window."""
        hits = sorted(self.current_window.inputs, key=lambda tp: tp.channel)
        if not hits:
            return []
        wrapped = hits[1:] + hits[:1]

        track: list[TriggerPrimitive] = []
        final: list[TriggerPrimitive] = []
        adj = 1
        longest = 0
        tol_count = 0
        for hit, following in zip(hits, wrapped):
            if not track:
                track.append(hit)
            channel = hit.channel
            next_channel = following.channel
            if next_channel == 0:
                next_channel = channel - 1
            gap = next_channel - channel
            if gap == 0:
                track.append(following)
            elif gap == 1:
                track.append(following)
                adj += 1
            elif gap in _TOLERATED_GAPS and tol_count < self.adj_tolerance:
                track.append(following)
                adj += 1
                tol_count += gap
            else:
                if adj > longest:
                    longest = adj
                    final = list(track)
                adj = 1
                tol_count = 0
                track = []
        return final

    def check_bragg_peak(self, track_hits: Sequence[TriggerPrimitive]) -> bool:
        """Whether the largest above-baseline charge cluster sits at an end of the track."""
        n = len(track_hits)
        if n == 0:
            return False
        means = [
            sum(track_hits[j % n].adc_integral for j in range(i, i + _CONVOLVE_WIDTH)) / _CONVOLVE_WIDTH
            for i in range(n)
        ]
        pedestal = sum(means) / n

        charge = 0.0
        dumps: list[float] = []
        for value in means:
            if value > pedestal:
                charge += value
            elif value < pedestal and charge != 0:
                dumps.append(charge)
                charge = 0.0

        if not dumps:
            return False
        largest = max(dumps)
        return largest == dumps[0] or largest == dumps[-1]

    def check_kinks(self, final_hits: Sequence[TriggerPrimitive]) -> bool:
        """Whether the track gradient at either end departs strongly from its mean."""
        hits = sorted(final_hits, key=lambda tp: tp.channel)

        gradients: list[float] = []
        for first, second in zip(hits, hits[2:]):
            if second.channel == first.channel or second.time_start == first.time_start:
                continue
            dt = second.time_start - first.time_start
            if abs(dt) > _MAX_TICK_SEPARATION or abs(second.channel - first.channel) > _MAX_CHANNEL_SEPARATION:
                continue
            dz = (second.channel - first.channel) * _WIRE_PITCH_MM
            dx = dt * _TICK_TO_MM
            gradients.append(dz / dx)

        if len(gradients) <= _MIN_GRADIENTS:
            return False

        mean_gradients = [(a + b) / 2 for a, b in zip(gradients, gradients[1:])]
        if len(mean_gradients) <= _MIN_GRADIENTS:
            return False

        mean = abs(sum(mean_gradients)) / len(mean_gradients)
        return (
            abs(mean_gradients[0]) + mean > _KINK_FACTOR * mean
            or abs(mean_gradients[-1] + mean) > _KINK_FACTOR * mean
        )