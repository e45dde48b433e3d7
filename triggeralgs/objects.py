"""Trigger data objects and the sliding windows the makers accumulate them in."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any


class PrimitiveType(enum.IntEnum):
    UNKNOWN = 0
    TPC = 1
    PDS = 2


class PrimitiveAlgorithm(enum.IntEnum):
    UNKNOWN = 0
    SIMPLE_THRESHOLD = 1
    ABS_RUNNING_SUM = 2


class ActivityType(enum.IntEnum):
    UNKNOWN = 0
    TPC = 1
    PDS = 2


class ActivityAlgorithm(enum.IntEnum):
    UNKNOWN = 0
    SUPERNOVA = 1
    PRESCALE = 2
    ADC_SIMPLE_WINDOW = 3
    HORIZONTAL_MUON = 4
    MICHEL_ELECTRON = 5
    DBSCAN = 6
    PLANE_COINCIDENCE = 7
    BUNDLE = 8
    CHANNEL_DISTANCE = 9
    CHANNEL_ADJACENCY = 10


class CandidateType(enum.IntEnum):
    UNKNOWN = 0
    TIMING = 1
    TPC_LOW_E = 2
    SUPERNOVA = 3
    RANDOM = 4
    PRESCALE = 5
    ADC_SIMPLE_WINDOW = 6
    HORIZONTAL_MUON = 7
    MICHEL_ELECTRON = 8
    PLANE_COINCIDENCE = 9
    DBSCAN = 10
    CHANNEL_DISTANCE = 11
    BUNDLE = 12
    CHANNEL_ADJACENCY = 13


class CandidateAlgorithm(enum.IntEnum):
    UNKNOWN = 0
    SUPERNOVA = 1
    HSI_EVENT_TO_TC = 2
    PRESCALE = 3
    ADC_SIMPLE_WINDOW = 4
    HORIZONTAL_MUON = 5
    MICHEL_ELECTRON = 6
    PLANE_COINCIDENCE = 7
    CUSTOM = 8
    DBSCAN = 9
    CHANNEL_DISTANCE = 10
    BUNDLE = 11
    CHANNEL_ADJACENCY = 12


class BadConfiguration(Exception):
    """Raised when a maker is given a configuration it cannot work with."""

    def __init__(self, algorithm: str) -> None:
        super().__init__(f"Bad configuration for trigger algorithm {algorithm}")
        self.algorithm = algorithm


@dataclass(frozen=True)
class TriggerPrimitive:
    """A single hit found on one channel."""

    time_start: int = 0
    time_peak: int = 0
    time_over_threshold: int = 0
    channel: int = 0
    adc_integral: int = 0
    adc_peak: int = 0
    detid: int = 0
    type: PrimitiveType = PrimitiveType.UNKNOWN
    algorithm: PrimitiveAlgorithm = PrimitiveAlgorithm.UNKNOWN
    version: int = 1
    flag: int = 0


@dataclass
class TriggerActivity:
    """A group of primitives judged to belong together."""

    time_start: int = 0
    time_end: int = 0
    time_peak: int = 0
    time_activity: int = 0
    channel_start: int = 0
    channel_end: int = 0
    channel_peak: int = 0
    adc_integral: int = 0
    adc_peak: int = 0
    detid: int = 0
    type: ActivityType = ActivityType.UNKNOWN
    algorithm: ActivityAlgorithm = ActivityAlgorithm.UNKNOWN
    version: int = 1
    inputs: list[TriggerPrimitive] = field(default_factory=list)


@dataclass
class TriggerCandidate:
    """A group of activities that may warrant a readout."""

    time_start: int = 0
    time_end: int = 0
    time_candidate: int = 0
    detid: int = 0
    type: CandidateType = CandidateType.UNKNOWN
    algorithm: CandidateAlgorithm = CandidateAlgorithm.UNKNOWN
    version: int = 1
    inputs: list[TriggerActivity] = field(default_factory=list)


@dataclass
class TriggerDecision:
    """The final decision to read out a time range."""

    time_start: int = 0
    time_end: int = 0
    time_trigger: int = 0
    trigger_number: int = 0
    run_number: int = 0
    trigger_type: int = 0
    detid: int = 0
    algorithm: int = 0
    version: int = 1
    inputs: list[TriggerCandidate] = field(default_factory=list)


@dataclass
class _Window(ABC):
    time_start: int = 0
    adc_integral: int = 0
    inputs: list[Any] = field(default_factory=list)
    channel_states: Counter = field(default_factory=Counter)

    @staticmethod
    @abstractmethod
    def _channels(item: Any) -> Iterable[int]:
        """Channels an item contributes to the window."""

    def _is_empty(self) -> bool:
        return not self.inputs

    def _add(self, item: Any) -> None:
        self.adc_integral += item.adc_integral
        for channel in self._channels(item):
            self.channel_states[channel] += 1
        self.inputs.append(item)

    def _discount(self, item: Any) -> None:
        self.adc_integral -= item.adc_integral
        for channel in self._channels(item):
            self.channel_states[channel] -= 1
            if self.channel_states[channel] <= 0:
                del self.channel_states[channel]

    def _clear(self) -> None:
        self.inputs.clear()
        self.channel_states.clear()
        self.time_start = 0
        self.adc_integral = 0

    def _reset(self, item: Any) -> None:
        self._clear()
        self.time_start = item.time_start
        self._add(item)

    def _move(self, item: Any, window_length: int) -> None:
        cutoff = item.time_start - window_length
        expired = 0
        for old in self.inputs:
            if old.time_start >= cutoff:
                break
            self._discount(old)
            expired += 1
        del self.inputs[:expired]
        if self.inputs:
            self.time_start = self.inputs[0].time_start
            self._add(item)
        else:
            self._reset(item)

    def _n_channels_hit(self) -> int:
        return len(self.channel_states)


@dataclass
class TPWindow(_Window):
    """A time window of trigger primitives with running totals."""

    @staticmethod
    def _channels(item: TriggerPrimitive) -> Iterable[int]:
        return (item.channel,)

    def is_empty(self) -> bool:
        return self._is_empty()

    def add(self, tp: TriggerPrimitive) -> None:
        self._add(tp)

    def clear(self) -> None:
        self._clear()

    def reset(self, tp: TriggerPrimitive) -> None:
        self._reset(tp)

    def move(self, tp: TriggerPrimitive, window_length: int) -> None:
        """Drop primitives older than the window and add ``tp``."""
        self._move(tp, window_length)

    def n_channels_hit(self) -> int:
        return self._n_channels_hit()


@dataclass
class TAWindow(_Window):
    """A time window of trigger activities with running totals."""

    @staticmethod
    def _channels(item: TriggerActivity) -> Iterable[int]:
        return (tp.channel for tp in item.inputs)

    def is_empty(self) -> bool:
        return self._is_empty()

    def add(self, ta: TriggerActivity) -> None:
        self._add(ta)

    def clear(self) -> None:
        self._clear()

    def reset(self, ta: TriggerActivity) -> None:
        self._reset(ta)

    def move(self, ta: TriggerActivity, window_length: int) -> None:
        """Drop activities older than the window and add ``ta``."""
        self._move(ta, window_length)

    def n_channels_hit(self) -> int:
        return self._n_channels_hit()