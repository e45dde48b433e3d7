"""Lookup of trigger makers by their registered plugin names."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .channel_adjacency import TriggerCandidateMakerChannelAdjacency
from .horizontal_muon import (
    TriggerActivityMakerHorizontalMuon,
    TriggerCandidateMakerHorizontalMuon,
)
from .michel_candidate import TriggerCandidateMakerMichelElectron
from .michel_electron import TriggerActivityMakerMichelElectron
from .plane_coincidence import TriggerCandidateMakerPlaneCoincidence
from .prescale import TriggerActivityMakerPrescale, TriggerCandidateMakerPrescale
from .simple_candidates import (
    TriggerCandidateMakerADCSimpleWindow,
    TriggerCandidateMakerBundleN,
    TriggerCandidateMakerChannelDistance,
    TriggerCandidateMakerDBSCAN,
)

_TA_MAKERS: dict[str, Callable[[], Any]] = {
    "TriggerActivityMakerPrescalePlugin": TriggerActivityMakerPrescale,
    "TriggerActivityMakerHorizontalMuonPlugin": TriggerActivityMakerHorizontalMuon,
    "TriggerActivityMakerMichelElectronPlugin": TriggerActivityMakerMichelElectron,
}

_TC_MAKERS: dict[str, Callable[[], Any]] = {
    "TriggerCandidateMakerPrescalePlugin": TriggerCandidateMakerPrescale,
    "TriggerCandidateMakerADCSimpleWindowPlugin": TriggerCandidateMakerADCSimpleWindow,
    "TriggerCandidateMakerBundleNPlugin": TriggerCandidateMakerBundleN,
    "TriggerCandidateMakerChannelAdjacencyPlugin": TriggerCandidateMakerChannelAdjacency,
    "TriggerCandidateMakerChannelDistancePlugin": TriggerCandidateMakerChannelDistance,
    "TriggerCandidateMakerDBSCANPlugin": TriggerCandidateMakerDBSCAN,
    "TriggerCandidateMakerHorizontalMuonPlugin": TriggerCandidateMakerHorizontalMuon,
    "TriggerCandidateMakerMichelElectronPlugin": TriggerCandidateMakerMichelElectron,
    "TriggerCandidateMakerPlaneCoincidencePlugin": TriggerCandidateMakerPlaneCoincidence,
}


def _make(registry: dict[str, Callable[[], Any]], kind: str, name: str) -> Any:
    try:
        factory = registry[name]
    except KeyError:
        raise KeyError(f"No {kind} maker registered under the name {name!r}") from None
    return factory()


def make_ta_maker(name: str) -> Any:
    """Create a fresh activity maker registered under ``name``."""
    return _make(_TA_MAKERS, "activity", name)


def make_tc_maker(name: str) -> Any:
    """Create a fresh candidate maker registered under ``name``."""
    return _make(_TC_MAKERS, "candidate", name)


def ta_maker_names() -> list[str]:
    """Registered activity maker names, sorted."""
    return sorted(_TA_MAKERS)


def tc_maker_names() -> list[str]:
    """Registered candidate maker names, sorted."""
    return sorted(_TC_MAKERS)