import pytest

from triggeralgs.objects import (
    ActivityAlgorithm,
    CandidateAlgorithm,
    PrimitiveAlgorithm,
    PrimitiveType,
    TriggerActivity,
    TriggerPrimitive,
)
from triggeralgs.prescale import TriggerActivityMakerPrescale
from triggeralgs.registry import make_ta_maker, make_tc_maker, ta_maker_names, tc_maker_names


def _tps():
    return [
        TriggerPrimitive(
            type=PrimitiveType.TPC,
            algorithm=PrimitiveAlgorithm.SIMPLE_THRESHOLD,
            time_start=idx,
            time_peak=1 + idx,
            time_over_threshold=2,
            adc_integral=1000 + idx,
            adc_peak=1000 + idx,
            channel=idx,
            detid=0,
        )
        for idx in range(10)
    ]


def test_factory_prescale_maker_emits_prescale_activities():
    maker = make_ta_maker("TriggerActivityMakerPrescalePlugin")
    activities = []
    for tp in _tps():
        activities.extend(maker(tp))
    assert activities[0].algorithm == ActivityAlgorithm.PRESCALE
    assert len(activities) == 10


def test_make_ta_maker_returns_fresh_instances():
    first = make_ta_maker("TriggerActivityMakerPrescalePlugin")
    second = make_ta_maker("TriggerActivityMakerPrescalePlugin")
    assert isinstance(first, TriggerActivityMakerPrescale)
    assert first is not second
    first(_tps()[0])
    assert first.primitive_count == 1
    assert second.primitive_count == 0


def test_make_tc_maker_by_name():
    maker = make_tc_maker("TriggerCandidateMakerBundleNPlugin")
    maker.configure({"bundle_size": 2})
    assert maker(TriggerActivity(time_start=1, time_end=3)) == []
    result = maker(TriggerActivity(time_start=4, time_end=8))
    assert len(result) == 1
    assert result[0].algorithm == CandidateAlgorithm.BUNDLE
    assert result[0].time_start == 1
    assert result[0].time_end == 8


def test_tc_prescale_maker_from_registry():
    maker = make_tc_maker("TriggerCandidateMakerPrescalePlugin")
    result = maker(TriggerActivity(time_start=5, time_end=9))
    assert len(result) == 1
    assert result[0].algorithm == CandidateAlgorithm.PRESCALE


def test_unknown_names_raise_key_error():
    with pytest.raises(KeyError):
        make_ta_maker("NoSuchPlugin")
    with pytest.raises(KeyError):
        make_tc_maker("TriggerActivityMakerPrescalePlugin")


def test_names_are_sorted_and_usable():
    ta_names = ta_maker_names()
    tc_names = tc_maker_names()
    assert ta_names == sorted(ta_names)
    assert tc_names == sorted(tc_names)
    assert "TriggerActivityMakerPrescalePlugin" in ta_names
    assert "TriggerCandidateMakerPrescalePlugin" in tc_names
    for name in ta_names:
        assert callable(make_ta_maker(name))
    for name in tc_names:
        assert callable(make_tc_maker(name))