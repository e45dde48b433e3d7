import pytest

from triggeralgs.channel_adjacency import TriggerCandidateMakerChannelAdjacency
from triggeralgs.objects import (
    BadConfiguration,
    CandidateAlgorithm,
    TriggerActivity,
    TriggerPrimitive,
)

BEFORE = 5
AFTER = 7


def make_ta(start, adc=0, channels=(0,), detid=0):
    return TriggerActivity(
        time_start=start,
        time_end=start + 3,
        adc_integral=adc,
        detid=detid,
        inputs=[TriggerPrimitive(time_start=start, channel=c) for c in channels],
    )


def adc_maker(threshold=100, window_length=1000):
    maker = TriggerCandidateMakerChannelAdjacency()
    maker.configure(
        {
            "trigger_on_adc": True,
            "trigger_on_n_channels": False,
            "adc_threshold": threshold,
            "window_length": window_length,
            "readout_window_ticks_before": BEFORE,
            "readout_window_ticks_after": AFTER,
        }
    )
    return maker


def test_all_flags_false_is_rejected():
    maker = TriggerCandidateMakerChannelAdjacency()
    with pytest.raises(BadConfiguration):
        maker.configure({"trigger_on_adc": False, "trigger_on_n_channels": False})


def test_single_activity_over_threshold_triggers():
    maker = adc_maker(threshold=100)
    ta = make_ta(50, adc=150, detid=2)
    (tc,) = maker(ta)
    assert tc.time_start == ta.time_start - BEFORE
    assert tc.time_end == ta.time_start + AFTER
    assert tc.time_candidate == ta.time_start
    assert tc.detid == ta.detid
    assert tc.inputs == [ta]
    assert tc.algorithm == CandidateAlgorithm.CHANNEL_ADJACENCY
    assert maker.current_window.is_empty()


def test_adc_accumulates_within_window():
    maker = adc_maker(threshold=100)
    first, second = make_ta(50, adc=60), make_ta(60, adc=60)
    assert maker(first) == []
    (tc,) = maker(second)
    assert tc.inputs == [first, second]
    assert tc.time_candidate == first.time_start


def test_channel_multiplicity_trigger():
    maker = TriggerCandidateMakerChannelAdjacency()
    maker.configure(
        {"trigger_on_adc": False, "trigger_on_n_channels": True, "n_channels_threshold": 2, "window_length": 1000}
    )
    ta1 = make_ta(0, channels=(1, 2))
    ta2 = make_ta(10, channels=(3,))
    assert maker(ta1) == []
    (tc,) = maker(ta2)
    assert tc.inputs == [ta1, ta2]


def test_window_slides_past_old_activities():
    maker = adc_maker(threshold=100, window_length=10)
    old = make_ta(0, adc=60, channels=(1,))
    new = make_ta(100, adc=60, channels=(3,))
    assert maker(old) == []
    assert maker(new) == []
    assert maker.current_window.inputs == [new]
    assert maker.current_window.adc_integral == new.adc_integral