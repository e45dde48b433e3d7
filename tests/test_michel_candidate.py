import pytest

from triggeralgs.michel_candidate import TriggerCandidateMakerMichelElectron
from triggeralgs.objects import (
    BadConfiguration,
    CandidateAlgorithm,
    CandidateType,
    TriggerActivity,
    TriggerPrimitive,
)


def make_ta(time_start, adc, channel=1, tot=3, detid=2):
    tp = TriggerPrimitive(
        time_start=time_start,
        time_over_threshold=tot,
        channel=channel,
        adc_integral=adc,
        detid=detid,
    )
    return TriggerActivity(time_start=time_start, adc_integral=adc, detid=detid, inputs=[tp])


def test_both_flags_raise():
    maker = TriggerCandidateMakerMichelElectron()
    with pytest.raises(BadConfiguration):
        maker.configure({"trigger_on_adc": True, "trigger_on_n_channels": True})


def test_pass_through_when_no_flags():
    maker = TriggerCandidateMakerMichelElectron()
    maker.configure({"readout_window_ticks_before": 5, "readout_window_ticks_after": 7})
    ta = make_ta(100, 40, tot=9)
    out = maker(ta)
    assert len(out) == 1
    tc = out[0]
    assert tc.inputs == [ta]
    assert tc.time_start + 5 == ta.time_start
    assert tc.time_end == ta.time_start + 9 + 7
    assert tc.time_candidate == ta.time_start
    assert tc.type == CandidateType.MICHEL_ELECTRON
    assert tc.algorithm == CandidateAlgorithm.MICHEL_ELECTRON
    assert maker.current_window.is_empty()


def test_every_activity_passes_through():
    maker = TriggerCandidateMakerMichelElectron()
    tas = [make_ta(t, 10) for t in (1, 2, 3)]
    results = [maker(ta) for ta in tas]
    assert [r[0].inputs for r in results] == [[ta] for ta in tas]


def test_adc_trigger_emits_window():
    maker = TriggerCandidateMakerMichelElectron()
    maker.configure({"trigger_on_adc": True, "adc_threshold": 100, "window_length": 10})
    first, second, third = make_ta(1, 80), make_ta(5, 50), make_ta(20, 10)
    assert maker(first) == []
    assert maker(second) == []
    out = maker(third)
    assert len(out) == 1
    assert out[0].inputs == [first, second]
    assert maker.current_window.inputs == [third]
    assert maker.current_window.time_start == third.time_start


def test_below_threshold_moves_window():
    maker = TriggerCandidateMakerMichelElectron()
    maker.configure({"trigger_on_adc": True, "adc_threshold": 1000, "window_length": 10})
    first, second, third = make_ta(1, 80), make_ta(5, 50), make_ta(14, 10)
    for ta in (first, second):
        assert maker(ta) == []
    assert maker(third) == []
    assert maker.current_window.inputs == [second, third]


def test_channel_branch_resets_without_output():
    maker = TriggerCandidateMakerMichelElectron()
    maker.configure({"trigger_on_n_channels": True, "n_channels_threshold": 1, "window_length": 10})
    a, b, c = make_ta(1, 1, channel=1), make_ta(2, 1, channel=2), make_ta(30, 1, channel=3)
    maker(a)
    maker(b)
    assert maker(c) == []
    assert maker.tc_number == 1
    assert maker.current_window.inputs == [c]