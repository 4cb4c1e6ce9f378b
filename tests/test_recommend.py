"""Tests for switchboard/recommend.py — ladder order and mode derivation."""

import pytest

from switchboard.models import Level, Mode, Signals, SwitchId
from switchboard.recommend import derive_mode, derive_recommended_switch


def _signals(**kwargs) -> Signals:
    flags = kwargs.pop("flags", {})
    counts = kwargs.pop("counts", {})
    s = Signals(**kwargs)
    for name, value in flags.items():
        setattr(s.flags, name, value)
    for name, value in counts.items():
        setattr(s.flag_counts_14d, name, value)
    return s


def _pair(rec):
    return rec.recommended_switch_id, rec.alternative_switch_id


def test_low_energy_high_stress_wins_over_everything():
    s = _signals(
        energy_level=Level.LOW,
        stress_level=Level.HIGH,
        flags={"money_stress": True, "overwhelm": True, "env_mess": True},
    )
    assert _pair(derive_recommended_switch(s)) == (SwitchId.MIND, SwitchId.BODY)


def test_low_energy():
    s = _signals(energy_level=Level.LOW, flags={"time_chaos": True})
    assert _pair(derive_recommended_switch(s)) == (SwitchId.BODY, SwitchId.MIND)


@pytest.mark.parametrize("flag", ["overwhelm", "time_chaos"])
def test_overwhelm_or_time_chaos(flag):
    s = _signals(flags={flag: True, "money_stress": True})
    assert _pair(derive_recommended_switch(s)) == (SwitchId.TIME, SwitchId.MIND)


def test_money_stress_count_threshold():
    s = _signals(counts={"money_stress": 2})
    assert _pair(derive_recommended_switch(s)) == (SwitchId.MONEY, SwitchId.TIME)


def test_money_stress_count_below_threshold_falls_through():
    s = _signals(counts={"money_stress": 1})
    assert _pair(derive_recommended_switch(s)) == (SwitchId.BODY, SwitchId.MIND)


def test_money_stress_flag_beats_relationships():
    s = _signals(flags={"money_stress": True, "relationship_drain": True})
    assert _pair(derive_recommended_switch(s)) == (SwitchId.MONEY, SwitchId.TIME)


def test_relationship_drain_beats_environment():
    s = _signals(flags={"relationship_drain": True, "env_mess": True})
    assert _pair(derive_recommended_switch(s)) == (SwitchId.RELATIONSHIPS, SwitchId.MIND)


def test_env_mess():
    s = _signals(flags={"env_mess": True})
    assert _pair(derive_recommended_switch(s)) == (SwitchId.ENVIRONMENT, SwitchId.TIME)


def test_fallback_defaults():
    assert _pair(derive_recommended_switch(Signals())) == (SwitchId.BODY, SwitchId.MIND)


def test_fallback_uses_chosen_switches():
    s = _signals(primary_switch_id=SwitchId.PURPOSE, support_switch_id=SwitchId.IDENTITY)
    rec = derive_recommended_switch(s)
    assert _pair(rec) == (SwitchId.PURPOSE, SwitchId.IDENTITY)
    assert "purpose" in rec.reason


def test_fallback_primary_without_support_pairs_with_mind():
    s = _signals(primary_switch_id=SwitchId.PURPOSE)
    assert _pair(derive_recommended_switch(s)) == (SwitchId.PURPOSE, SwitchId.MIND)


def test_fallback_support_without_primary_pairs_with_body():
    s = _signals(support_switch_id=SwitchId.MONEY)
    assert _pair(derive_recommended_switch(s)) == (SwitchId.BODY, SwitchId.MONEY)


def test_every_branch_has_reason_and_is_deterministic():
    cases = [
        _signals(energy_level=Level.LOW, stress_level=Level.HIGH),
        _signals(energy_level=Level.LOW),
        _signals(flags={"overwhelm": True}),
        _signals(flags={"money_stress": True}),
        _signals(flags={"relationship_drain": True}),
        _signals(flags={"env_mess": True}),
        _signals(primary_switch_id=SwitchId.MIND),
        Signals(),
    ]
    for s in cases:
        first = derive_recommended_switch(s)
        assert first.reason.strip()
        assert derive_recommended_switch(s) == first


@pytest.mark.parametrize("bias", list(Mode))
def test_low_energy_mode_is_restoring_regardless_of_bias(bias):
    assert derive_mode(_signals(energy_level=Level.LOW, mode_bias=bias)) == Mode.RESTORING


def test_low_energy_flag_mode_is_restoring():
    assert derive_mode(_signals(flags={"low_energy": True})) == Mode.RESTORING


def test_stress_or_overwhelm_mode_is_restoring():
    assert derive_mode(_signals(stress_level=Level.HIGH)) == Mode.RESTORING
    assert derive_mode(_signals(flags={"overwhelm": True})) == Mode.RESTORING


def test_mode_follows_bias_otherwise():
    assert derive_mode(Signals()) == Mode.TRAINING
    assert derive_mode(_signals(mode_bias=Mode.MAINTAINING)) == Mode.MAINTAINING
