"""Tests for switchboard/switches.py — status ladder and switch queries."""

from datetime import datetime, timedelta
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from switchboard.errors import ValidationError
from switchboard.fileio import read_json
from switchboard.models import Mode, SWITCH_ORDER, SwitchId, SwitchStatus
from switchboard.switches import POWERED_THRESHOLD, STABLE_THRESHOLD, SwitchBoard, next_status


def test_fresh_board(workspace):
    board = SwitchBoard(workspace)
    states = board.all()
    assert list(states) == list(SWITCH_ORDER)
    for state in states.values():
        assert state.status == SwitchStatus.OFF
        assert state.check_ins == 0
        assert state.streak_days == 0
    assert board.active_switches() == []
    assert board.training_switches() == []
    assert not board.path.exists()


def test_training_ladder(workspace):
    board = SwitchBoard(workspace)
    state = board.start_training("mind")
    assert state.status == SwitchStatus.FLICKERING
    assert state.mode == Mode.TRAINING
    assert state.training_started is not None

    for _ in range(STABLE_THRESHOLD - 1):
        state = board.record_check_in("mind")
    assert state.status == SwitchStatus.FLICKERING
    assert state.check_ins == 6

    state = board.record_check_in("mind")
    assert state.status == SwitchStatus.STABLE
    assert state.check_ins == 7

    for _ in range(POWERED_THRESHOLD - STABLE_THRESHOLD - 1):
        state = board.record_check_in("mind")
    assert state.status == SwitchStatus.STABLE

    state = board.record_check_in("mind")
    assert state.status == SwitchStatus.POWERED
    assert state.check_ins == 14
    assert state.streak_days == 14

    state = board.record_check_in("mind")
    assert state.status == SwitchStatus.POWERED


def test_check_in_on_off_switch_starts_flickering(workspace):
    state = SwitchBoard(workspace).record_check_in(SwitchId.BODY)
    assert state.status == SwitchStatus.FLICKERING
    assert state.check_ins == 1


def test_one_tier_per_check_in(workspace):
    board = SwitchBoard(workspace)
    for _ in range(20):
        board.record_check_in("money")
    board.set_status("money", "off")

    assert board.record_check_in("money").status == SwitchStatus.FLICKERING
    assert board.record_check_in("money").status == SwitchStatus.STABLE
    assert board.record_check_in("money").status == SwitchStatus.POWERED


def test_start_training_resets_powered_to_flickering(workspace):
    board = SwitchBoard(workspace)
    board.set_status("time", "powered")
    board.set_mode("time", "maintaining")
    state = board.start_training("time")
    assert state.status == SwitchStatus.FLICKERING
    assert state.mode == Mode.TRAINING


def test_set_status_and_mode_leave_counters(seeded_workspace):
    board = SwitchBoard(seeded_workspace)
    state = board.set_status("body", SwitchStatus.FLICKERING)
    assert state.check_ins == 9
    assert state.streak_days == 9
    state = board.set_mode("body", Mode.RESTORING)
    assert state.check_ins == 9
    assert state.status == SwitchStatus.FLICKERING


def test_seeded_board(seeded_workspace):
    board = SwitchBoard(seeded_workspace)
    assert board.get("body").status == SwitchStatus.STABLE
    assert board.active_switches() == [SwitchId.BODY, SwitchId.TIME]
    # body is maintaining but stable, time is flickering
    assert board.training_switches() == [SwitchId.TIME]
    assert board.recent_switches() == [SwitchId.TIME, SwitchId.BODY]
    statuses = board.statuses()
    assert statuses[SwitchId.BODY] == SwitchStatus.STABLE
    assert statuses[SwitchId.MONEY] == SwitchStatus.OFF


def test_priority_switches_capped_and_ordered(workspace):
    board = SwitchBoard(workspace)
    for sid in SWITCH_ORDER:
        board.set_mode(sid, "maintaining")
    board.start_training("identity")
    board.start_training("time")
    board.start_training("relationships")
    assert board.priority_switches() == [SwitchId.TIME, SwitchId.RELATIONSHIPS]
    assert board.training_switches() == [SwitchId.TIME, SwitchId.RELATIONSHIPS]


def test_priority_switches_stable_across_calls_and_reload(workspace):
    board = SwitchBoard(workspace)
    board.start_training("identity")
    board.set_status("money", "flickering")
    board.set_mode("body", "maintaining")
    first = board.priority_switches()
    assert first == board.priority_switches()
    assert SwitchBoard(workspace).priority_switches() == first
    # body left training mode, so mind is the first fresh switch in order
    assert first == [SwitchId.MIND, SwitchId.TIME]


def test_priority_includes_flickering_in_other_modes(workspace):
    board = SwitchBoard(workspace)
    for sid in SWITCH_ORDER:
        board.set_mode(sid, "maintaining")
    board.set_status("purpose", "flickering")
    assert board.priority_switches() == [SwitchId.PURPOSE]


def test_recent_switches_most_recent_first(workspace):
    board = SwitchBoard(workspace)
    base = datetime(2026, 3, 1, 8, 0, tzinfo=ZoneInfo("UTC"))
    order = ["identity", "body", "money", "mind"]
    with patch("switchboard.switches.now_local") as mock_now:
        for hours, sid in enumerate(order):
            mock_now.return_value = base + timedelta(hours=hours)
            board.start_training(sid)
    assert board.recent_switches() == [SwitchId.MIND, SwitchId.MONEY, SwitchId.BODY]
    assert board.recent_switches(limit=1) == [SwitchId.MIND]
    assert board.recent_switches(limit=0) == []
    with pytest.raises(ValidationError):
        board.recent_switches(limit=-1)


def test_recent_switches_ties_use_fixed_order(workspace):
    board = SwitchBoard(workspace)
    with patch("switchboard.switches.now_local") as mock_now:
        mock_now.return_value = datetime(2026, 3, 1, 8, 0, tzinfo=ZoneInfo("UTC"))
        board.start_training("purpose")
        board.start_training("body")
    assert board.recent_switches() == [SwitchId.BODY, SwitchId.PURPOSE]


def test_get_returns_copy(workspace):
    board = SwitchBoard(workspace)
    state = board.get("body")
    state.check_ins = 99
    assert board.get("body").check_ins == 0


def test_changes_persist(workspace):
    SwitchBoard(workspace).start_training("environment")
    SwitchBoard(workspace).record_check_in("environment")
    data = read_json(workspace / "state" / "switches.json")
    assert data["environment"]["status"] == "flickering"
    assert data["environment"]["checkIns"] == 1
    assert set(data) == {sid.value for sid in SWITCH_ORDER}


def test_corrupt_file_reads_as_fresh(workspace):
    path = workspace / "state" / "switches.json"
    path.parent.mkdir()
    path.write_text("not json at all", encoding="utf-8")
    board = SwitchBoard(workspace)
    assert board.active_switches() == []
    board.record_check_in("body")
    assert read_json(path)["body"]["checkIns"] == 1


@pytest.mark.parametrize(
    "call",
    [
        lambda b: b.get("career"),
        lambda b: b.start_training("career"),
        lambda b: b.record_check_in(""),
        lambda b: b.set_status("body", "glowing"),
        lambda b: b.set_mode("body", "sprinting"),
        lambda b: b.set_status(None, "off"),
    ],
)
def test_invalid_ids_rejected(workspace, call):
    board = SwitchBoard(workspace)
    with pytest.raises(ValidationError):
        call(board)
    assert not board.path.exists()


@pytest.mark.parametrize(
    "status,check_ins,expected",
    [
        (SwitchStatus.OFF, 1, SwitchStatus.FLICKERING),
        (SwitchStatus.OFF, 30, SwitchStatus.FLICKERING),
        (SwitchStatus.FLICKERING, 6, SwitchStatus.FLICKERING),
        (SwitchStatus.FLICKERING, 7, SwitchStatus.STABLE),
        (SwitchStatus.FLICKERING, 30, SwitchStatus.STABLE),
        (SwitchStatus.STABLE, 13, SwitchStatus.STABLE),
        (SwitchStatus.STABLE, 14, SwitchStatus.POWERED),
        (SwitchStatus.POWERED, 1, SwitchStatus.POWERED),
    ],
)
def test_next_status(status, check_ins, expected):
    assert next_status(status, check_ins) == expected
