"""Tests for cli/switchboard_tui.py — rendering helpers and key bindings."""

import asyncio

from cli.switchboard_tui import (
    SwitchboardApp,
    cycle,
    recommendation_markdown,
    signals_summary,
    switch_row,
)
from switchboard.catalog import load_catalog
from switchboard.models import Level, Recommendation, Signals, SwitchId, SwitchState, SwitchStatus, TimeBand
from switchboard.plans import PlanList
from switchboard.signals import SignalStore
from switchboard.switches import SwitchBoard


def test_cycle_wraps():
    assert cycle(list(TimeBand), TimeBand.TINY) == TimeBand.SMALL
    assert cycle(list(TimeBand), TimeBand.LARGE) == TimeBand.TINY


def test_recommendation_markdown(catalog):
    rec = Recommendation(SwitchId.BODY, SwitchId.MIND, "Energy first. Then everything else.")
    template = catalog.lookup("body", "tiny")
    text = recommendation_markdown(rec, template)
    assert text.startswith("## Body")
    assert "Energy first." in text
    assert "10-min body reset" in text
    assert f"1. {template.steps[0]}" in text


def test_signals_summary():
    s = Signals(primary_switch_id=SwitchId.MONEY, support_switch_id=SwitchId.TIME)
    s.flags.overwhelm = True
    text = signals_summary(s)
    assert "Focus: money + time" in text
    assert "Flags: overwhelm" in text
    assert "Flags: none" in signals_summary(Signals())


def test_switch_row():
    row = switch_row(SwitchId.MIND, SwitchState(status=SwitchStatus.STABLE, check_ins=8))
    assert row[:4] == ("mind", "STABLE", "training", "8")


def test_keys_add_item_and_check_in(workspace):
    async def run() -> None:
        app = SwitchboardApp(workspace)
        async with app.run_test() as pilot:
            await pilot.press("a")
            await pilot.pause()
            await pilot.press("c")
            await pilot.pause()
            await pilot.press("e")
            await pilot.pause()

    asyncio.run(run())

    items = PlanList(load_catalog(root=workspace), workspace).items()
    assert len(items) == 1
    assert items[0].switch_id == SwitchId.BODY
    assert SwitchBoard(workspace).get("body").check_ins == 1
    assert SignalStore(workspace).get().energy_level == Level.HIGH
