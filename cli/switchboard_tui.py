#!/usr/bin/env python3
"""Switchboard TUI — recommendation, plan check-off and switch progress in the terminal."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Sequence, TypeVar

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.reactive import reactive
from textual.widgets import (
    Checkbox,
    DataTable,
    Footer,
    Header,
    Label,
    Markdown,
    Static,
)

from switchboard import (
    FlagFamily,
    Level,
    PlanItem,
    PlanList,
    PlanTemplate,
    Recommendation,
    SignalStore,
    Signals,
    SwitchboardError,
    SwitchBoard,
    SwitchId,
    SwitchState,
    TimeBand,
    derive_mode,
    derive_recommended_switch,
    load_catalog,
    workspace_root,
)

T = TypeVar("T")


# ── Rendering helpers ──────────────────────────────────────────


def cycle(values: Sequence[T], current: T) -> T:
    """The value after *current*, wrapping around."""
    return values[(list(values).index(current) + 1) % len(values)]


def recommendation_markdown(rec: Recommendation, template: PlanTemplate) -> str:
    lines = [
        f"## {rec.recommended_switch_id.value.title()}",
        f"*{rec.reason}*",
        "",
        f"Also worth a look: **{rec.alternative_switch_id.value}**",
        "",
        f"### {template.title} ({template.estimate_minutes} min, {template.intensity.value})",
        template.why_this_matters,
        "",
    ]
    lines += [f"{i}. {step}" for i, step in enumerate(template.steps, 1)]
    lines += [
        "",
        f"### {template.routine_block.title}",
        f"_{template.routine_block.schedule}_",
        "",
    ]
    lines += [f"- {step}" for step in template.routine_block.steps]
    if template.check_in_question:
        lines += ["", f"> {template.check_in_question}"]
    return "\n".join(lines)


def signals_summary(signals: Signals) -> str:
    parts = [
        f"Energy: {signals.energy_level.value}",
        f"Stress: {signals.stress_level.value}",
        f"Time: {signals.time_band.value}",
        f"Bias: {signals.mode_bias.value}",
    ]
    if signals.primary_switch_id:
        focus = signals.primary_switch_id.value
        if signals.support_switch_id:
            focus += f" + {signals.support_switch_id.value}"
        parts.append(f"Focus: {focus}")
    active = [f.value for f in FlagFamily if signals.flags.get(f)]
    parts.append(f"Flags: {', '.join(active) if active else 'none'}")
    return "\n".join(parts)


def switch_row(switch_id: SwitchId, state: SwitchState) -> tuple[str, ...]:
    return (
        switch_id.value,
        state.status.value.upper(),
        state.mode.value,
        str(state.check_ins),
        str(state.streak_days),
        state.last_updated or "",
    )


CSS = """
#main-layout {
    height: 1fr;
}

#left-pane {
    width: 1fr;
    min-width: 30;
    border-right: tall $primary-background-darken-2;
    padding: 0 1;
}

#right-pane {
    width: 1fr;
    min-width: 30;
    padding: 0 1;
}

#recommendation-viewer {
    height: auto;
    padding: 0 1;
}

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
    padding: 0 1;
}

.plan-row {
    height: auto;
    padding: 0 0;
    margin: 0 0;
}

.plan-row Checkbox {
    width: 1fr;
    height: auto;
    padding: 0 1 0 0;
}

.plan-minutes {
    width: auto;
    color: $text-muted;
    padding: 0 1;
}

.plan-done {
    opacity: 50%;
}

.plan-done Checkbox {
    text-style: strike;
}

#signals-info {
    height: auto;
    padding: 1 2;
    margin: 0 0 1 0;
    border: tall $primary-background-darken-2;
}

#switches-table {
    height: 1fr;
}
"""


# ── Custom widgets ─────────────────────────────────────────────


class PlanRow(Horizontal):
    """A single plan item: checkbox + estimate."""

    def __init__(self, item: PlanItem, **kwargs) -> None:
        super().__init__(**kwargs)
        self.item_id = item.id
        self.item = item

    def compose(self) -> ComposeResult:
        yield Checkbox(f"[{self.item.switch_id.value}] {self.item.title}", value=self.item.completed)
        yield Label(f"{self.item.estimate_minutes} min", classes="plan-minutes")

    def on_mount(self) -> None:
        self.add_class("plan-row")
        if self.item.completed:
            self.add_class("plan-done")


# ── Screens ────────────────────────────────────────────────────


class SwitchesScreen(Vertical):
    """All 8 switches with status and counters."""

    def __init__(self, board: SwitchBoard, **kwargs) -> None:
        super().__init__(**kwargs)
        self.board = board

    def compose(self) -> ComposeResult:
        yield Label("Switches", classes="section-title")
        yield DataTable(id="switches-table")

    def on_mount(self) -> None:
        table: DataTable = self.query_one("#switches-table", DataTable)
        table.add_columns("Switch", "Status", "Mode", "Check-ins", "Streak", "Updated")
        for sid, state in self.board.all().items():
            table.add_row(*switch_row(sid, state))


class SignalsScreen(Vertical):
    """Current signals and 14-day flag counts."""

    def __init__(self, store: SignalStore, **kwargs) -> None:
        super().__init__(**kwargs)
        self.store = store

    def compose(self) -> ComposeResult:
        yield Label("Signals", classes="section-title")
        yield Static(id="signals-info")
        yield DataTable(id="flag-counts-table")

    def on_mount(self) -> None:
        signals = self.store.get()
        self.query_one("#signals-info", Static).update(signals_summary(signals))
        table: DataTable = self.query_one("#flag-counts-table", DataTable)
        table.add_columns("Flag", "Now", "14d")
        for family in FlagFamily:
            table.add_row(
                family.value,
                "yes" if signals.flags.get(family) else "",
                str(signals.flag_counts_14d.get(family)),
            )


# ── Main app ───────────────────────────────────────────────────


class SwitchboardApp(App):
    """Switchboard — terminal view over signals, switches and the plan list."""

    TITLE = "Switchboard"
    CSS = CSS
    AUTO_FOCUS = None

    BINDINGS = [
        Binding("d", "show_dashboard", "Dashboard"),
        Binding("w", "show_switches", "Switches"),
        Binding("s", "show_signals", "Signals"),
        Binding("a", "add_recommended", "Add to plan"),
        Binding("c", "check_in", "Check in"),
        Binding("e", "cycle_energy", "Energy"),
        Binding("x", "cycle_stress", "Stress"),
        Binding("b", "cycle_time_band", "Time"),
        Binding("q", "quit", "Quit"),
    ]

    current_view: reactive[str] = reactive("dashboard")

    def __init__(self, root: Path | None = None) -> None:
        super().__init__()
        self.root = root if root is not None else workspace_root()
        self.store = SignalStore(self.root)
        self.board = SwitchBoard(self.root)
        self.plan = PlanList(load_catalog(root=self.root), self.root)
        self._recommendation: Recommendation | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Horizontal(
            VerticalScroll(
                Label("Recommended", classes="section-title"),
                Markdown(id="recommendation-viewer"),
                id="left-pane",
                can_focus=False,
            ),
            VerticalScroll(
                Label("Plan", classes="section-title"),
                Static(id="plan-progress"),
                Vertical(id="plan-list"),
                id="right-pane",
                can_focus=False,
            ),
            id="main-layout",
        )
        yield Footer()

    def on_mount(self) -> None:
        self._load_data()

    def _load_data(self) -> None:
        """Recompute the recommendation and rebuild the plan list."""
        signals = self.store.get()
        self._recommendation = derive_recommended_switch(signals)
        template = self.plan.catalog.lookup(self._recommendation.recommended_switch_id, signals.time_band)
        self.query_one("#recommendation-viewer", Markdown).update(
            recommendation_markdown(self._recommendation, template)
        )
        self._rebuild_plan_list()

        mode = derive_mode(signals).value.upper()
        self.sub_title = f"[{mode}]  {signals.time_band.value}  energy {signals.energy_level.value}"

    def _rebuild_plan_list(self) -> None:
        plan_list = self.query_one("#plan-list", Vertical)
        plan_list.remove_children()
        items = self.plan.items()
        if items:
            plan_list.mount(*[PlanRow(item) for item in items])

        progress = self.plan.progress()
        self.query_one("#plan-progress", Static).update(
            f"{progress['completed']}/{progress['total']} done"
        )

    def _guarded(self, action, success: str | None = None) -> bool:
        """Run a store mutation, reporting errors as notifications."""
        try:
            action()
        except SwitchboardError as e:
            self.notify(str(e), title="Switchboard", severity="error")
            return False
        if success:
            self.notify(success, severity="information")
        return True

    # ── Plan check-off ──────────────────────────────────────────

    @on(Checkbox.Changed)
    def _on_checkbox_toggle(self, event: Checkbox.Changed) -> None:
        row = event.checkbox.parent
        if not isinstance(row, PlanRow):
            return
        current = self.plan.find(row.item_id)
        if current is None or current.completed == event.value:
            return
        if self._guarded(lambda: self.plan.toggle_complete(row.item_id)):
            if event.value:
                row.add_class("plan-done")
            else:
                row.remove_class("plan-done")
            progress = self.plan.progress()
            self.query_one("#plan-progress", Static).update(
                f"{progress['completed']}/{progress['total']} done"
            )

    # ── Actions ─────────────────────────────────────────────────

    def action_add_recommended(self) -> None:
        if self._recommendation is None:
            return
        sid = self._recommendation.recommended_switch_id
        band = self.store.get().time_band
        if self._guarded(lambda: self.plan.add_from_catalog(sid, band), f"Added {sid.value} ({band.value})"):
            self._rebuild_plan_list()

    def action_check_in(self) -> None:
        if self._recommendation is None:
            return
        sid = self._recommendation.recommended_switch_id
        if self._guarded(lambda: self.board.record_check_in(sid)):
            state = self.board.get(sid)
            self.notify(f"{sid.value}: {state.status.value} ({state.check_ins} check-ins)")
            self._refresh_view()

    def action_cycle_energy(self) -> None:
        level = cycle(list(Level), self.store.get().energy_level)
        if self._guarded(lambda: self.store.update_energy_level(level)):
            self._refresh_view()

    def action_cycle_stress(self) -> None:
        level = cycle(list(Level), self.store.get().stress_level)
        if self._guarded(lambda: self.store.update_stress_level(level)):
            self._refresh_view()

    def action_cycle_time_band(self) -> None:
        band = cycle(list(TimeBand), self.store.get().time_band)
        if self._guarded(lambda: self.store.update_time_band(band)):
            self._refresh_view()

    def action_show_switches(self) -> None:
        if self.current_view == "switches":
            self.action_show_dashboard()
            return
        self._switch_to("switches")

    def action_show_signals(self) -> None:
        if self.current_view == "signals":
            self.action_show_dashboard()
            return
        self._switch_to("signals")

    def action_show_dashboard(self) -> None:
        self._switch_to("dashboard")

    def _refresh_view(self) -> None:
        self._load_data()
        if self.current_view != "dashboard":
            self._switch_to(self.current_view)

    def _switch_to(self, view: str) -> None:
        main = self.query_one("#main-layout", Horizontal)

        for old in self.query(".overlay-screen"):
            old.remove()

        show_panes = view == "dashboard"
        self.query_one("#left-pane").display = show_panes
        self.query_one("#right-pane").display = show_panes

        if view == "switches":
            main.mount(SwitchesScreen(self.board, classes="overlay-screen"))
        elif view == "signals":
            main.mount(SignalsScreen(self.store, classes="overlay-screen"))
        self.current_view = view


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = workspace_root()
    if not root.exists():
        print(f"Workspace not found: {root}")
        print("Set SWITCHBOARD_ROOT or create the directory first.")
        sys.exit(1)

    try:
        app = SwitchboardApp(root)
    except SwitchboardError as e:
        print(f"Cannot start: {e}")
        sys.exit(1)
    app.run()


if __name__ == "__main__":
    main()
