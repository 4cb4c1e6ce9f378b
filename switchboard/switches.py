"""Per-switch progress state machine for Switchboard.

Each of the 8 switches moves off -> flickering -> stable -> powered as the
user checks in. Thresholds compare against cumulative check-ins, at most one
tier advances per check-in, and nothing moves a switch backward except an
explicit start_training.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from switchboard.errors import ValidationError
from switchboard.fileio import load_record, save_record
from switchboard.models import (
    Mode,
    SWITCH_ORDER,
    SwitchId,
    SwitchState,
    SwitchStatus,
    parse_enum,
    switches_from_dict,
    switches_to_dict,
)
from switchboard.workspace import now_local, switches_path, workspace_root

logger = logging.getLogger(__name__)

STABLE_THRESHOLD = 7
POWERED_THRESHOLD = 14
PRIORITY_LIMIT = 2


def next_status(status: SwitchStatus, check_ins: int) -> SwitchStatus:
    """Status after a check-in that brought the cumulative count to *check_ins*."""
    if status == SwitchStatus.FLICKERING:
        return SwitchStatus.STABLE if check_ins >= STABLE_THRESHOLD else status
    if status == SwitchStatus.STABLE:
        return SwitchStatus.POWERED if check_ins >= POWERED_THRESHOLD else status
    if status == SwitchStatus.OFF:
        return SwitchStatus.FLICKERING
    if status == SwitchStatus.POWERED:
        return status
    raise ValueError(f"Unhandled switch status: {status!r}")


def _sort_key(item: tuple[int, SwitchId, SwitchState]) -> tuple[float, int]:
    index, _sid, state = item
    try:
        ts = datetime.fromisoformat(state.last_updated).timestamp() if state.last_updated else 0.0
    except (ValueError, TypeError):
        ts = 0.0
    return (-ts, index)


class SwitchBoard:
    """The 8-switch progress map for one workspace."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root if root is not None else workspace_root()
        self._switches: dict[SwitchId, SwitchState] | None = None

    @property
    def path(self) -> Path:
        return switches_path(self.root)

    def load(self) -> dict[SwitchId, SwitchState]:
        self._switches = switches_from_dict(load_record(self.path))
        return self.all()

    def flush(self) -> None:
        save_record(self.path, switches_to_dict(self._current()))

    def _current(self) -> dict[SwitchId, SwitchState]:
        if self._switches is None:
            self.load()
        return self._switches

    def _now(self) -> str:
        return now_local(self.root).isoformat(timespec="seconds")

    # ── Reads ──

    def get(self, switch_id: SwitchId | str) -> SwitchState:
        sid = parse_enum(SwitchId, switch_id, "switch id")
        return SwitchState.from_dict(self._current()[sid].to_dict())

    def all(self) -> dict[SwitchId, SwitchState]:
        return {sid: self.get(sid) for sid in SWITCH_ORDER}

    def statuses(self) -> dict[SwitchId, SwitchStatus]:
        current = self._current()
        return {sid: current[sid].status for sid in SWITCH_ORDER}

    def active_switches(self) -> list[SwitchId]:
        current = self._current()
        return [sid for sid in SWITCH_ORDER if current[sid].status != SwitchStatus.OFF]

    def priority_switches(self) -> list[SwitchId]:
        """Up to two switches in training mode or flickering, in fixed order."""
        current = self._current()
        return [
            sid
            for sid in SWITCH_ORDER
            if current[sid].mode == Mode.TRAINING or current[sid].status == SwitchStatus.FLICKERING
        ][:PRIORITY_LIMIT]

    def training_switches(self) -> list[SwitchId]:
        """Like priority_switches, but only among switches that have been started."""
        current = self._current()
        return [
            sid
            for sid in SWITCH_ORDER
            if current[sid].status != SwitchStatus.OFF
            and (current[sid].mode == Mode.TRAINING or current[sid].status == SwitchStatus.FLICKERING)
        ][:PRIORITY_LIMIT]

    def recent_switches(self, limit: int = 3) -> list[SwitchId]:
        """Non-off switches, most recently updated first."""
        if limit < 0:
            raise ValidationError(f"Limit must be non-negative, got {limit!r}")
        current = self._current()
        active = [
            (i, sid, current[sid])
            for i, sid in enumerate(SWITCH_ORDER)
            if current[sid].status != SwitchStatus.OFF
        ]
        return [sid for _i, sid, _state in sorted(active, key=_sort_key)][:limit]

    # ── Transitions ──

    def start_training(self, switch_id: SwitchId | str) -> SwitchState:
        """Restart training: always flickering, discarding stable/powered standing."""
        sid = parse_enum(SwitchId, switch_id, "switch id")
        state = self._current()[sid]
        previous = state.status
        now = self._now()
        state.status = SwitchStatus.FLICKERING
        state.mode = Mode.TRAINING
        state.training_started = now
        state.last_updated = now
        logger.info("Training started for %s (was %s)", sid.value, previous.value)
        self.flush()
        return self.get(sid)

    def record_check_in(self, switch_id: SwitchId | str) -> SwitchState:
        sid = parse_enum(SwitchId, switch_id, "switch id")
        state = self._current()[sid]
        previous = state.status
        state.check_ins += 1
        state.streak_days += 1
        state.status = next_status(previous, state.check_ins)
        state.last_updated = self._now()
        if state.status != previous:
            logger.info(
                "Switch %s moved %s -> %s at %d check-ins",
                sid.value, previous.value, state.status.value, state.check_ins,
            )
        self.flush()
        return self.get(sid)

    def set_status(self, switch_id: SwitchId | str, status: SwitchStatus | str) -> SwitchState:
        sid = parse_enum(SwitchId, switch_id, "switch id")
        new_status = parse_enum(SwitchStatus, status, "switch status")
        state = self._current()[sid]
        state.status = new_status
        state.last_updated = self._now()
        self.flush()
        return self.get(sid)

    def set_mode(self, switch_id: SwitchId | str, mode: Mode | str) -> SwitchState:
        sid = parse_enum(SwitchId, switch_id, "switch id")
        new_mode = parse_enum(Mode, mode, "mode")
        state = self._current()[sid]
        state.mode = new_mode
        state.last_updated = self._now()
        self.flush()
        return self.get(sid)
