"""User signal store for Switchboard.

Signals are changed only through explicit update commands, so the rules that
tie fields together (the energy/mode guard) live in one place and cannot be
bypassed with an arbitrary partial dict.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from switchboard.catalog import TIME_BAND_CAPS
from switchboard.errors import ValidationError
from switchboard.fileio import load_record, save_record
from switchboard.models import (
    FlagFamily,
    Level,
    Mode,
    Signals,
    SwitchId,
    TimeBand,
    parse_enum,
)
from switchboard.workspace import now_local, signals_path, workspace_root

logger = logging.getLogger(__name__)


# ── Update commands ───────────────────────────────────────────


class SignalCommand:
    """Base class for a single validated change to the signals record."""

    def apply(self, signals: Signals) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class SetEnergyLevel(SignalCommand):
    """Set energy and keep the low-energy flag and mode bias in step.

    Low energy forces restoring mode. Leaving low energy only returns the
    bias to training while no other stressor (overwhelm, high stress) is active.
    """

    level: Level

    def __post_init__(self) -> None:
        object.__setattr__(self, "level", parse_enum(Level, self.level, "energy level"))

    def apply(self, signals: Signals) -> None:
        signals.energy_level = self.level
        if self.level == Level.LOW:
            signals.flags.low_energy = True
            signals.mode_bias = Mode.RESTORING
            return
        signals.flags.low_energy = False
        if not signals.flags.overwhelm and signals.stress_level != Level.HIGH:
            signals.mode_bias = Mode.TRAINING


@dataclass(frozen=True)
class SetStressLevel(SignalCommand):
    level: Level

    def __post_init__(self) -> None:
        object.__setattr__(self, "level", parse_enum(Level, self.level, "stress level"))

    def apply(self, signals: Signals) -> None:
        signals.stress_level = self.level


@dataclass(frozen=True)
class SetTimeBand(SignalCommand):
    band: TimeBand

    def __post_init__(self) -> None:
        object.__setattr__(self, "band", parse_enum(TimeBand, self.band, "time band"))

    def apply(self, signals: Signals) -> None:
        signals.time_band = self.band


@dataclass(frozen=True)
class SetPrimarySwitches(SignalCommand):
    primary: SwitchId
    support: SwitchId | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "primary", parse_enum(SwitchId, self.primary, "switch id"))
        if self.support is not None:
            object.__setattr__(self, "support", parse_enum(SwitchId, self.support, "switch id"))

    def apply(self, signals: Signals) -> None:
        signals.primary_switch_id = self.primary
        signals.support_switch_id = self.support


@dataclass(frozen=True)
class SetModeBias(SignalCommand):
    mode: Mode

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", parse_enum(Mode, self.mode, "mode"))

    def apply(self, signals: Signals) -> None:
        signals.mode_bias = self.mode


@dataclass(frozen=True)
class SetFlag(SignalCommand):
    family: FlagFamily
    value: bool

    def __post_init__(self) -> None:
        object.__setattr__(self, "family", parse_enum(FlagFamily, self.family, "flag"))
        if not isinstance(self.value, bool):
            raise ValidationError(f"Flag value must be a boolean, got {self.value!r}")

    def apply(self, signals: Signals) -> None:
        signals.flags.set(self.family, self.value)


@dataclass(frozen=True)
class IncrementFlagCount(SignalCommand):
    family: FlagFamily

    def __post_init__(self) -> None:
        object.__setattr__(self, "family", parse_enum(FlagFamily, self.family, "flag"))

    def apply(self, signals: Signals) -> None:
        signals.flag_counts_14d.increment(self.family)


# ── Helpers ───────────────────────────────────────────────────


def level_from_score(value: float, maximum: float = 10) -> Level:
    """Map a numeric rating (e.g. a 1-10 slider) to low/medium/high."""
    if maximum <= 0:
        raise ValidationError(f"Score maximum must be positive, got {maximum!r}")
    normalized = value / maximum
    if normalized <= 0.33:
        return Level.LOW
    if normalized <= 0.66:
        return Level.MEDIUM
    return Level.HIGH


def time_band_for_minutes(minutes: int) -> TimeBand:
    """Smallest time band whose cap covers *minutes*; clamps to large."""
    if minutes < 0:
        raise ValidationError(f"Available minutes must be non-negative, got {minutes!r}")
    for band in TimeBand:
        if minutes <= TIME_BAND_CAPS[band]:
            return band
    return TimeBand.LARGE


# ── Store ─────────────────────────────────────────────────────


class SignalStore:
    """Holds one user's signals record with an explicit load/flush lifecycle."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root if root is not None else workspace_root()
        self._signals: Signals | None = None

    @property
    def path(self) -> Path:
        return signals_path(self.root)

    def load(self) -> Signals:
        self._signals = Signals.from_dict(load_record(self.path))
        return self.get()

    def flush(self) -> None:
        save_record(self.path, self._current().to_dict())

    def _current(self) -> Signals:
        if self._signals is None:
            self.load()
        return self._signals

    def get(self) -> Signals:
        """Current signals with defaults filled. Returns a copy."""
        return Signals.from_dict(self._current().to_dict())

    def update(self, *commands: SignalCommand) -> Signals:
        """Apply commands in order, stamp lastUpdated and persist once."""
        for command in commands:
            if not isinstance(command, SignalCommand):
                raise ValidationError(f"Not a signal update command: {command!r}")
        signals = self._current()
        for command in commands:
            command.apply(signals)
        signals.last_updated = now_local(self.root).isoformat(timespec="seconds")
        self.flush()
        return self.get()

    # Convenience wrappers

    def update_energy_level(self, level: Level | str) -> Signals:
        return self.update(SetEnergyLevel(level))

    def update_stress_level(self, level: Level | str) -> Signals:
        return self.update(SetStressLevel(level))

    def update_time_band(self, band: TimeBand | str) -> Signals:
        return self.update(SetTimeBand(band))

    def set_primary_switches(self, primary: SwitchId | str, support: SwitchId | str | None = None) -> Signals:
        return self.update(SetPrimarySwitches(primary, support))

    def set_mode_bias(self, mode: Mode | str) -> Signals:
        return self.update(SetModeBias(mode))

    def set_flag(self, family: FlagFamily | str, value: bool) -> Signals:
        return self.update(SetFlag(family, value))

    def increment_flag_count(self, family: FlagFamily | str) -> Signals:
        return self.update(IncrementFlagCount(family))
