"""Typed enums and dataclasses for the Switchboard data model.

All records use from_dict/to_dict for JSON/YAML serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing or unreadable values use defaults.
Operations validate their arguments with parse_enum and never coerce.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from switchboard.errors import ValidationError

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


# ── Enums ─────────────────────────────────────────────────────


class Level(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


EnergyLevel = Level
StressLevel = Level


class TimeBand(str, Enum):
    """Coarse bucket of currently available time, smallest first."""

    TINY = "tiny"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class Mode(str, Enum):
    TRAINING = "training"
    MAINTAINING = "maintaining"
    RESTORING = "restoring"


class SwitchId(str, Enum):
    BODY = "body"
    MIND = "mind"
    TIME = "time"
    PURPOSE = "purpose"
    MONEY = "money"
    RELATIONSHIPS = "relationships"
    ENVIRONMENT = "environment"
    IDENTITY = "identity"


# Fixed iteration order for every per-switch listing.
SWITCH_ORDER: tuple[SwitchId, ...] = tuple(SwitchId)


class SwitchStatus(str, Enum):
    """Status tiers in increasing order of engagement."""

    OFF = "off"
    FLICKERING = "flickering"
    STABLE = "stable"
    POWERED = "powered"


class FlagFamily(str, Enum):
    """A situational condition tracked both as a flag and as a rolling count."""

    OVERWHELM = "overwhelm"
    TIME_CHAOS = "timeChaos"
    MONEY_STRESS = "moneyStress"
    RELATIONSHIP_DRAIN = "relationshipDrain"
    ENV_MESS = "envMess"
    LOW_ENERGY = "lowEnergy"
    LOW_MOTIVATION = "lowMotivation"
    SLEEP_DEBT = "sleepDebt"

    @property
    def attr(self) -> str:
        return self.name.lower()

    @property
    def flag_key(self) -> str:
        return f"{self.value}Flag"


class Intensity(str, Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    DEEP = "deep"


def parse_enum(enum_cls: type[E], value: Any, what: str) -> E:
    """Return value as a member of enum_cls or raise ValidationError."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {what}: {value!r} (expected one of: {allowed})") from None


def _coerce(enum_cls: type[E], raw: Any, default: E, what: str) -> E:
    """Lenient enum read for persisted data: bad values fall back to default."""
    if raw is None:
        return default
    try:
        return enum_cls(raw)
    except (ValueError, TypeError):
        logger.warning("Unknown %s %r in stored data, using %s", what, raw, default.value)
        return default


def _coerce_optional(enum_cls: type[E], raw: Any, what: str) -> E | None:
    if raw is None:
        return None
    try:
        return enum_cls(raw)
    except (ValueError, TypeError):
        logger.warning("Unknown %s %r in stored data, ignoring", what, raw)
        return None


def _flag(raw: Any, what: str) -> bool:
    """Lenient bool read: only real booleans count, anything else is False."""
    if raw is None or isinstance(raw, bool):
        return bool(raw)
    logger.warning("Non-boolean %s %r in stored data, using False", what, raw)
    return False


def _count(raw: Any) -> int:
    if isinstance(raw, bool):
        return 0
    try:
        n = int(raw or 0)
    except (ValueError, TypeError):
        return 0
    return max(0, n)


# ── Signals ───────────────────────────────────────────────────


@dataclass
class Flags:
    overwhelm: bool = False
    time_chaos: bool = False
    money_stress: bool = False
    relationship_drain: bool = False
    env_mess: bool = False
    low_energy: bool = False
    low_motivation: bool = False
    sleep_debt: bool = False

    def get(self, family: FlagFamily) -> bool:
        return getattr(self, family.attr)

    def set(self, family: FlagFamily, value: bool) -> None:
        setattr(self, family.attr, bool(value))

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Flags:
        if not d or not isinstance(d, dict):
            return cls()
        flags = cls()
        for family in FlagFamily:
            flags.set(family, _flag(d.get(family.flag_key), family.flag_key))
        return flags

    def to_dict(self) -> dict[str, Any]:
        return {family.flag_key: self.get(family) for family in FlagFamily}


@dataclass
class FlagCounts:
    """Occurrence counters per flag family. Never decay on their own."""

    overwhelm: int = 0
    time_chaos: int = 0
    money_stress: int = 0
    relationship_drain: int = 0
    env_mess: int = 0
    low_energy: int = 0
    low_motivation: int = 0
    sleep_debt: int = 0

    def get(self, family: FlagFamily) -> int:
        return getattr(self, family.attr)

    def increment(self, family: FlagFamily) -> int:
        value = self.get(family) + 1
        setattr(self, family.attr, value)
        return value

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> FlagCounts:
        if not d or not isinstance(d, dict):
            return cls()
        counts = cls()
        for family in FlagFamily:
            setattr(counts, family.attr, _count(d.get(family.value)))
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {family.value: self.get(family) for family in FlagFamily}


@dataclass
class Signals:
    energy_level: Level = Level.MEDIUM
    stress_level: Level = Level.MEDIUM
    time_band: TimeBand = TimeBand.SMALL
    primary_switch_id: SwitchId | None = None
    support_switch_id: SwitchId | None = None
    mode_bias: Mode = Mode.TRAINING
    flags: Flags = field(default_factory=Flags)
    flag_counts_14d: FlagCounts = field(default_factory=FlagCounts)
    last_updated: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Signals:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            energy_level=_coerce(Level, d.get("energyLevel"), Level.MEDIUM, "energy level"),
            stress_level=_coerce(Level, d.get("stressLevel"), Level.MEDIUM, "stress level"),
            time_band=_coerce(TimeBand, d.get("timeBand"), TimeBand.SMALL, "time band"),
            primary_switch_id=_coerce_optional(SwitchId, d.get("primarySwitchId"), "switch id"),
            support_switch_id=_coerce_optional(SwitchId, d.get("supportSwitchId"), "switch id"),
            mode_bias=_coerce(Mode, d.get("modeBias"), Mode.TRAINING, "mode"),
            flags=Flags.from_dict(d.get("flags") or {}),
            flag_counts_14d=FlagCounts.from_dict(d.get("flagCounts14d") or {}),
            last_updated=d.get("lastUpdated"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "energyLevel": self.energy_level.value,
            "stressLevel": self.stress_level.value,
            "timeBand": self.time_band.value,
            "primarySwitchId": self.primary_switch_id.value if self.primary_switch_id else None,
            "supportSwitchId": self.support_switch_id.value if self.support_switch_id else None,
            "modeBias": self.mode_bias.value,
            "flags": self.flags.to_dict(),
            "flagCounts14d": self.flag_counts_14d.to_dict(),
            "lastUpdated": self.last_updated,
        }


# ── Switches ──────────────────────────────────────────────────


@dataclass
class SwitchState:
    status: SwitchStatus = SwitchStatus.OFF
    mode: Mode = Mode.TRAINING
    check_ins: int = 0
    streak_days: int = 0
    training_started: str | None = None
    last_updated: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SwitchState:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            status=_coerce(SwitchStatus, d.get("status"), SwitchStatus.OFF, "switch status"),
            mode=_coerce(Mode, d.get("mode"), Mode.TRAINING, "mode"),
            check_ins=_count(d.get("checkIns")),
            streak_days=_count(d.get("streakDays")),
            training_started=d.get("trainingStarted"),
            last_updated=d.get("lastUpdated"),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "status": self.status.value,
            "mode": self.mode.value,
            "checkIns": self.check_ins,
            "streakDays": self.streak_days,
            "lastUpdated": self.last_updated,
        }
        if self.training_started:
            d["trainingStarted"] = self.training_started
        return d


def switches_from_dict(d: dict[str, Any]) -> dict[SwitchId, SwitchState]:
    """Build the full 8-switch map in fixed order; absent switches are fresh."""
    if not isinstance(d, dict):
        d = {}
    return {sid: SwitchState.from_dict(d.get(sid.value) or {}) for sid in SWITCH_ORDER}


def switches_to_dict(switches: dict[SwitchId, SwitchState]) -> dict[str, Any]:
    return {sid.value: switches[sid].to_dict() for sid in SWITCH_ORDER}


# ── Catalog ───────────────────────────────────────────────────


@dataclass(frozen=True)
class PlanAction:
    title: str
    steps: tuple[str, ...]


@dataclass(frozen=True)
class RoutineBlock:
    title: str
    schedule: str
    steps: tuple[str, ...]


@dataclass(frozen=True)
class SupportAction:
    switch_id: SwitchId
    title: str
    steps: tuple[str, ...]


@dataclass(frozen=True)
class PlanTemplate:
    switch_id: SwitchId
    time_band: TimeBand
    estimate_minutes: int
    intensity: Intensity
    why_this_matters: str
    action_now: PlanAction
    routine_block: RoutineBlock
    support_action: SupportAction
    check_in_question: str

    @property
    def title(self) -> str:
        return self.action_now.title

    @property
    def steps(self) -> tuple[str, ...]:
        return self.action_now.steps

    def to_dict(self) -> dict[str, Any]:
        return {
            "switchId": self.switch_id.value,
            "timeBand": self.time_band.value,
            "estimateMinutes": self.estimate_minutes,
            "intensity": self.intensity.value,
            "whyThisMatters": self.why_this_matters,
            "actionNow": {"title": self.action_now.title, "steps": list(self.action_now.steps)},
            "routineBlock": {
                "title": self.routine_block.title,
                "schedule": self.routine_block.schedule,
                "steps": list(self.routine_block.steps),
            },
            "supportAction": {
                "switchId": self.support_action.switch_id.value,
                "title": self.support_action.title,
                "steps": list(self.support_action.steps),
            },
            "checkInQuestion": self.check_in_question,
        }


# ── Plan list ─────────────────────────────────────────────────


def _step_list(raw: Any) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("Plan item steps %r are not a list, ignoring", raw)
        return []
    return [str(s) for s in raw]


@dataclass
class PlanItem:
    id: str = ""
    switch_id: SwitchId = SwitchId.BODY
    title: str = ""
    estimate_minutes: int = 0
    completed: bool = False
    steps: list[str] = field(default_factory=list)
    created_at: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PlanItem:
        """Parse a stored item. Raises ValidationError if id or switch is unusable."""
        if not isinstance(d, dict) or not d.get("id"):
            raise ValidationError(f"Plan item without id: {d!r}")
        return cls(
            id=str(d["id"]),
            switch_id=parse_enum(SwitchId, d.get("switchId"), "switch id"),
            title=str(d.get("title", "")),
            estimate_minutes=_count(d.get("estimateMinutes")),
            completed=_flag(d.get("completed"), "completed"),
            steps=_step_list(d.get("steps")),
            created_at=d.get("createdAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "switchId": self.switch_id.value,
            "title": self.title,
            "estimateMinutes": self.estimate_minutes,
            "completed": self.completed,
            "steps": list(self.steps),
        }
        if self.created_at:
            d["createdAt"] = self.created_at
        return d


# ── Recommendation ────────────────────────────────────────────


@dataclass(frozen=True)
class Recommendation:
    recommended_switch_id: SwitchId
    alternative_switch_id: SwitchId
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "recommendedSwitchId": self.recommended_switch_id.value,
            "alternativeSwitchId": self.alternative_switch_id.value,
            "reason": self.reason,
        }
