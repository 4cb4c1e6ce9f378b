"""Plan catalog: immutable (switch, time band) -> plan template lookup.

The catalog is static configuration. Construction checks that every switch
defines every time band and that each template has the expected shape; the
wording of titles and steps is never inspected.
"""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from switchboard.errors import CatalogError
from switchboard.fileio import read_yaml
from switchboard.models import (
    Intensity,
    PlanAction,
    PlanTemplate,
    RoutineBlock,
    SupportAction,
    SwitchId,
    SWITCH_ORDER,
    TimeBand,
    parse_enum,
)
from switchboard.workspace import catalog_override_path, workspace_root

logger = logging.getLogger(__name__)


# Upper bound in minutes for each time band.
TIME_BAND_CAPS: dict[TimeBand, int] = {
    TimeBand.TINY: 10,
    TimeBand.SMALL: 30,
    TimeBand.MEDIUM: 60,
    TimeBand.LARGE: 90,
}


def default_catalog_path() -> Path:
    return Path(str(resources.files("switchboard") / "data" / "plan_library.yaml"))


def _steps(raw: Any, where: str) -> tuple[str, ...]:
    if not isinstance(raw, list):
        raise CatalogError(f"{where}: steps must be a list")
    return tuple(str(s) for s in raw)


def _section(raw: dict[str, Any], key: str, where: str) -> dict[str, Any]:
    value = raw.get(key)
    if not isinstance(value, dict):
        raise CatalogError(f"{where}: missing section '{key}'")
    return value


def _parse_template(switch_id: SwitchId, band: TimeBand, raw: Any) -> PlanTemplate:
    where = f"{switch_id.value}/{band.value}"
    if not isinstance(raw, dict):
        raise CatalogError(f"{where}: template must be a mapping")
    try:
        action = _section(raw, "action_now", where)
        routine = _section(raw, "routine_block", where)
        support = _section(raw, "support_action", where)
        return PlanTemplate(
            switch_id=switch_id,
            time_band=band,
            estimate_minutes=int(raw["estimate_minutes"]),
            intensity=parse_enum(Intensity, raw.get("intensity"), "intensity"),
            why_this_matters=str(raw.get("why_this_matters", "")),
            action_now=PlanAction(
                title=str(action["title"]),
                steps=_steps(action.get("steps"), where),
            ),
            routine_block=RoutineBlock(
                title=str(routine.get("title", "")),
                schedule=str(routine.get("schedule", "")),
                steps=_steps(routine.get("steps", []), where),
            ),
            support_action=SupportAction(
                switch_id=parse_enum(SwitchId, support.get("switch_id"), "support switch id"),
                title=str(support.get("title", "")),
                steps=_steps(support.get("steps", []), where),
            ),
            check_in_question=str(raw.get("check_in_question", "")),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise CatalogError(f"{where}: malformed template ({e})") from e


class PlanCatalog:
    """Read-only table of plan templates for all 8 switches x 4 time bands."""

    def __init__(self, data: dict[str, Any]) -> None:
        if not isinstance(data, dict):
            raise CatalogError("Plan catalog must be a mapping of switch -> time band -> template")

        missing = [
            f"{sid.value}/{band.value}"
            for sid in SWITCH_ORDER
            for band in TimeBand
            if not isinstance(data.get(sid.value), dict) or band.value not in data[sid.value]
        ]
        if missing:
            raise CatalogError(f"Plan catalog is missing templates: {', '.join(missing)}")

        self._templates: dict[tuple[SwitchId, TimeBand], PlanTemplate] = {}
        for sid in SWITCH_ORDER:
            for band in TimeBand:
                self._templates[(sid, band)] = _parse_template(sid, band, data[sid.value][band.value])

    def lookup(self, switch_id: SwitchId | str, time_band: TimeBand | str) -> PlanTemplate:
        """Return the template for a pair. A miss is a configuration error."""
        sid = parse_enum(SwitchId, switch_id, "switch id")
        band = parse_enum(TimeBand, time_band, "time band")
        try:
            return self._templates[(sid, band)]
        except KeyError:
            raise CatalogError(f"No plan template for {sid.value}/{band.value}") from None

    def templates_for(self, switch_id: SwitchId | str) -> list[PlanTemplate]:
        sid = parse_enum(SwitchId, switch_id, "switch id")
        return [self.lookup(sid, band) for band in TimeBand]

    def __len__(self) -> int:
        return len(self._templates)


def load_catalog(path: Path | None = None, root: Path | None = None) -> PlanCatalog:
    """Load the plan catalog.

    Uses *path* when given, else the workspace's catalog.yaml when present,
    else the library bundled with the package.
    """
    if path is None:
        override = catalog_override_path(root if root is not None else workspace_root())
        path = override if override.exists() else default_catalog_path()
    try:
        data = read_yaml(path)
    except (OSError, yaml.YAMLError) as e:
        raise CatalogError(f"Cannot read plan catalog {path}: {e}") from e
    logger.debug("Loading plan catalog from %s", path)
    return PlanCatalog(data)
