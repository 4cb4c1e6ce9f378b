"""The user's plan list: catalog-resolved items, toggled and removed by id."""

from __future__ import annotations

import logging
import secrets
from pathlib import Path
from typing import Any

from switchboard.catalog import PlanCatalog
from switchboard.errors import ValidationError
from switchboard.fileio import load_record, save_record
from switchboard.models import PlanItem, SwitchId, TimeBand, parse_enum
from switchboard.workspace import now_local, plan_path, workspace_root

logger = logging.getLogger(__name__)


def _items_from_record(data: dict[str, Any]) -> list[PlanItem]:
    items: list[PlanItem] = []
    seen: set[str] = set()
    raw_items = data.get("items")
    if not isinstance(raw_items, list):
        return items
    for raw in raw_items:
        try:
            item = PlanItem.from_dict(raw)
        except ValidationError as e:
            logger.warning("Dropping unreadable plan item: %s", e)
            continue
        if item.id in seen:
            logger.warning("Dropping duplicate plan item id %s", item.id)
            continue
        seen.add(item.id)
        items.append(item)
    return items


class PlanList:
    """Ordered, persisted list of plan items for one workspace."""

    def __init__(self, catalog: PlanCatalog, root: Path | None = None) -> None:
        self.catalog = catalog
        self.root = root if root is not None else workspace_root()
        self._items: list[PlanItem] | None = None

    @property
    def path(self) -> Path:
        return plan_path(self.root)

    def load(self) -> list[PlanItem]:
        self._items = _items_from_record(load_record(self.path))
        return self.items()

    def flush(self) -> None:
        save_record(self.path, {"items": [item.to_dict() for item in self._current()]})

    def _current(self) -> list[PlanItem]:
        if self._items is None:
            self.load()
        return self._items

    def _new_id(self, switch_id: SwitchId) -> str:
        existing = {item.id for item in self._current()}
        while True:
            item_id = f"{switch_id.value}_{secrets.token_hex(6)}"
            if item_id not in existing:
                return item_id

    # ── Reads ──

    def items(self) -> list[PlanItem]:
        return [PlanItem.from_dict(item.to_dict()) for item in self._current()]

    def find(self, item_id: str) -> PlanItem | None:
        for item in self._current():
            if item.id == item_id:
                return PlanItem.from_dict(item.to_dict())
        return None

    def grouped(self) -> dict[SwitchId, list[PlanItem]]:
        """Items partitioned by switch; groups and members keep insertion order."""
        groups: dict[SwitchId, list[PlanItem]] = {}
        for item in self.items():
            groups.setdefault(item.switch_id, []).append(item)
        return groups

    def progress(self) -> dict[str, int]:
        items = self._current()
        return {
            "completed": sum(1 for item in items if item.completed),
            "total": len(items),
        }

    # ── Mutations ──

    def add_from_catalog(self, switch_id: SwitchId | str, time_band: TimeBand | str) -> PlanItem:
        """Append a new item built from the catalog template for (switch, band)."""
        sid = parse_enum(SwitchId, switch_id, "switch id")
        band = parse_enum(TimeBand, time_band, "time band")
        template = self.catalog.lookup(sid, band)
        item = PlanItem(
            id=self._new_id(sid),
            switch_id=sid,
            title=template.title,
            estimate_minutes=template.estimate_minutes,
            completed=False,
            steps=list(template.steps),
            created_at=now_local(self.root).isoformat(timespec="seconds"),
        )
        self._current().append(item)
        logger.info("Added plan item %s (%s/%s)", item.id, sid.value, band.value)
        self.flush()
        return PlanItem.from_dict(item.to_dict())

    def toggle_complete(self, item_id: str) -> PlanItem | None:
        """Flip completed on one item. Returns the updated item, or None if not found."""
        for item in self._current():
            if item.id == item_id:
                item.completed = not item.completed
                self.flush()
                return PlanItem.from_dict(item.to_dict())
        return None

    def remove(self, item_id: str) -> bool:
        """Delete one item by id. Returns False if no such item."""
        items = self._current()
        for i, item in enumerate(items):
            if item.id == item_id:
                items.pop(i)
                logger.info("Removed plan item %s", item_id)
                self.flush()
                return True
        return False
