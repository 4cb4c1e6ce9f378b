"""Shared test fixtures for Switchboard tests."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from switchboard.catalog import PlanCatalog, default_catalog_path, load_catalog
from switchboard.fileio import write_yaml_atomic


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary, empty workspace (first run: no state yet)."""
    root = tmp_path / "workspace"
    root.mkdir(parents=True)

    write_yaml_atomic(root / "profile.yaml", {"timezone": "UTC"})

    os.environ["SWITCHBOARD_ROOT"] = str(root)
    yield root
    if "SWITCHBOARD_ROOT" in os.environ:
        del os.environ["SWITCHBOARD_ROOT"]


@pytest.fixture
def seeded_workspace(workspace: Path) -> Path:
    """Workspace with existing signals, switch progress and plan items."""
    state = workspace / "state"
    state.mkdir()

    signals = {
        "energyLevel": "high",
        "stressLevel": "low",
        "timeBand": "medium",
        "primarySwitchId": "purpose",
        "supportSwitchId": "money",
        "modeBias": "maintaining",
        "flags": {"sleepDebtFlag": True},
        "flagCounts14d": {"sleepDebt": 3},
        "lastUpdated": "2026-02-10T08:00:00+00:00",
    }
    (state / "signals.json").write_text(json.dumps(signals, indent=2), encoding="utf-8")

    switches = {
        "body": {"status": "stable", "mode": "maintaining", "checkIns": 9, "streakDays": 9,
                 "trainingStarted": "2026-01-20T09:00:00+00:00", "lastUpdated": "2026-02-09T09:00:00+00:00"},
        "time": {"status": "flickering", "mode": "training", "checkIns": 2, "streakDays": 2,
                 "lastUpdated": "2026-02-10T09:00:00+00:00"},
    }
    (state / "switches.json").write_text(json.dumps(switches, indent=2), encoding="utf-8")

    plan = {
        "items": [
            {"id": "body_1", "switchId": "body", "title": "10-min body reset",
             "estimateMinutes": 10, "completed": True, "steps": ["Breathe", "Move", "Water"]},
            {"id": "time_1", "switchId": "time", "title": "10-min time reset",
             "estimateMinutes": 10, "completed": False, "steps": ["List", "Pick", "Block"]},
        ]
    }
    (state / "plan.json").write_text(json.dumps(plan, indent=2), encoding="utf-8")
    return workspace


@pytest.fixture(scope="session")
def catalog() -> PlanCatalog:
    """The plan library bundled with the package."""
    return load_catalog(default_catalog_path())
