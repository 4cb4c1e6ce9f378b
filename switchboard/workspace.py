"""Workspace root, timezone, path helpers for Switchboard."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from switchboard.fileio import read_yaml


def workspace_root() -> Path:
    """Get the workspace root directory (contains profile.yaml and state/)."""
    return Path(
        os.environ.get("SWITCHBOARD_ROOT", str(Path.home() / "switchboard"))
    ).expanduser().resolve()


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Get user's timezone from profile.yaml, defaulting to UTC."""
    if root is None:
        root = workspace_root()
    try:
        profile = read_yaml(profile_path(root))
        if profile and "timezone" in profile:
            return ZoneInfo(profile["timezone"])
    except (OSError, yaml.YAMLError, ValueError, ZoneInfoNotFoundError):
        pass
    return ZoneInfo("UTC")


def now_local(root: Path | None = None) -> datetime:
    """Get current datetime in user's timezone."""
    tz = get_user_timezone(root)
    return datetime.now(tz)


# ── Path helpers ──────────────────────────────────────────────

def profile_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "profile.yaml"


def catalog_override_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "catalog.yaml"


def signals_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "state" / "signals.json"


def switches_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "state" / "switches.json"


def plan_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "state" / "plan.json"
