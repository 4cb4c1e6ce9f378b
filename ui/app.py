"""Switchboard JSON API: the read accessors and mutations exposed to UI clients."""

from __future__ import annotations

import logging
import os
import secrets
from functools import lru_cache
from pathlib import Path
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from switchboard import (
    CatalogError,
    PersistenceError,
    PlanCatalog,
    PlanItem,
    PlanList,
    SignalStore,
    Signals,
    SwitchBoard,
    SwitchId,
    SwitchState,
    ValidationError as SwitchboardValidationError,
    derive_mode,
    derive_recommended_switch,
    level_from_score,
    load_catalog,
    time_band_for_minutes,
    workspace_root as _workspace_root,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Switchboard API", version="0.1.0")


# ── Error mapping ─────────────────────────────────────────────

@app.exception_handler(SwitchboardValidationError)
async def _validation_error(request: Request, exc: SwitchboardValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(CatalogError)
async def _catalog_error(request: Request, exc: CatalogError) -> JSONResponse:
    logger.error("Plan catalog misconfigured: %s", exc)
    return JSONResponse(status_code=500, content={"detail": f"Plan catalog error: {exc}"})


@app.exception_handler(PersistenceError)
async def _persistence_error(request: Request, exc: PersistenceError) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": str(exc), "retryable": True})


# ── Auth ──────────────────────────────────────────────────────

security = HTTPBasic(auto_error=False)


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("SWITCHBOARD_USERNAME", "")
    expected_password = os.environ.get("SWITCHBOARD_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


# ── Helpers ───────────────────────────────────────────────────

@lru_cache(maxsize=8)
def _catalog(root: Path) -> PlanCatalog:
    return load_catalog(root=root)


def _signals_dict(signals: Signals) -> dict[str, Any]:
    return signals.to_dict()


def _switch_dict(switch_id: SwitchId, state: SwitchState) -> dict[str, Any]:
    return {"id": switch_id.value, **state.to_dict()}


def _item_dicts(items: list[PlanItem]) -> list[dict[str, Any]]:
    return [item.to_dict() for item in items]


def _require(payload: dict[str, Any], key: str) -> Any:
    if key not in payload or payload[key] is None:
        raise HTTPException(status_code=400, detail=f"Missing {key}")
    return payload[key]


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


# ── Signals ───────────────────────────────────────────────────

@app.get("/api/signals")
def api_get_signals(username: str = Depends(get_current_user)) -> dict[str, Any]:
    return _signals_dict(SignalStore(_workspace_root()).get())


@app.post("/api/signals/energy")
def api_set_energy(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Set energy from a level, or from a numeric score (``score``/``max``)."""
    if payload.get("level") is not None:
        level = payload["level"]
    elif payload.get("score") is not None:
        try:
            level = level_from_score(float(payload["score"]), float(payload.get("max", 10)))
        except (TypeError, ValueError) as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
    else:
        raise HTTPException(status_code=400, detail="Missing level or score")
    return _signals_dict(SignalStore(_workspace_root()).update_energy_level(level))


@app.post("/api/signals/stress")
def api_set_stress(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    level = _require(payload, "level")
    return _signals_dict(SignalStore(_workspace_root()).update_stress_level(level))


@app.post("/api/signals/time_band")
def api_set_time_band(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Set the time band directly, or from available ``minutes``."""
    if payload.get("band") is not None:
        band = payload["band"]
    elif payload.get("minutes") is not None:
        try:
            band = time_band_for_minutes(int(payload["minutes"]))
        except (TypeError, ValueError) as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
    else:
        raise HTTPException(status_code=400, detail="Missing band or minutes")
    return _signals_dict(SignalStore(_workspace_root()).update_time_band(band))


@app.post("/api/signals/primary")
def api_set_primary(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    primary = _require(payload, "primary")
    store = SignalStore(_workspace_root())
    return _signals_dict(store.set_primary_switches(primary, payload.get("support")))


@app.post("/api/signals/mode_bias")
def api_set_mode_bias(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    mode = _require(payload, "mode")
    return _signals_dict(SignalStore(_workspace_root()).set_mode_bias(mode))


@app.put("/api/signals/flags/{family}")
def api_set_flag(family: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    value = _require(payload, "value")
    return _signals_dict(SignalStore(_workspace_root()).set_flag(family, value))


@app.post("/api/signals/flag_counts/{family}/increment")
def api_increment_flag_count(family: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    return _signals_dict(SignalStore(_workspace_root()).increment_flag_count(family))


# ── Recommendation ────────────────────────────────────────────

@app.get("/api/recommendation")
def api_recommendation(username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Recommended switch, mode, and the plan template for the current time band."""
    root = _workspace_root()
    signals = SignalStore(root).get()
    recommendation = derive_recommended_switch(signals)
    template = _catalog(root).lookup(recommendation.recommended_switch_id, signals.time_band)
    return {
        **recommendation.to_dict(),
        "mode": derive_mode(signals).value,
        "timeBand": signals.time_band.value,
        "template": template.to_dict(),
    }


# ── Switches ──────────────────────────────────────────────────

@app.get("/api/switches")
def api_list_switches(username: str = Depends(get_current_user)) -> dict[str, Any]:
    board = SwitchBoard(_workspace_root())
    return {"switches": [_switch_dict(sid, state) for sid, state in board.all().items()]}


@app.get("/api/switches/active")
def api_active_switches(username: str = Depends(get_current_user)) -> dict[str, Any]:
    return {"switches": [sid.value for sid in SwitchBoard(_workspace_root()).active_switches()]}


@app.get("/api/switches/priority")
def api_priority_switches(username: str = Depends(get_current_user)) -> dict[str, Any]:
    return {"switches": [sid.value for sid in SwitchBoard(_workspace_root()).priority_switches()]}


@app.get("/api/switches/training")
def api_training_switches(username: str = Depends(get_current_user)) -> dict[str, Any]:
    return {"switches": [sid.value for sid in SwitchBoard(_workspace_root()).training_switches()]}


@app.get("/api/switches/recent")
def api_recent_switches(limit: int = 3, username: str = Depends(get_current_user)) -> dict[str, Any]:
    return {"switches": [sid.value for sid in SwitchBoard(_workspace_root()).recent_switches(limit)]}


@app.get("/api/switches/{switch_id}")
def api_get_switch(switch_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    state = SwitchBoard(_workspace_root()).get(switch_id)
    return _switch_dict(SwitchId(switch_id), state)


@app.post("/api/switches/{switch_id}/start")
def api_start_training(switch_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    state = SwitchBoard(_workspace_root()).start_training(switch_id)
    return _switch_dict(SwitchId(switch_id), state)


@app.post("/api/switches/{switch_id}/checkin")
def api_check_in(switch_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    state = SwitchBoard(_workspace_root()).record_check_in(switch_id)
    return _switch_dict(SwitchId(switch_id), state)


@app.put("/api/switches/{switch_id}/status")
def api_set_switch_status(switch_id: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    state = SwitchBoard(_workspace_root()).set_status(switch_id, _require(payload, "status"))
    return _switch_dict(SwitchId(switch_id), state)


@app.put("/api/switches/{switch_id}/mode")
def api_set_switch_mode(switch_id: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    state = SwitchBoard(_workspace_root()).set_mode(switch_id, _require(payload, "mode"))
    return _switch_dict(SwitchId(switch_id), state)


# ── Plan ──────────────────────────────────────────────────────

def _plan_response(plan: PlanList) -> dict[str, Any]:
    return {
        "items": _item_dicts(plan.items()),
        "grouped": {sid.value: _item_dicts(items) for sid, items in plan.grouped().items()},
        "progress": plan.progress(),
    }


@app.get("/api/plan")
def api_get_plan(username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    return _plan_response(PlanList(_catalog(root), root))


@app.post("/api/plan")
def api_add_plan_item(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Add a catalog item; the time band defaults to the user's current band."""
    root = _workspace_root()
    switch_id = _require(payload, "switchId")
    time_band = payload.get("timeBand") or SignalStore(root).get().time_band
    plan = PlanList(_catalog(root), root)
    item = plan.add_from_catalog(switch_id, time_band)
    return {"ok": True, "item": item.to_dict()}


@app.post("/api/plan/{item_id}/toggle")
def api_toggle_plan_item(item_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    item = PlanList(_catalog(root), root).toggle_complete(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Plan item not found: {item_id}")
    return {"ok": True, "item": item.to_dict()}


@app.delete("/api/plan/{item_id}")
def api_remove_plan_item(item_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    if not PlanList(_catalog(root), root).remove(item_id):
        raise HTTPException(status_code=404, detail=f"Plan item not found: {item_id}")
    return {"ok": True, "item_id": item_id}


# ── Entry point ────────────────────────────────────────────────

def main() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(
        app,
        host=os.environ.get("SWITCHBOARD_HOST", "127.0.0.1"),
        port=int(os.environ.get("SWITCHBOARD_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
