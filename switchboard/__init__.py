"""Switchboard core library: signals, recommendations, switch progress, plans.

Public API re-exports for convenient imports:
    from switchboard import SignalStore, SwitchBoard, derive_recommended_switch, ...
"""

# Errors
from switchboard.errors import (
    SwitchboardError,
    ValidationError,
    CatalogError,
    PersistenceError,
)

# Workspace & paths
from switchboard.workspace import (
    workspace_root,
    get_user_timezone,
    now_local,
    profile_path,
    catalog_override_path,
    signals_path,
    switches_path,
    plan_path,
)

# File I/O
from switchboard.fileio import (
    read_text,
    read_json,
    read_yaml,
    load_record,
    save_record,
    write_json_atomic,
    write_yaml_atomic,
)

# Models
from switchboard.models import (
    Level,
    EnergyLevel,
    StressLevel,
    TimeBand,
    Mode,
    SwitchId,
    SWITCH_ORDER,
    SwitchStatus,
    FlagFamily,
    Intensity,
    Flags,
    FlagCounts,
    Signals,
    SwitchState,
    PlanAction,
    RoutineBlock,
    SupportAction,
    PlanTemplate,
    PlanItem,
    Recommendation,
    parse_enum,
)

# Signals
from switchboard.signals import (
    SignalStore,
    SignalCommand,
    SetEnergyLevel,
    SetStressLevel,
    SetTimeBand,
    SetPrimarySwitches,
    SetModeBias,
    SetFlag,
    IncrementFlagCount,
    level_from_score,
    time_band_for_minutes,
)

# Recommendation
from switchboard.recommend import derive_recommended_switch, derive_mode

# Switches
from switchboard.switches import (
    SwitchBoard,
    next_status,
    STABLE_THRESHOLD,
    POWERED_THRESHOLD,
)

# Catalog & plans
from switchboard.catalog import PlanCatalog, load_catalog, default_catalog_path, TIME_BAND_CAPS
from switchboard.plans import PlanList
