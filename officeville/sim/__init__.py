"""Office simulation core."""

from officeville.sim.config import SimConfig
from officeville.sim.contracts import (
    Event,
    Obstacle,
    OfficeConfig,
    TeamDef,
    TickPayload,
    WorldPoint,
)
from officeville.sim.conversation import ConversationScheduler, build_script
from officeville.sim.grid import GridConfigError, GridModel
from officeville.sim.movement import MovementController, decompose_path
from officeville.sim.office import Office
from officeville.sim.pathfinding import PathFinder
from officeville.sim.roster import AgentRecord, LifecycleState, Roster, build_roster
from officeville.sim.tick_loop import run_ticks
from officeville.sim.timers import TimerHandle, TimerQueue
from officeville.sim.world_loader import build_demo_office, load_office_config

__all__ = [
    "AgentRecord",
    "ConversationScheduler",
    "Event",
    "GridConfigError",
    "GridModel",
    "LifecycleState",
    "MovementController",
    "Obstacle",
    "Office",
    "OfficeConfig",
    "PathFinder",
    "Roster",
    "SimConfig",
    "TeamDef",
    "TickPayload",
    "TimerHandle",
    "TimerQueue",
    "WorldPoint",
    "build_demo_office",
    "build_roster",
    "build_script",
    "decompose_path",
    "load_office_config",
    "run_ticks",
]
