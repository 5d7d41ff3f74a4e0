"""Per-agent movement along pathfinder routes.

A controller owns one agent. ``move_to`` plans a route and splits it into
orthogonal segments; the host then calls ``update(dt)`` once per frame to
advance the agent. Failure to find a route is reported through the completion
callback rather than an exception, so callers can always chain on arrival.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Callable, Protocol, Sequence

from officeville.sim.config import MIN_SEGMENT_LENGTH, NPC_SPEED, SUBOPTIMAL_CHANCE
from officeville.sim.contracts import WorldPoint
from officeville.sim.pathfinding import PathFinder

logger = logging.getLogger("officeville.sim.movement")


class AnimationKind(str, Enum):
    WALK = "walk"
    IDLE = "idle"


class Movable(Protocol):
    """Capability needed to drive something around the office."""

    @property
    def agent_id(self) -> str: ...

    @property
    def active(self) -> bool: ...

    @property
    def position(self) -> WorldPoint: ...

    @position.setter
    def position(self, value: WorldPoint) -> None: ...

    def play(self, animation: AnimationKind) -> None: ...

    def set_flip_x(self, flip: bool) -> None: ...


class BlockedPointCheck(Protocol):
    def is_world_point_blocked(self, point: WorldPoint) -> bool: ...


class Axis(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class MovementSegment:
    start: WorldPoint
    end: WorldPoint
    axis: Axis

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)


class MoveState(str, Enum):
    IDLE = "idle"
    MOVING = "moving"
    DESTROYED = "destroyed"


def decompose_path(
    origin: WorldPoint, path: Sequence[WorldPoint], grid: BlockedPointCheck
) -> list[MovementSegment]:
    """Turn waypoints into horizontal/vertical legs starting at ``origin``.

    A diagonal hop goes through whichever right-angle corner is open,
    horizontal-first when both are. If neither corner is open the route is
    cut short at that point.
    """
    segments: list[MovementSegment] = []
    current = origin
    for target in path:
        if current.x != target.x and current.y != target.y:
            horizontal_corner = WorldPoint(target.x, current.y)
            vertical_corner = WorldPoint(current.x, target.y)
            if not grid.is_world_point_blocked(horizontal_corner):
                segments.append(
                    MovementSegment(current, horizontal_corner, Axis.HORIZONTAL)
                )
                segments.append(
                    MovementSegment(horizontal_corner, target, Axis.VERTICAL)
                )
            elif not grid.is_world_point_blocked(vertical_corner):
                segments.append(
                    MovementSegment(current, vertical_corner, Axis.VERTICAL)
                )
                segments.append(
                    MovementSegment(vertical_corner, target, Axis.HORIZONTAL)
                )
            else:
                logger.warning(
                    "[MOVE] Both corners blocked between %s and %s, truncating route",
                    current,
                    target,
                )
                return segments
        elif current.x != target.x:
            segments.append(MovementSegment(current, target, Axis.HORIZONTAL))
        elif current.y != target.y:
            segments.append(MovementSegment(current, target, Axis.VERTICAL))
        current = target
    return segments


@dataclass
class _Leg:
    origin: WorldPoint
    target: WorldPoint
    duration: float
    elapsed: float = 0.0


class MovementController:
    def __init__(
        self,
        agent: Movable,
        pathfinder: PathFinder,
        *,
        speed: float = NPC_SPEED,
        suboptimal_chance: float = SUBOPTIMAL_CHANCE,
    ) -> None:
        self._agent: Movable | None = agent
        self._pathfinder: PathFinder | None = pathfinder
        self._speed = speed
        self._suboptimal_chance = suboptimal_chance
        self._segments: list[MovementSegment] = []
        self._index = 0
        self._leg: _Leg | None = None
        self._state = MoveState.IDLE
        self._on_complete: Callable[[], None] | None = None
        self._last_move_failed = False

    @property
    def state(self) -> MoveState:
        return self._state

    @property
    def is_moving(self) -> bool:
        return self._state is MoveState.MOVING

    @property
    def is_destroyed(self) -> bool:
        return self._state is MoveState.DESTROYED

    @property
    def agent(self) -> Movable | None:
        return self._agent

    @property
    def segments(self) -> tuple[MovementSegment, ...]:
        return tuple(self._segments)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def last_move_failed(self) -> bool:
        """Whether the most recent ``move_to`` found no route."""
        return self._last_move_failed

    def planned_durations(self) -> list[float]:
        """Seconds each queued segment takes at this controller's speed."""
        return [segment.length / self._speed for segment in self._segments]

    def move_to(
        self, target: WorldPoint, on_complete: Callable[[], None] | None = None
    ) -> bool:
        """Start walking to ``target``. Returns False if the agent stays put."""
        if self._agent is None or self._pathfinder is None:
            return False
        if not self._agent.active:
            if on_complete:
                on_complete()
            return False

        self.force_stop()
        self._on_complete = on_complete
        self._last_move_failed = False

        path = self._pathfinder.find_path(
            self._agent.position, target, suboptimal_chance=self._suboptimal_chance
        )
        if not path:
            self._last_move_failed = True
            logger.warning("[MOVE] %s could not find a path", self._agent.agent_id)
            self._reach_destination()
            return False

        self._segments = decompose_path(
            self._agent.position, path, self._pathfinder.grid
        )
        self._index = 0
        if not self._segments:
            logger.debug("[MOVE] %s has no segments to walk", self._agent.agent_id)
            self._reach_destination()
            return False

        self._state = MoveState.MOVING
        self._begin_segment()
        return self.is_moving

    def update(self, dt: float) -> bool:
        """Advance by ``dt`` seconds. Returns whether movement is still underway."""
        if self._state is not MoveState.MOVING or self._agent is None:
            return False
        if not self._agent.active:
            self.force_stop()
            return False

        remaining = dt
        while self._state is MoveState.MOVING and self._leg is not None:
            leg = self._leg
            left = leg.duration - leg.elapsed
            if remaining < left:
                leg.elapsed += remaining
                ratio = leg.elapsed / leg.duration
                self._agent.position = WorldPoint(
                    leg.origin.x + (leg.target.x - leg.origin.x) * ratio,
                    leg.origin.y + (leg.target.y - leg.origin.y) * ratio,
                )
                break
            remaining -= left
            self._agent.position = leg.target
            self._index += 1
            self._begin_segment()
        return self.is_moving

    def force_stop(self) -> None:
        """Drop the current route without calling the completion callback."""
        if self._state is MoveState.DESTROYED:
            return
        self._leg = None
        if self._state is MoveState.MOVING:
            self._state = MoveState.IDLE
            if self._agent is not None and self._agent.active:
                self._agent.play(AnimationKind.IDLE)
        self._segments = []
        self._index = 0

    def destroy(self) -> None:
        if self._state is MoveState.DESTROYED:
            return
        self.force_stop()
        self._state = MoveState.DESTROYED
        self._on_complete = None
        self._agent = None
        self._pathfinder = None

    def _begin_segment(self) -> None:
        agent = self._agent
        if agent is None:
            return
        position = agent.position
        while self._index < len(self._segments):
            end = self._segments[self._index].end
            if position.distance_to(end) >= MIN_SEGMENT_LENGTH:
                break
            self._index += 1

        if self._index >= len(self._segments):
            self._leg = None
            self._reach_destination()
            return

        segment = self._segments[self._index]
        agent.play(AnimationKind.WALK)
        if segment.end.x != position.x:
            agent.set_flip_x(segment.end.x < position.x)
        self._leg = _Leg(
            origin=position,
            target=segment.end,
            duration=position.distance_to(segment.end) / self._speed,
        )

    def _reach_destination(self) -> None:
        if self._state is MoveState.DESTROYED:
            return
        self._state = MoveState.IDLE
        self._leg = None
        self._segments = []
        self._index = 0
        if self._agent is not None and self._agent.active:
            self._agent.play(AnimationKind.IDLE)
            logger.debug("[MOVE] %s reached destination", self._agent.agent_id)
        callback = self._on_complete
        self._on_complete = None
        if callback is not None:
            callback()
