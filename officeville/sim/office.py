"""The office scene: owns every simulation component and runs one frame at a time."""

from __future__ import annotations

import logging
import random

from officeville.llm.base import ChatClient
from officeville.sim.config import SimConfig
from officeville.sim.contracts import Event, OfficeConfig, TickPayload, WorldPoint
from officeville.sim.conversation import ConversationScheduler, build_script
from officeville.sim.day_cycle import GameClock, arrival_target, departure_probability
from officeville.sim.grid import GridModel
from officeville.sim.interaction import (
    NOT_READY_BUBBLE_MS,
    NOT_READY_TEXT,
    InteractionSession,
    find_interaction_target,
)
from officeville.sim.movement import AnimationKind, MovementController
from officeville.sim.pathfinding import PathFinder
from officeville.sim.player import Player
from officeville.sim.roster import LifecycleState, build_roster
from officeville.sim.timers import TimerQueue
from officeville.sim.world_state import Stage, laptop_for

logger = logging.getLogger("officeville.sim.office")

DOOR_Y = 194
EXIT_X = 731


class Office:
    def __init__(
        self,
        config: OfficeConfig,
        *,
        sim_config: SimConfig | None = None,
        chat: ChatClient | None = None,
        rng: random.Random | None = None,
        auto_staff: bool = True,
    ) -> None:
        self.config = config
        self.sim_config = sim_config or SimConfig()
        self.rng = rng or random.Random()
        self.auto_staff = auto_staff
        self.chat = chat

        self.grid = GridModel(
            config.world_width, config.world_height, self.sim_config.cell_size
        )
        self.grid.mark_obstacles(config.obstacles)
        self.pathfinder = PathFinder(self.grid, rng=self.rng)
        self.roster = build_roster(config.teams, config.desks, rng=self.rng)
        self.timers = TimerQueue()
        self.stage = Stage()
        self.clock = GameClock(minute_ms=self.sim_config.game_minute_ms)
        self._events: list[Event] = []
        scripts = {
            team.team_id: build_script(team.conversation, group_id=team.team_id)
            for team in config.teams
        }
        self.conversations = ConversationScheduler(
            self.roster,
            scripts,
            self.timers,
            self.stage,
            config=self.sim_config,
            rng=self.rng,
            emit=self._events.append,
        )
        self.controllers: dict[str, MovementController] = {}

        start = config.player_start or (config.world_width / 2, config.world_height / 2)
        self.player = Player(
            position=WorldPoint(*start), speed=self.sim_config.player_speed
        )
        self.interaction: InteractionSession | None = None
        # runs on frame time, which keeps going while an interaction pauses the office
        self.session_timers = TimerQueue()
        self.frame_time_ms = 0.0

        door_y = min(DOOR_Y, config.world_height - 1)
        self.entrance = WorldPoint(config.world_width / 2, door_y)
        self.exit = WorldPoint(min(EXIT_X, config.world_width - 1), door_y)

        self.time_ms = 0.0
        self.tick = 0
        self._shut_down = False

    @property
    def paused(self) -> bool:
        return self.interaction is not None

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    def update(
        self, dt_ms: float, *, player_input: tuple[int, int] = (0, 0)
    ) -> TickPayload:
        """Run one frame and return its snapshot.

        Order within a frame: due timers, player, NPC movement (arrivals land in
        the roster here), the office clock, then conversation pacing.
        """
        self.tick += 1
        if self._shut_down:
            return self.snapshot()
        self.frame_time_ms += dt_ms
        self.session_timers.advance(self.frame_time_ms)
        if self.paused:
            return self.snapshot()

        self.time_ms += dt_ms
        self.stage.now_ms = self.time_ms
        self.timers.advance(self.time_ms)

        dt = dt_ms / 1000
        self.player.step(
            player_input,
            dt,
            obstacles=self.config.obstacles,
            world_width=self.config.world_width,
            world_height=self.config.world_height,
        )
        for controller in list(self.controllers.values()):
            controller.update(dt)

        self.clock.advance(
            dt_ms, on_minute=self._on_game_minute if self.auto_staff else None
        )

        self.conversations.tick(self.time_ms)
        self.stage.expire_bubbles(self.time_ms)
        return self.snapshot()

    def spawn_and_move(self, agent_id: str | None = None) -> str | None:
        """Bring one inactive agent in through the door and walk them to their desk."""
        if self._shut_down:
            return None
        if agent_id is None:
            inactive = self.roster.in_state(LifecycleState.INACTIVE)
            if not inactive:
                return None
            record = self.rng.choice(inactive)
        else:
            record = self.roster.get(agent_id)
            if record is None or record.lifecycle_state != LifecycleState.INACTIVE:
                return None

        self.roster.begin_arrival(record.agent_id)
        sprite = self.stage.spawn(record.agent_id, record.sprite_key, self.entrance)
        controller = MovementController(
            sprite,
            self.pathfinder,
            speed=self.sim_config.npc_speed,
            suboptimal_chance=self.sim_config.suboptimal_chance,
        )
        self.controllers[record.agent_id] = controller
        self._publish("ARRIVING", agent_id=record.agent_id, group_id=record.group_id)
        arrival_id = record.agent_id
        controller.move_to(record.desk_position, lambda: self._on_arrival(arrival_id))
        if controller.last_move_failed:
            self._publish("PATH_FAILED", agent_id=arrival_id, target="desk")
        return record.agent_id

    def make_one_leave(self, agent_id: str | None = None) -> bool:
        if self._shut_down:
            return False
        if agent_id is None:
            working = self.roster.in_state(LifecycleState.WORKING)
            if not working:
                return False
            record = self.rng.choice(working)
        else:
            record = self.roster.get(agent_id)
            if record is None:
                return False
        if record.lifecycle_state != LifecycleState.WORKING:
            return False

        self.roster.begin_departure(record.agent_id)
        self.stage.detach(record.agent_id)
        self._publish("LEAVING", agent_id=record.agent_id, group_id=record.group_id)
        controller = self.controllers.get(record.agent_id)
        leaving_id = record.agent_id
        if controller is None or controller.is_destroyed:
            self.cleanup(leaving_id)
            return True
        controller.move_to(self.exit, lambda: self.cleanup(leaving_id))
        if controller.last_move_failed:
            self._publish("PATH_FAILED", agent_id=leaving_id, target="exit")
        return True

    def make_all_leave(self) -> int:
        """Send every working agent home; resets the office if nobody is in."""
        present = (LifecycleState.WORKING, LifecycleState.ARRIVING)
        active = [record for record in self.roster if record.lifecycle_state in present]
        if not active:
            self.reset_all()
            return 0
        logger.info("[OFFICE] Closing time, sending %d agents home", len(active))
        return sum(1 for record in active if self.make_one_leave(record.agent_id))

    def cleanup(self, agent_id: str) -> None:
        record = self.roster.get(agent_id)
        if record is not None and record.lifecycle_state == LifecycleState.LEAVING:
            self.roster.commit_departure(agent_id)
            self._publish("DEPARTED", agent_id=agent_id, group_id=record.group_id)
        controller = self.controllers.pop(agent_id, None)
        if controller is not None:
            controller.destroy()
        self.stage.remove(agent_id)
        if self.roster.all_inactive() and self.controllers:
            logger.info("[OFFICE] Everyone has left, clearing controllers")
            self._destroy_controllers()

    def reset_all(self) -> None:
        logger.info("[OFFICE] Hard reset of all agents")
        self.roster.reset_all()
        self._destroy_controllers()
        self.stage.clear()

    def begin_interaction(
        self, agent_id: str | None = None
    ) -> InteractionSession | None:
        """Start talking to ``agent_id`` or to whoever the player is facing."""
        if self._shut_down or self.interaction is not None or self.chat is None:
            return None
        if agent_id is None:
            target = find_interaction_target(
                self.player,
                self.stage.sprites.values(),
                max_distance=self.sim_config.interaction_distance,
            )
            if target is None:
                return None
            agent_id = target.agent_id
        record = self.roster.get(agent_id)
        if record is None or agent_id not in self.stage.sprites:
            return None
        if not self.chat.is_ready:
            self.stage.show_bubble(
                self.player.agent_id, NOT_READY_TEXT, NOT_READY_BUBBLE_MS
            )
            return None

        self.interaction = InteractionSession(
            record,
            self.chat,
            self.stage,
            player_id=self.player.agent_id,
            timers=self.session_timers,
            on_finished=self.end_interaction,
        )
        self.player.play(AnimationKind.IDLE)
        self._publish("INTERACTION_STARTED", agent_id=agent_id)
        return self.interaction

    def end_interaction(self) -> None:
        session = self.interaction
        if session is None:
            return
        self.interaction = None
        session.close()
        self._publish("INTERACTION_ENDED", agent_id=session.agent_id)

    def shutdown(self) -> None:
        if self._shut_down:
            return
        logger.info("[OFFICE] Shutting down")
        self.end_interaction()
        self._shut_down = True
        self.conversations.destroy()
        self.timers.cancel_all()
        self.session_timers.cancel_all()
        self._destroy_controllers()

    def snapshot(self, *, drain_events: bool = True) -> TickPayload:
        """Current frame view.

        Pending events are handed out once; with ``drain_events=False`` they stay
        queued for the next frame.
        """
        states = {r.agent_id: r.lifecycle_state.value for r in self.roster}
        groups = {r.agent_id: r.group_id for r in self.roster}
        events = list(self._events)
        if drain_events:
            self._events.clear()
        talking_to = self.interaction.agent_id if self.interaction else None
        return TickPayload(
            tick=self.tick,
            time_ms=self.time_ms,
            clock=self.clock.label(),
            night=self.clock.is_night,
            agents=self.stage.agent_snapshots(states, groups),
            player=self.player.snapshot(),
            bubbles=self.stage.bubble_snapshots(),
            accessories=self.stage.accessory_snapshots(),
            events=events or None,
            interaction_agent_id=talking_to,
        )

    def _on_arrival(self, agent_id: str) -> None:
        record = self.roster.get(agent_id)
        sprite = self.stage.sprites.get(agent_id)
        if record is None or record.lifecycle_state != LifecycleState.ARRIVING:
            return
        self.roster.commit_arrival(agent_id)
        if sprite is not None:
            sprite.play(AnimationKind.IDLE)
            sprite.set_flip_x(record.face_left)
            self.stage.attach(agent_id, laptop_for(sprite, face_left=record.face_left))
        self._publish("ARRIVED", agent_id=agent_id, group_id=record.group_id)
        self.conversations.try_start(record.group_id, self.time_ms)

    def _on_game_minute(self) -> None:
        hours, minutes = self.clock.hours, self.clock.minutes
        inactive = self.roster.in_state(LifecycleState.INACTIVE)
        total = len(self.roster)
        if inactive:
            target = arrival_target(hours, minutes, total)
            deficit = target - (total - len(inactive))
            for _ in range(min(deficit, len(inactive))):
                self.spawn_and_move()

        chance = departure_probability(hours, minutes)
        if chance > 0:
            for record in self.roster.in_state(LifecycleState.WORKING):
                if self.rng.random() < chance:
                    self.make_one_leave(record.agent_id)

    def _destroy_controllers(self) -> None:
        for controller in self.controllers.values():
            controller.destroy()
        self.controllers.clear()

    def _publish(self, kind: str, **payload: object) -> None:
        self._events.append(Event(kind=kind, payload=dict(payload)))
