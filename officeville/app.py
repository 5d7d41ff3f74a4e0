"""Application entry for running the office."""

from __future__ import annotations

import logging
import os
import random
from pathlib import Path

from rich.console import Console

from officeville.llm.base import ChatClient
from officeville.llm.fake_chat import FakeChatClient
from officeville.render.office_map import render_office_lines
from officeville.render.textual_app import OfficevilleApp
from officeville.render.viewer import render_tick
from officeville.sim.config import SimConfig
from officeville.sim.contracts import OfficeConfig, TickPayload
from officeville.sim.office import Office
from officeville.sim.tick_loop import FRAME_MS, run_ticks
from officeville.sim.world_loader import build_demo_office, load_office_config

logger = logging.getLogger("officeville.app")

DEFAULT_CHAT_BACKEND = "fake"
DEFAULT_LOG_LEVEL = "WARNING"


def build_office(
    world: Path | None = None,
    *,
    seed: int | None = None,
    chat_backend: str | None = None,
    sim_config: SimConfig | None = None,
) -> Office:
    config = _resolve_office_config(world)
    resolved_seed = _resolve_seed(seed)
    logger.info("[OFFICE] Building office (seed=%s)", resolved_seed)
    return Office(
        config,
        sim_config=sim_config or _resolve_sim_config(),
        chat=_resolve_chat(chat_backend),
        rng=random.Random(resolved_seed),
    )


def run_simulation(
    world: Path | None = None,
    *,
    ticks: int | None = 600,
    seed: int | None = None,
    chat_backend: str | None = None,
    frame_ms: float = FRAME_MS,
    print_every: int = 0,
    console: Console | None = None,
) -> TickPayload | None:
    """Run headless and print the final frame; returns the last snapshot."""
    office = build_office(world, seed=seed, chat_backend=chat_backend)
    console = console or Console()
    last: TickPayload | None = None
    try:
        for payload in run_ticks(office, ticks, frame_ms=frame_ms):
            last = payload
            for event in payload.events or []:
                logger.info("[OFFICE] %s %s", event.kind, event.payload)
            if print_every and payload.tick % print_every == 0:
                console.print(render_tick(payload))
    finally:
        office.shutdown()
    if last is not None:
        map_lines = render_office_lines(office.grid, last)
        console.print(render_tick(last, map_lines=map_lines))
    return last


def run_simulation_with_viewer(
    world: Path | None = None,
    *,
    seed: int | None = None,
    chat_backend: str | None = None,
    frame_ms: float = FRAME_MS,
) -> None:
    office = build_office(world, seed=seed, chat_backend=chat_backend)
    OfficevilleApp(office, frame_ms=frame_ms).run()


def _resolve_office_config(world: Path | None) -> OfficeConfig:
    path = world or _env_path("OFFICEVILLE_WORLD")
    if path is None:
        return build_demo_office()
    return load_office_config(path)


def _resolve_seed(seed: int | None) -> int | None:
    if seed is not None:
        return seed
    raw = os.getenv("OFFICEVILLE_SEED")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"OFFICEVILLE_SEED must be an integer, got {raw!r}") from exc


def _resolve_chat(chat_backend: str | None) -> ChatClient | None:
    backend = (
        chat_backend or os.getenv("OFFICEVILLE_CHAT") or DEFAULT_CHAT_BACKEND
    ).lower()
    if backend == "none":
        return None
    if backend == "loading":
        return FakeChatClient(ready=False)
    return FakeChatClient()


def _resolve_sim_config() -> SimConfig:
    overrides: dict[str, float] = {}
    speed = os.getenv("OFFICEVILLE_NPC_SPEED")
    if speed:
        overrides["npc_speed"] = float(speed)
    minute = os.getenv("OFFICEVILLE_GAME_MINUTE_MS")
    if minute:
        overrides["game_minute_ms"] = int(minute)
    return SimConfig(**overrides)


def resolve_log_level(log_level: str | None) -> str:
    return (
        log_level or os.getenv("OFFICEVILLE_LOG_LEVEL") or DEFAULT_LOG_LEVEL
    ).upper()


def _env_path(name: str) -> Path | None:
    raw = os.getenv(name)
    return Path(raw) if raw else None
