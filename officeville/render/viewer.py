"""Rich viewer rendering for TickPayload."""

from __future__ import annotations

from typing import Sequence

from rich.columns import Columns
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from officeville.sim.contracts import TickPayload


def render_tick(
    payload: TickPayload,
    *,
    max_events: int = 5,
    map_lines: Sequence[Text] | None = None,
) -> RenderableType:
    header = _render_header(payload)
    agents = _render_agents(payload)
    bubbles = _render_bubbles(payload)
    events = _render_events(payload, max_events=max_events)

    left = Group(header, agents)
    right = Group(bubbles, events)
    panels = [Panel(left, title="Office"), Panel(right, title="Chatter")]
    if map_lines:
        return Group(Panel(Group(*map_lines), title="Floor"), Columns(panels))
    return Columns(panels)


def _render_header(payload: TickPayload) -> Text:
    header = Text(f"Tick {payload.tick}", style="bold")
    header.append(f"  {payload.clock}")
    if payload.night:
        header.append("  night", style="blue")
    if payload.interaction_agent_id:
        header.append(f"  talking to {payload.interaction_agent_id}", style="green")
    return header


def _render_agents(payload: TickPayload) -> RenderableType:
    table = Table(title="Agents", show_header=True, header_style="bold")
    table.add_column("Agent")
    table.add_column("Team")
    table.add_column("State")
    table.add_column("Position")

    for agent in sorted(payload.agents, key=lambda item: item.agent_id):
        table.add_row(
            agent.agent_id,
            agent.group_id or "-",
            agent.state,
            f"{agent.x:.0f},{agent.y:.0f}",
        )
    if payload.player is not None:
        player = payload.player
        table.add_row(player.agent_id, "-", "player", f"{player.x:.0f},{player.y:.0f}")
    if not payload.agents and payload.player is None:
        table.add_row("-", "-", "None", "-")
    return table


def _render_bubbles(payload: TickPayload) -> RenderableType:
    table = Table(title="Speech", show_header=True, header_style="bold")
    table.add_column("Speaker")
    table.add_column("Text")

    for bubble in payload.bubbles:
        table.add_row(bubble.agent_id, bubble.text)
    if not payload.bubbles:
        table.add_row("-", "None")
    return table


def _render_events(payload: TickPayload, *, max_events: int) -> RenderableType:
    table = Table(title="Recent Events", show_header=True, header_style="bold")
    table.add_column("Kind")
    table.add_column("Detail")

    events = payload.events or []
    for event in events[-max_events:]:
        table.add_row(event.kind, _format_payload(event.payload))
    if not events:
        table.add_row("-", "None")
    return table


def _format_payload(payload: dict) -> str:
    if not payload:
        return "-"
    return ", ".join(f"{key}={value}" for key, value in payload.items())
