"""Character-cell rendering of the office floor."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from officeville.sim.contracts import TickPayload
from officeville.sim.grid import GridModel

FLOOR = "."
WALL = "#"
LAPTOP = "="
NPC = "@"
PLAYER = "P"

FLOOR_STYLE = "grey50"
WALL_STYLE = "bright_magenta"
LAPTOP_STYLE = "bright_yellow"
PLAYER_STYLE = "bold bright_green"
TALKING_STYLE = "bold bright_white on blue"
STATE_STYLES = {
    "arriving": "cyan",
    "working": "bright_cyan",
    "leaving": "yellow",
}


@dataclass(frozen=True)
class Viewport:
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class MapScale:
    """How many grid cells one character covers."""

    cells_per_column: int = 2
    cells_per_row: int = 4


def map_size(grid: GridModel, scale: MapScale) -> tuple[int, int]:
    width = -(-grid.width // scale.cells_per_column)
    height = -(-grid.height // scale.cells_per_row)
    return width, height


def compute_viewport(
    map_width: int,
    map_height: int,
    view_width: int,
    view_height: int,
    *,
    center: tuple[int, int] | None = None,
) -> Viewport:
    view_width = max(1, min(map_width, view_width))
    view_height = max(1, min(map_height, view_height))
    if center is not None:
        origin_x = center[0] - view_width // 2
        origin_y = center[1] - view_height // 2
    else:
        origin_x, origin_y = 0, 0
    origin_x = _clamp(origin_x, 0, max(0, map_width - view_width))
    origin_y = _clamp(origin_y, 0, max(0, map_height - view_height))
    return Viewport(x=origin_x, y=origin_y, width=view_width, height=view_height)


def follow_viewport(
    grid: GridModel,
    payload: TickPayload | None,
    view_width: int,
    view_height: int,
    *,
    scale: MapScale | None = None,
) -> Viewport:
    """Viewport of the given size centred on the player when there is one."""
    scale = scale or MapScale()
    width, height = map_size(grid, scale)
    center = None
    if payload is not None and payload.player is not None:
        center = world_to_map(grid, scale, payload.player.x, payload.player.y)
    return compute_viewport(width, height, view_width, view_height, center=center)


def world_to_map(
    grid: GridModel, scale: MapScale, x: float, y: float
) -> tuple[int, int]:
    cell_x = int(x // grid.cell_size)
    cell_y = int(y // grid.cell_size)
    return cell_x // scale.cells_per_column, cell_y // scale.cells_per_row


def render_office_lines(
    grid: GridModel,
    payload: TickPayload | None,
    *,
    scale: MapScale | None = None,
    viewport: Viewport | None = None,
) -> list[Text]:
    """Draw blocked floor, laptops, NPCs and the player as styled text rows."""
    scale = scale or MapScale()
    width, height = map_size(grid, scale)
    chars = [[FLOOR] * width for _ in range(height)]
    styles = [[FLOOR_STYLE] * width for _ in range(height)]

    for cell_x, cell_y in grid.occupied_cells():
        x = cell_x // scale.cells_per_column
        y = cell_y // scale.cells_per_row
        chars[y][x] = WALL
        styles[y][x] = WALL_STYLE

    def place(world_x: float, world_y: float, char: str, style: str) -> None:
        x, y = world_to_map(grid, scale, world_x, world_y)
        if 0 <= y < height and 0 <= x < width:
            chars[y][x] = char
            styles[y][x] = style

    if payload is not None:
        for accessory in payload.accessories:
            place(accessory.x, accessory.y, LAPTOP, LAPTOP_STYLE)
        for agent in payload.agents:
            style = STATE_STYLES.get(agent.state, "white")
            if agent.agent_id == payload.interaction_agent_id:
                style = TALKING_STYLE
            place(agent.x, agent.y, NPC, style)
        if payload.player is not None:
            place(payload.player.x, payload.player.y, PLAYER, PLAYER_STYLE)

    viewport = viewport or Viewport(0, 0, width, height)
    lines: list[Text] = []
    for y in range(viewport.y, min(height, viewport.y + viewport.height)):
        line = Text()
        for x in range(viewport.x, min(width, viewport.x + viewport.width)):
            line.append(chars[y][x], style=styles[y][x])
        lines.append(line)
    return lines


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))
