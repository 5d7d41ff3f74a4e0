"""Live Textual screen that steps the office and lets the player walk and talk."""

from __future__ import annotations

from rich.panel import Panel
from rich.console import Group
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.screen import Screen
from textual.widgets import Input, Static

from officeville.render.office_map import (
    MapScale,
    follow_viewport,
    map_size,
    render_office_lines,
)
from officeville.render.viewer import render_tick
from officeville.sim.contracts import TickPayload
from officeville.sim.office import Office

# Terminals only report key presses, so a press keeps walking for a few frames.
HELD_FRAMES = 3

DIRECTION_KEYS = {
    "up": (0, -1),
    "w": (0, -1),
    "down": (0, 1),
    "s": (0, 1),
    "left": (-1, 0),
    "a": (-1, 0),
    "right": (1, 0),
    "d": (1, 0),
}


class LiveOfficeScreen(Screen):
    CSS = """
    Screen {
        layout: vertical;
    }
    #main {
        layout: horizontal;
        height: 1fr;
    }
    #floor {
        width: 2fr;
    }
    #side {
        width: 1fr;
    }
    #chat {
        display: none;
    }
    #status-bar {
        height: 3;
    }
    """

    BINDINGS = [
        ("space", "toggle_pause", "Pause"),
        ("q", "quit", "Quit"),
        ("e", "interact", "Talk"),
        ("escape", "end_interaction", "Leave chat"),
    ]

    def __init__(self, office: Office, *, frame_ms: float = 100.0) -> None:
        super().__init__()
        self.office = office
        self.payload: TickPayload | None = None
        self._frame_ms = frame_ms
        self._paused = False
        self._direction = (0, 0)
        self._held = 0
        self._floor: Static | None = None
        self._side: Static | None = None
        self._chat: Input | None = None
        self._status_bar: Static | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="root"):
            with Horizontal(id="main"):
                yield Static(id="floor")
                yield Static(id="side")
            yield Input(placeholder="Say something...", id="chat")
            yield Static(id="status-bar")

    def on_mount(self) -> None:
        self._floor = self.query_one("#floor", Static)
        self._side = self.query_one("#side", Static)
        self._chat = self.query_one("#chat", Input)
        self._status_bar = self.query_one("#status-bar", Static)
        self.payload = self.office.snapshot(drain_events=False)
        self._refresh_ui()
        self.set_interval(self._frame_ms / 1000, self._step)

    def on_key(self, event: Key) -> None:
        if self.office.paused:
            return
        direction = DIRECTION_KEYS.get(event.key)
        if direction is None:
            return
        self._direction = direction
        self._held = HELD_FRAMES
        event.stop()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        session = self.office.interaction
        if session is not None:
            session.say(event.value)
        event.input.value = ""
        self.payload = self.office.snapshot(drain_events=False)
        self._refresh_ui()

    def action_toggle_pause(self) -> None:
        self._paused = not self._paused
        self._refresh_ui()

    def action_quit(self) -> None:
        self.app.exit()

    def action_interact(self) -> None:
        if self.office.begin_interaction() is not None and self._chat:
            self._chat.styles.display = "block"
            self._chat.focus()
        self.payload = self.office.snapshot(drain_events=False)
        self._refresh_ui()

    def action_end_interaction(self) -> None:
        self.office.end_interaction()
        if self._chat:
            self._chat.value = ""
            self._chat.styles.display = "none"
        self.payload = self.office.snapshot(drain_events=False)
        self._refresh_ui()

    def _step(self) -> None:
        if self._paused:
            return
        direction = self._direction if self._held > 0 else (0, 0)
        self._held = max(0, self._held - 1)
        self.payload = self.office.update(self._frame_ms, player_input=direction)
        if self.office.interaction is None and self._chat and self._chat.display:
            self._chat.value = ""
            self._chat.styles.display = "none"
        self._refresh_ui()

    def _refresh_ui(self) -> None:
        payload = self.payload
        if self._floor:
            lines = self._floor_lines(payload)
            self._floor.update(Panel(Group(*lines), title="Floor", padding=(0, 0)))
        if self._side:
            if payload is None:
                self._side.update(Panel(Text("Waiting for data."), title="Office"))
            else:
                self._side.update(render_tick(payload))
        if self._status_bar:
            self._status_bar.update(Panel(Text(self._status_text()), padding=(0, 1)))

    def _floor_lines(self, payload: TickPayload | None) -> list[Text]:
        """Map rows for the floor panel, scrolled to keep the player in view."""
        grid = self.office.grid
        scale = MapScale()
        width, height = map_size(grid, scale)
        if self._floor is not None:
            # panel border takes one cell on each side
            width = self._floor.size.width - 2
            height = self._floor.size.height - 2
        viewport = follow_viewport(grid, payload, width, height, scale=scale)
        return render_office_lines(grid, payload, scale=scale, viewport=viewport)

    def _status_text(self) -> str:
        if self.office.paused:
            return "Chatting: enter=send | esc=leave"
        label = "paused" if self._paused else "live"
        return (
            "Controls: arrows/wasd=walk | e=talk | space=pause | q=quit"
            + " | status="
            + label
        )
