"""Textual app hosting a live office."""

from __future__ import annotations

from textual.app import App

from officeville.render.live_view import LiveOfficeScreen
from officeville.sim.office import Office
from officeville.sim.tick_loop import FRAME_MS


class OfficevilleApp(App):
    """Run the office on the UI timer and tear it down when the app closes."""

    def __init__(
        self,
        office: Office,
        *,
        frame_ms: float = FRAME_MS,
        title: str = "Officeville",
    ) -> None:
        super().__init__()
        self.office = office
        self._frame_ms = frame_ms
        self.title = title

    def on_mount(self) -> None:
        self.push_screen(LiveOfficeScreen(self.office, frame_ms=self._frame_ms))

    def on_unmount(self) -> None:
        self.office.shutdown()
