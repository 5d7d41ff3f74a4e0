"""Load office layouts and team scripts from JSON."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from officeville.sim.contracts import OfficeConfig

logger = logging.getLogger("officeville.sim.world_loader")

DESK_SIZE = (64.0, 48.0)
BOX_SIZE = (32.0, 32.0)
OBJECT_SCALE = 1.5


@dataclass(frozen=True)
class OfficePaths:
    base_dir: Path = Path("office")

    @property
    def office_json(self) -> Path:
        return self.base_dir / "office.json"

    @property
    def teams_json(self) -> Path:
        return self.base_dir / "teams.json"


def load_office_config(
    path: Path | None = None, *, paths: OfficePaths | None = None
) -> OfficeConfig:
    """Read an office description.

    ``path`` points at a single file holding the layout and the teams. Without
    it, ``paths`` names a directory with ``office.json`` and an optional
    ``teams.json``. Scene files that nest furniture under ``objects`` are
    accepted as well.
    """
    if path is not None:
        data = _load_json(path)
    else:
        paths = paths or OfficePaths()
        data = _load_json(paths.office_json)
        if paths.teams_json.exists():
            teams = _load_json(paths.teams_json)
            data["teams"] = teams["teams"] if isinstance(teams, dict) else teams
    config = OfficeConfig.model_validate(_normalize(data))
    logger.info(
        "[OFFICE] Loaded %d desks, %d boxes and %d teams",
        len(config.desks),
        len(config.boxes),
        len(config.teams),
    )
    return config


def build_demo_office() -> OfficeConfig:
    """A small office with five desks and three teams."""
    desk_spots = [(250, 400), (512, 400), (774, 400), (380, 600), (644, 600)]
    box_spots = [(96, 690), (940, 260), (930, 690)]
    data: dict[str, Any] = {
        "world_width": 1024,
        "world_height": 768,
        "player_start": (512, 280),
        "desks": [
            {"id": f"desk_{index}", "x": x, "y": y, "passable_height": 20}
            for index, (x, y) in enumerate(desk_spots)
        ],
        "boxes": [
            {"id": f"box_{index}", "x": x, "y": y}
            for index, (x, y) in enumerate(box_spots)
        ],
        "teams": [
            {
                "team_id": "product",
                "members": [
                    {"id": "pm", "role": "Product Manager"},
                    {"id": "designer", "role": "Designer"},
                    {"id": "dev", "role": "Engineer"},
                    {"id": "qa", "role": "QA Engineer"},
                ],
                "conversation": [
                    {"speaker_id": "pm", "text": "Morning all. Are we still on track?"},
                    {
                        "speaker_id": "dev",
                        "text": "Mostly. The export job is slower than I'd like.",
                    },
                    {"speaker_id": "designer", "text": "I can trim the preview step."},
                    {"speaker_id": "qa", "text": "I'll rerun the suite after lunch."},
                ],
            },
            {
                "team_id": "platform",
                "members": [
                    {"id": "lead", "role": "Tech Lead"},
                    {"id": "sre", "role": "Site Reliability Engineer"},
                    {"id": "backend", "role": "Backend Engineer"},
                ],
                "conversation": [
                    {"speaker_id": "sre", "text": "The night deploy went out clean."},
                    {
                        "speaker_id": "lead",
                        "text": "Nice. Let's leave the cache settings alone this week.",
                    },
                    {"speaker_id": "backend", "text": "Fine by me."},
                ],
            },
            {
                "team_id": "sales",
                "members": [
                    {"id": "ae", "role": "Account Executive"},
                    {"id": "sdr", "role": "Sales Development Rep"},
                ],
                "conversation": [
                    {"speaker_id": "ae", "text": "The renewal call is at three."},
                    {"speaker_id": "sdr", "text": "I'll have the usage numbers ready."},
                ],
            },
        ],
    }
    return OfficeConfig.model_validate(_normalize(data))


def _normalize(data: dict[str, Any]) -> dict[str, Any]:
    data = dict(data)
    objects = data.pop("objects", None) or {}
    data.setdefault("desks", objects.get("desks", []))
    data.setdefault("boxes", objects.get("boxes", []))
    data["desks"] = [_obstacle(raw, DESK_SIZE, "desk") for raw in data["desks"]]
    data["boxes"] = [_obstacle(raw, BOX_SIZE, "box") for raw in data["boxes"]]
    return data


def _obstacle(
    raw: dict[str, Any], size: tuple[float, float], kind: str
) -> dict[str, Any]:
    obstacle = dict(raw)
    # rotation only affects how furniture is drawn
    obstacle.pop("rotation", None)
    if "passableHeight" in obstacle:
        obstacle["passable_height"] = obstacle.pop("passableHeight")
    obstacle.setdefault("width", size[0])
    obstacle.setdefault("height", size[1])
    obstacle.setdefault("scale_x", OBJECT_SCALE)
    obstacle.setdefault("scale_y", OBJECT_SCALE)
    obstacle.setdefault("kind", kind)
    return obstacle


def _load_json(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"Missing office data file: {path}") from exc
    return json.loads(text)
