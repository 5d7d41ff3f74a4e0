import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from officeville.sim.contracts import ObstacleKind, WorldPoint
from officeville.sim.grid import GridModel
from officeville.sim.world_loader import (
    OfficePaths,
    build_demo_office,
    load_office_config,
)


def _write(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_load_scene_file_with_nested_objects(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "scene.json",
        {
            "world_width": 640,
            "world_height": 480,
            "objects": {
                "desks": [
                    {
                        "id": "d1",
                        "x": 200,
                        "y": 200,
                        "passableHeight": 12,
                        "rotation": 90,
                    }
                ],
                "boxes": [{"id": "b1", "x": 500, "y": 100}],
            },
            "teams": [
                {
                    "team_id": "ops",
                    "members": [{"id": "a"}, {"id": "b"}],
                    "conversation": [{"speakerId": "a", "line": "hi"}],
                }
            ],
        },
    )

    config = load_office_config(path)

    desk = config.desks[0]
    assert desk.width == 64 and desk.height == 48
    assert desk.scale_x == desk.scale_y == 1.5
    assert desk.passable_height == 12
    assert desk.kind is ObstacleKind.DESK
    assert config.boxes[0].kind is ObstacleKind.BOX
    assert config.boxes[0].width == 32
    assert [member.id for member in config.teams[0].members] == ["a", "b"]


def test_load_from_directory_with_teams_file(tmp_path: Path) -> None:
    _write(
        tmp_path / "office.json",
        {
            "world_width": 320,
            "world_height": 240,
            "desks": [{"id": "d", "x": 80, "y": 80}],
        },
    )
    _write(tmp_path / "teams.json", [{"team_id": "solo", "members": [{"id": "x"}]}])

    config = load_office_config(paths=OfficePaths(base_dir=tmp_path))

    assert [team.team_id for team in config.teams] == ["solo"]
    assert config.obstacles == config.desks


def test_missing_file_reports_path(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Missing office data file"):
        load_office_config(tmp_path / "nope.json")


def test_duplicate_obstacle_ids_are_rejected(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "office.json",
        {
            "world_width": 320,
            "world_height": 240,
            "desks": [{"id": "d", "x": 80, "y": 80}],
            "boxes": [{"id": "d", "x": 200, "y": 80}],
        },
    )
    with pytest.raises(ValidationError):
        load_office_config(path)


def test_demo_office_is_walkable_at_the_door() -> None:
    config = build_demo_office()
    grid = GridModel(config.world_width, config.world_height, 8)
    grid.mark_obstacles(config.obstacles)

    assert len(config.desks) == 5
    assert [team.team_id for team in config.teams] == ["product", "platform", "sales"]
    assert sum(len(team.members) for team in config.teams) == 9
    assert not grid.is_world_point_blocked(WorldPoint(512, 194))
