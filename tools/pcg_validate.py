#!/usr/bin/env python3
"""Validate a saved level layout by replaying its generation.

Checks:
- every room regenerates with the stored size and door positions
- entrance reaches exit inside every room
- spawn spacing and door safe zones hold
- rooms do not overlap and corridors stay clear of unrelated rooms

Usage: python tools/pcg_validate.py layouts/level_x.json
"""
from pathlib import Path
import logging
import sys

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.level.errors import ConfigError  # noqa: E402
from src.level.geometry import euclidean, manhattan  # noqa: E402
from src.level.level_data import LevelLayout  # noqa: E402
from src.level.level_generator import LevelGenerator  # noqa: E402
from src.level.spawn_extractor import SAFE_ZONE_MARGIN, SpawnType  # noqa: E402

logger = logging.getLogger("pcg_validate")


def validate_layout(layout: LevelLayout) -> list:
    """Return a list of human-readable problems; empty when the layout is sound."""
    errors = []
    generator = LevelGenerator()
    level = generator.load_layout(layout)
    records = {r.id: r for r in layout.rooms}

    for room in level.rooms:
        data = room.room_data
        record = records[room.id]
        if (data.width, data.height) != (record.width, record.height):
            errors.append(f"Room {room.id}: size {data.width}x{data.height} != stored {record.width}x{record.height}")
        if list(data.entrance) != record.entrance_local or list(data.exit) != record.exit_local:
            errors.append(f"Room {room.id}: doors moved on replay")
        if not data.connected:
            errors.append(f"Room {room.id}: entrance cannot reach exit")

        params = generator.params.params_for(room.room_type)
        safe = params.entrance_clear_depth + SAFE_ZONE_MARGIN
        regular = [s for s in data.spawns if s.spawn_type != SpawnType.BOSS]
        for i, a in enumerate(regular):
            if manhattan(a.position, data.entrance) <= safe or manhattan(a.position, data.exit) <= safe:
                errors.append(f"Room {room.id}: spawn {a.position} inside a door safe zone")
            for b in regular[i + 1:]:
                if euclidean(a.position, b.position) < params.min_spawn_distance:
                    errors.append(f"Room {room.id}: spawns {a.position} and {b.position} too close")

    for a, b in level.get_overlapping_rooms():
        errors.append(f"Rooms {a} and {b} overlap")
    for corridor_id, room_id in level.conflicts:
        errors.append(f"Corridor {corridor_id} crosses room {room_id}")
    return errors


def main(argv) -> int:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    if len(argv) < 2:
        logger.error("Usage: pcg_validate.py <layout.json>")
        return 1
    path = Path(argv[1])
    if not path.exists():
        logger.error("Layout file not found: %s", path)
        return 1
    try:
        layout = LevelLayout.load_from_json(str(path))
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1

    errors = validate_layout(layout)
    if errors:
        logger.error('Validation FAILED:')
        for e in errors:
            logger.error(' - %s', e)
        return 2

    print(f'Validation OK: {len(layout.rooms)} rooms replayed cleanly')
    return 0


def cli() -> int:
    return main(sys.argv)


if __name__ == "__main__":
    sys.exit(cli())
