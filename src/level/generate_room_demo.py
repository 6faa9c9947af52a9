"""Print generated rooms as ASCII.

Usage: python -m src.level.generate_room_demo [seed]
"""

import logging
import sys

from src.level.generation_params import RoomGenerationParams, RoomType
from src.level.room_data import RoomData
from src.level.room_generator import generate_room
from src.level.spawn_extractor import SpawnType

SPAWN_SYMBOLS = {SpawnType.GROUND: "g", SpawnType.AIR: "a", SpawnType.BOSS: "B"}


def render_room(room: RoomData) -> str:
    """Room grid with E/X at the doors and spawn markers over the tiles."""
    overlay = {spawn.position: SPAWN_SYMBOLS[spawn.spawn_type] for spawn in room.spawns}
    overlay[room.entrance] = "E"
    overlay[room.exit] = "X"
    lines = ["-" * (room.width + 2)]
    for y in range(room.height):
        row = ["|"]
        for x in range(room.width):
            row.append(overlay.get((x, y), room.grid.get_tile(x, y).symbol))
        row.append("|")
        lines.append("".join(row))
    lines.append("-" * (room.width + 2))
    return "\n".join(lines)


def print_room(room: RoomData) -> None:
    print(room.summary())
    print(render_room(room))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    seed = sys.argv[1] if len(sys.argv) > 1 else "demo"

    print("--- Combat room ---")
    print_room(generate_room(RoomGenerationParams(), seed))

    print("\n--- Small entrance room ---")
    print_room(generate_room(RoomGenerationParams(room_type=RoomType.ENTRANCE, room_width=20,
                                                  room_height=15, max_enemies=0), seed))

    print("\n--- Tall room without double jump ---")
    print_room(generate_room(RoomGenerationParams(room_width=30, room_height=45, has_double_jump=False), seed))
