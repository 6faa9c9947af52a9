import logging
import os
import sys

import pygame

from config import WIDTH, HEIGHT, FPS, BG, WHITE, CYAN, YELLOW, TILE, PAN_SPEED, GENERATION_CONFIG, LAYOUT_DIR
from src.level.config_loader import load_level_params, load_room_params
from src.level.level_generator import LevelGenerator
from src.level.room_generator import generate_room
from src.systems.camera import Camera
from src.tiles.tile_renderer import TileRenderer

logger = logging.getLogger(__name__)

_fonts = {}


def get_font(size, bold=False):
    key = (size, bold)
    if key not in _fonts:
        _fonts[key] = pygame.font.SysFont("consolas", size, bold=bold)
    return _fonts[key]


def draw_text(surface, text, pos, color=WHITE, size=16, bold=False):
    surface.blit(get_font(size, bold).render(text, True, color), pos)


class Viewer:
    """Interactive viewer for generated rooms and levels.

    R regenerates, S saves the level layout, Tab switches between a single
    room and the full level, Z cycles zoom, arrows pan, ESC quits.
    """

    def __init__(self):
        pygame.init()
        self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
        pygame.display.set_caption("Room Forge")
        self.clock = pygame.time.Clock()
        self.camera = Camera()
        self.renderer = TileRenderer(TILE)

        self.room_params = load_room_params(GENERATION_CONFIG)
        self.level_params = load_level_params(GENERATION_CONFIG)
        self.level_generator = LevelGenerator(self.level_params)

        self.show_level = True
        self.show_spawns = True
        self.room = None
        self.level = None
        self.status = ""
        self.regenerate()

    def regenerate(self):
        if self.show_level:
            self.renderer.invalidate()
            self.level = self.level_generator.generate()
            bounds = self.level.total_bounds
            self.camera.center_on((bounds.x + bounds.width / 2) * TILE, (bounds.y + bounds.height / 2) * TILE)
            self.status = f"Level {self.level.level_seed}: {self.level.room_count} rooms"
        else:
            self.room = generate_room(self.room_params)
            self.camera.center_on(self.room.width * TILE / 2, self.room.height * TILE / 2)
            self.status = self.room.summary()

    def save_layout(self):
        if self.level is None:
            self.status = "Nothing to save"
            return
        path = os.path.join(LAYOUT_DIR, f"level_{self.level.level_seed}.json")
        self.level_generator.save_layout(self.level, path)
        self.status = f"Saved {path}"

    def toggle_mode(self):
        self.show_level = not self.show_level
        self.regenerate()

    def handle_key(self, key):
        if key == pygame.K_ESCAPE:
            pygame.quit(); sys.exit()
        elif key == pygame.K_r:
            self.regenerate()
        elif key == pygame.K_s:
            self.save_layout()
        elif key == pygame.K_TAB:
            self.toggle_mode()
        elif key == pygame.K_z:
            self.camera.toggle_zoom()
        elif key == pygame.K_p:
            self.show_spawns = not self.show_spawns

    def update(self, dt):
        keys = pygame.key.get_pressed()
        dx = (keys[pygame.K_RIGHT] - keys[pygame.K_LEFT]) * PAN_SPEED * dt
        dy = (keys[pygame.K_DOWN] - keys[pygame.K_UP]) * PAN_SPEED * dt
        if dx or dy:
            self.camera.pan(dx, dy)

    def draw(self):
        self.screen.fill(BG)
        offset, zoom = self.camera.offset, self.camera.zoom
        if self.show_level and self.level is not None:
            self.renderer.render_level(self.screen, self.level, offset, zoom)
            if self.show_spawns:
                self.renderer.render_level_spawns(self.screen, self.level, offset, zoom)
        elif self.room is not None:
            self.renderer.render_grid(self.screen, self.room.grid, (0, 0), offset, zoom)
            if self.show_spawns:
                self.renderer.render_spawns(self.screen, self.room.spawns, (0, 0), offset, zoom)

        mode = "Level" if self.show_level else "Room"
        draw_text(self.screen, f"{mode} | zoom {self.camera.get_zoom_label()}", (12, 8), CYAN, size=18, bold=True)
        draw_text(self.screen, self.status, (12, 32), WHITE, size=14)
        draw_text(self.screen, "R regenerate | S save layout | Tab room/level | Z zoom | P spawns | Arrows pan | Esc quit",
                  (12, HEIGHT - 24), YELLOW, size=14)

    def run(self):
        while True:
            dt = self.clock.tick(FPS) / 1000.0
            for ev in pygame.event.get():
                if ev.type == pygame.QUIT:
                    pygame.quit(); sys.exit()
                elif ev.type == pygame.KEYDOWN:
                    self.handle_key(ev.key)
            self.update(dt)
            self.draw()
            pygame.display.flip()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    Viewer().run()
