"""Viewer constants shared by main.py and the tile renderer."""

WIDTH, HEIGHT = 1280, 720
FPS = 60
TILE = 16

# Colours
BG = (18, 20, 28)
WHITE = (240, 240, 240)
CYAN = (80, 220, 255)
YELLOW = (240, 220, 40)
RED = (230, 70, 70)
GREEN = (90, 220, 120)

# Camera panning speed in pixels per second
PAN_SPEED = 900

GENERATION_CONFIG = "config/generation.json"
LAYOUT_DIR = "layouts"
