from config import WIDTH, HEIGHT


class Camera:
    """Free-panning viewer camera with stepped zoom."""

    def __init__(self):
        self.x = 0.0
        self.y = 0.0
        # Available zoom levels
        self.zoom_levels = [0.5, 1.0, 2.0]
        self.current_zoom_index = 1
        self.zoom = self.zoom_levels[self.current_zoom_index]

    def pan(self, dx: float, dy: float):
        self.x += dx / self.zoom
        self.y += dy / self.zoom

    def center_on(self, world_x: float, world_y: float):
        self.x = world_x - WIDTH / (2 * self.zoom)
        self.y = world_y - HEIGHT / (2 * self.zoom)

    @property
    def offset(self):
        return (self.x, self.y)

    def toggle_zoom(self):
        """Cycle through available zoom levels, keeping the view centre fixed."""
        cx = self.x + WIDTH / (2 * self.zoom)
        cy = self.y + HEIGHT / (2 * self.zoom)
        self.current_zoom_index = (self.current_zoom_index + 1) % len(self.zoom_levels)
        self.zoom = self.zoom_levels[self.current_zoom_index]
        self.center_on(cx, cy)
        return self.zoom

    def get_zoom_label(self):
        """Get human-readable label for current zoom level."""
        return f"{self.zoom}x"
