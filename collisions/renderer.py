import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

import collisions as C

os.environ['PYGAME_HIDE_SUPPORT_PROMPT'] = '1'
import pygame

logger = logging.getLogger(__name__)


@dataclass
class AppearanceConfig:
    """Canvas settings. These affect pixels, never physics."""
    resolution: int = C.RESOLUTION
    bg_color: Tuple[int, int, int] = C.BG_COLOR
    pause_ms: int = C.PAUSE_MS
    show_window: bool = True
    frame_dir: Optional[str] = None
    caption: str = 'Collision System'


class Renderer:
    """Draws particle frames on a square pygame canvas.

    Implements the tick-time drawing protocol used by ``CollisionSystem``:
    ``clear``, ``draw_particle``, ``present`` and ``pause``.
    """

    def __init__(self, world_size: float = C.BOX_SIZE,
                 config: Optional[AppearanceConfig] = None):
        self.world_size = world_size
        self.config = config or AppearanceConfig()
        self.frames_presented = 0
        self.closed = False

        res = self.config.resolution
        if self.config.show_window:
            pygame.init()
            self.screen = pygame.display.set_mode((res, res))
            pygame.display.set_caption(self.config.caption)
            self.surface = self.screen
        else:
            self.screen = None
            self.surface = pygame.Surface((res, res))

        if self.config.frame_dir is not None:
            os.makedirs(self.config.frame_dir, exist_ok=True)

    def _world_to_pixel(self, wx: float, wy: float) -> Tuple[int, int]:
        res = self.config.resolution
        px = int(wx / self.world_size * res)
        py = int((1.0 - wy / self.world_size) * res)
        return px, py

    def _world_radius_to_pixel(self, r: float) -> int:
        return max(1, int(r / self.world_size * self.config.resolution))

    def clear(self):
        self.surface.fill(self.config.bg_color)

    def draw_particle(self, position: Tuple[float, float], radius: float,
                      color: Tuple[int, int, int]):
        px, py = self._world_to_pixel(*position)
        pygame.draw.circle(self.surface, color, (px, py), self._world_radius_to_pixel(radius))

    def present(self):
        if self.config.frame_dir is not None:
            path = os.path.join(self.config.frame_dir, f'frame_{self.frames_presented:05d}.png')
            pygame.image.save(self.surface, path)
        self.frames_presented += 1

        if self.screen is not None and not self.closed:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.close()
                    return
                if event.type == pygame.KEYDOWN and event.key == pygame.K_q:
                    self.close()
                    return
            pygame.display.flip()
            self.pause(self.config.pause_ms)

    def pause(self, ms: int):
        if ms > 0:
            pygame.time.wait(ms)

    def close(self):
        """Closes the window. Later frames are still drawn offscreen."""
        if self.screen is not None and not self.closed:
            logger.info("Display closed after %d frames", self.frames_presented)
            pygame.quit()
            self.surface = pygame.Surface((self.config.resolution, self.config.resolution))
        self.closed = True
