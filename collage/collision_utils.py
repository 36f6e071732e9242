import math

import pygame

from collage.drawing_utils import draw_sprite
from collage.geometry_utils import sprite_bounds


def is_within_canvas(x, y, canvas_width, canvas_height):
    return 0 <= x < canvas_width and 0 <= y < canvas_height


def pick_sprite(pointer_x, pointer_y, sprites, canvas_size):
    """Topmost sprite with an opaque pixel under the pointer, or None.

    1. Quick reject with the sprite's drawn rect.
    2. Only then render the sprite alone onto a scratch canvas and read the
       alpha under the pointer, so transparent areas let clicks fall through.
    """
    canvas_width, canvas_height = canvas_size
    if not canvas_width or not canvas_height:
        return None

    px, py = math.floor(pointer_x), math.floor(pointer_y)
    if not is_within_canvas(px, py, canvas_width, canvas_height):
        return None

    scratch = pygame.Surface((canvas_width, canvas_height), pygame.SRCALPHA)
    for sprite in reversed(sprites):
        # 1) Broad-phase
        if not pygame.Rect(sprite_bounds(sprite)).collidepoint(px, py):
            continue

        # 2) Narrow-phase
        scratch.fill((0, 0, 0, 0))
        draw_sprite(scratch, sprite)
        if scratch.get_at((px, py)).a != 0:
            return sprite

    return None
