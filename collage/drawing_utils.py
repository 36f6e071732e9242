import threading

import pygame

from collage.geometry_utils import sprite_bounds

MAX_CACHED_SURFACES = 256

scaled_surface_cache = {}  # (sha256, width, height) -> scaled surface
scaled_surface_cache_lock = threading.Lock()


def get_scaled_surface(image, width, height):
    """Get the image's surface resized to (width, height), cached per image content."""
    if (width, height) == (image.width, image.height):
        return image.surface

    cache_key = (image.sha256, width, height)
    with scaled_surface_cache_lock:
        if cache_key in scaled_surface_cache:
            return scaled_surface_cache[cache_key]

        scaled = pygame.transform.smoothscale(image.surface, (width, height))
        if len(scaled_surface_cache) >= MAX_CACHED_SURFACES:
            scaled_surface_cache.clear()
        scaled_surface_cache[cache_key] = scaled
        return scaled


def clear_scaled_surface_cache():
    with scaled_surface_cache_lock:
        scaled_surface_cache.clear()


def draw_sprite(surface, sprite, scale=1.0, offset=(0, 0)):
    """Blit one sprite at its position and size. Sprites smaller than a pixel are skipped."""
    x, y, width, height = sprite_bounds(sprite, scale, offset)
    if width < 1 or height < 1:
        return
    surface.blit(get_scaled_surface(sprite.image, width, height), (x, y))


def render_sprites(surface, sprites, scale=1.0, offset=(0, 0)):
    """Draw sprites in sequence order, so later sprites end up on top."""
    for sprite in sprites:
        draw_sprite(surface, sprite, scale, offset)


def render_canvas(canvas_size, sprites, background=None):
    """Render a full canvas. ``background`` is an RGB tuple, or None for transparent."""
    canvas = pygame.Surface(canvas_size, pygame.SRCALPHA)
    canvas.fill((*background, 255) if background else (0, 0, 0, 0))
    render_sprites(canvas, sprites)
    return canvas


def draw_checkerboard(surface, rect, tile_size=16, colors=((200, 200, 200), (240, 240, 240))):
    """Checkerboard behind a transparent canvas."""
    for row, tile_y in enumerate(range(rect.top, rect.bottom, tile_size)):
        for col, tile_x in enumerate(range(rect.left, rect.right, tile_size)):
            tile = pygame.Rect(tile_x, tile_y, tile_size, tile_size).clip(rect)
            pygame.draw.rect(surface, colors[(row + col) % 2], tile)


def draw_selection_outline(surface, sprite, scale=1.0, offset=(0, 0), color=(255, 200, 0)):
    x, y, width, height = sprite_bounds(sprite, scale, offset)
    pygame.draw.rect(surface, color, pygame.Rect(x, y, max(width, 1), max(height, 1)), 2)
