import math


def point_distance(x1, y1, x2, y2):
    """Euclidean distance between two points."""
    return math.hypot(x2 - x1, y2 - y1)


def sprite_height(sprite):
    """Height follows from width and the image's own aspect ratio."""
    return sprite.width * sprite.image.height / sprite.image.width


def sprite_center(sprite):
    return (sprite.x + sprite.width / 2, sprite.y + sprite_height(sprite) / 2)


def sprite_bounds(sprite, scale=1.0, offset=(0, 0)):
    """Integer (x, y, width, height) of a sprite as drawn on a surface."""
    x = round(sprite.x * scale + offset[0])
    y = round(sprite.y * scale + offset[1])
    width = round(sprite.width * scale)
    height = round(sprite_height(sprite) * scale)
    return x, y, width, height
