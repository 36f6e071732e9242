"""
Shared fixtures for the collage tests.

Images are generated with Pillow and run through the real decoder, so every
ImageFile in the tests carries a genuine content hash and pygame surface.
"""
import io
import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame
import pytest
from PIL import Image

from collage.image_utils import ImageLibrary, decode_image
from collage.log_utils import AppLogger
from collage.config_manager import LoggingConfig


pygame.init()


def encode_png(pil_image):
    buffer = io.BytesIO()
    pil_image.save(buffer, format="PNG")
    return buffer.getvalue()


def png_bytes(width, height, color=(255, 0, 0, 255)):
    return encode_png(Image.new("RGBA", (width, height), color))


@pytest.fixture
def make_image():
    """Factory: make_image(width, height, name=..., color=...) -> ImageFile."""
    def _make(width, height, name="image.png", color=(255, 0, 0, 255)):
        return decode_image(png_bytes(width, height, color), name)
    return _make


@pytest.fixture
def half_transparent_image():
    """20x10 image whose left half is opaque and right half fully transparent."""
    pil_image = Image.new("RGBA", (20, 10), (0, 0, 0, 0))
    pil_image.paste((0, 0, 255, 255), (0, 0, 10, 10))
    return decode_image(encode_png(pil_image), "half.png")


@pytest.fixture
def image_a(make_image):
    return make_image(100, 50, name="a.png")


@pytest.fixture
def image_b(make_image):
    return make_image(40, 80, name="b.png", color=(0, 255, 0, 255))


@pytest.fixture
def library(image_a, image_b):
    return ImageLibrary([image_a, image_b])


class _Settings:
    def __init__(self, level):
        self.logging = LoggingConfig(level=level)


@pytest.fixture
def quiet_logger():
    return AppLogger(_Settings("ERROR"))
