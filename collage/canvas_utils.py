import re
from dataclasses import dataclass
from typing import Optional, Tuple

NON_NEGATIVE_INTEGER_PATTERN = re.compile(r"^\d+$")
NON_NEGATIVE_REAL_PATTERN = re.compile(r"^\d+(?:\.\d+)?$")
BACKGROUND_COLOR_PATTERN = re.compile(r"^(?:transparent|\s*|#?[a-f\d]{6})$")
OPAQUE_COLOR_PATTERN = re.compile(r"^#?[a-f\d]{6}$")


def is_non_negative_integer_string(value: str) -> bool:
    return bool(NON_NEGATIVE_INTEGER_PATTERN.match(value))


def is_non_negative_real_string(value: str) -> bool:
    return bool(NON_NEGATIVE_REAL_PATTERN.match(value))


def is_background_color_valid(value: str) -> bool:
    """Accepts "transparent", blank, or a six digit hex color with optional '#'."""
    return bool(BACKGROUND_COLOR_PATTERN.match(value.lower()))


def is_background_color_opaque(value: str) -> bool:
    return bool(OPAQUE_COLOR_PATTERN.match(value.lower()))


def parse_canvas_dimension(value: str) -> int:
    return int(value) if is_non_negative_integer_string(value) else 0


def parse_canvas_scale(value: str) -> float:
    return float(value) if is_non_negative_real_string(value) else 1.0


def parse_background_color(value: str) -> Optional[Tuple[int, int, int]]:
    """RGB tuple for an opaque hex color, None for a transparent background."""
    if not is_background_color_opaque(value):
        return None
    hex_digits = value.lstrip('#')
    return tuple(int(hex_digits[i:i + 2], 16) for i in (0, 2, 4))


@dataclass
class CanvasSettings:
    """Raw text of the canvas inputs; invalid text falls back to safe values."""
    width_input: str = "1170"
    height_input: str = "2532"
    scale_input: str = "0.5"
    background_color_input: str = "transparent"

    @property
    def size(self) -> Tuple[int, int]:
        return parse_canvas_dimension(self.width_input), parse_canvas_dimension(self.height_input)

    @property
    def scale(self) -> float:
        return parse_canvas_scale(self.scale_input)

    @property
    def background(self) -> Optional[Tuple[int, int, int]]:
        return parse_background_color(self.background_color_input)
