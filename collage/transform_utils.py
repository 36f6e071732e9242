from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from collage.actions import Action, Scale, Translate
from collage.geometry_utils import point_distance, sprite_center


class TransformationKind(Enum):
    TRANSLATE = "Translate"
    SCALE = "Scale"


@dataclass(frozen=True)
class PendingTransformation:
    """An in-progress drag. Lives outside the action log until the gesture ends."""
    kind: TransformationKind
    sprite_id: int
    pointer_start_x: float
    pointer_start_y: float
    pointer_current_x: float
    pointer_current_y: float

    @classmethod
    def start(cls, kind, sprite_id, pointer_x, pointer_y):
        return cls(kind, sprite_id, pointer_x, pointer_y, pointer_x, pointer_y)

    @property
    def is_at_rest(self) -> bool:
        return (self.pointer_current_x == self.pointer_start_x
                and self.pointer_current_y == self.pointer_start_y)


def update_pointer(pending: PendingTransformation, pointer_x, pointer_y) -> PendingTransformation:
    return replace(pending, pointer_current_x=pointer_x, pointer_current_y=pointer_y)


def translated_position(pending: PendingTransformation, sprite):
    return (
        sprite.x + (pending.pointer_current_x - pending.pointer_start_x),
        sprite.y + (pending.pointer_current_y - pending.pointer_start_y),
    )


def scaled_width(pending: PendingTransformation, sprite):
    """Uniform scale about the sprite's center, driven by pointer distance to it."""
    # Drag coordinates do not reliably reproduce a ratio of exactly 1
    if pending.is_at_rest:
        return sprite.width

    center_x, center_y = sprite_center(sprite)
    start_distance = point_distance(pending.pointer_start_x, pending.pointer_start_y, center_x, center_y)
    if start_distance == 0:
        return sprite.width

    current_distance = point_distance(pending.pointer_current_x, pending.pointer_current_y, center_x, center_y)
    return sprite.width * current_distance / start_distance


def finalize_transformation(pending: PendingTransformation, sprites) -> Optional[Action]:
    """Turn a gesture into the absolute action it amounts to for ``sprites``."""
    sprite = next((s for s in sprites if s.id == pending.sprite_id), None)
    if sprite is None:
        return None

    if pending.kind is TransformationKind.TRANSLATE:
        new_x, new_y = translated_position(pending, sprite)
        return Translate(sprite.id, new_x, new_y)
    if pending.kind is TransformationKind.SCALE:
        return Scale(sprite.id, scaled_width(pending, sprite))
    raise TypeError(f"Unknown transformation kind: {pending.kind!r}")
