from dataclasses import dataclass
from typing import Optional

from collage.actions import Scale


@dataclass(frozen=True)
class PasteBuffer:
    """Single slot holding a copied width or height (or nothing)."""
    width: Optional[float] = None
    height: Optional[float] = None

    @classmethod
    def empty(cls):
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.width is None and self.height is None


def copy_width(sprite) -> PasteBuffer:
    return PasteBuffer(width=sprite.width)


def copy_height(sprite) -> PasteBuffer:
    return PasteBuffer(height=sprite.height)


def paste_action(buffer: PasteBuffer, target) -> Optional[Scale]:
    """Scale action that gives ``target`` the copied dimension, or None if the buffer is empty."""
    if buffer.width is not None:
        return Scale(target.id, buffer.width)
    if buffer.height is not None:
        # Convert through the target's own aspect ratio
        return Scale(target.id, buffer.height * target.image.width / target.image.height)
    return None
