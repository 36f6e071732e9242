from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from collage.actions import (
    Action, ActionKind, BulkImport, Create, Delete, Duplicate, LayerDirection,
    Rename, ReorderLayers, Scale, Translate,
)
from collage.geometry_utils import sprite_height
from collage.image_utils import ImageFile
from collage.naming_utils import deduplicate_name, next_sprite_id, strip_image_extension
from collage.transform_utils import PendingTransformation, finalize_transformation


@dataclass(frozen=True)
class Sprite:
    """A positioned, scaled image on the canvas. Derived from the action log, never stored."""
    name: str
    id: int
    image: ImageFile
    x: float
    y: float
    width: float

    @property
    def height(self) -> float:
        return sprite_height(self)


def derive_sprites(actions: Sequence[Action], pending: Optional[PendingTransformation] = None) -> List[Sprite]:
    """Fold the action log into the current sprite arrangement (bottom to top).

    A pending gesture is finalized against the folded state and applied on
    top without touching the log.
    """
    sprites: List[Sprite] = []
    for action in actions:
        sprites = apply_action(action, sprites)

    if pending is not None:
        preview = finalize_transformation(pending, sprites)
        if preview is not None:
            sprites = apply_action(preview, sprites)

    return sprites


def find_sprite(sprites: Sequence[Sprite], sprite_id: int) -> Optional[Sprite]:
    for sprite in sprites:
        if sprite.id == sprite_id:
            return sprite
    return None


def apply_action(action: Action, sprites: List[Sprite]) -> List[Sprite]:
    kind = action.kind
    if kind is ActionKind.CREATE:
        return _apply_create(action, sprites)
    if kind is ActionKind.DELETE:
        return _apply_delete(action, sprites)
    if kind is ActionKind.DUPLICATE:
        return _apply_duplicate(action, sprites)
    if kind is ActionKind.TRANSLATE:
        return _apply_translate(action, sprites)
    if kind is ActionKind.SCALE:
        return _apply_scale(action, sprites)
    if kind is ActionKind.REORDER_LAYERS:
        return _apply_reorder(action, sprites)
    if kind is ActionKind.RENAME:
        return _apply_rename(action, sprites)
    if kind is ActionKind.BULK_IMPORT:
        return _apply_bulk_import(action, sprites)
    raise TypeError(f"Unknown action kind: {kind!r}")


def _names(sprites):
    return {sprite.name for sprite in sprites}


def _apply_create(action: Create, sprites):
    image = action.image
    return sprites + [Sprite(
        name=deduplicate_name(strip_image_extension(image.name), _names(sprites)),
        id=next_sprite_id(sprites),
        image=image,
        x=0,
        y=0,
        width=image.width,
    )]


def _apply_delete(action: Delete, sprites):
    return [sprite for sprite in sprites if sprite.id != action.sprite_id]


def _apply_duplicate(action: Duplicate, sprites):
    original = find_sprite(sprites, action.sprite_id)
    if original is None:
        return sprites

    return sprites + [replace(
        original,
        id=next_sprite_id(sprites),
        name=deduplicate_name(original.name, _names(sprites)),
    )]


def _apply_translate(action: Translate, sprites):
    if find_sprite(sprites, action.sprite_id) is None:
        return sprites

    return [
        replace(sprite, x=action.new_x, y=action.new_y) if sprite.id == action.sprite_id else sprite
        for sprite in sprites
    ]


def _apply_scale(action: Scale, sprites):
    if find_sprite(sprites, action.sprite_id) is None:
        return sprites

    # Width never goes below zero
    new_width = max(action.new_width, 0)

    def rescale(sprite):
        old_height = sprite.height
        new_height = new_width * sprite.image.height / sprite.image.width
        # Keep the visual center in place
        return replace(
            sprite,
            x=sprite.x - (new_width - sprite.width) / 2,
            y=sprite.y - (new_height - old_height) / 2,
            width=new_width,
        )

    return [rescale(sprite) if sprite.id == action.sprite_id else sprite for sprite in sprites]


def _apply_reorder(action: ReorderLayers, sprites):
    index = next((i for i, sprite in enumerate(sprites) if sprite.id == action.sprite_id), None)
    if index is None:
        return sprites

    last_index = len(sprites) - 1
    direction = action.direction
    if direction is LayerDirection.MOVE_UP:
        new_index = min(index + 1, last_index)
    elif direction is LayerDirection.MOVE_DOWN:
        new_index = max(index - 1, 0)
    elif direction is LayerDirection.MOVE_TO_TOP:
        new_index = last_index
    elif direction is LayerDirection.MOVE_TO_BOTTOM:
        new_index = 0
    else:
        raise TypeError(f"Unknown layer direction: {direction!r}")

    if new_index == index:
        return sprites

    reordered = sprites[:index] + sprites[index + 1:]
    reordered.insert(new_index, sprites[index])
    return reordered


def _apply_rename(action: Rename, sprites):
    target = find_sprite(sprites, action.sprite_id)
    if target is None:
        return sprites

    other_names = {sprite.name for sprite in sprites if sprite.id != target.id}
    new_name = deduplicate_name(action.ideal_new_name, other_names)
    return [replace(sprite, name=new_name) if sprite.id == target.id else sprite for sprite in sprites]


def _apply_bulk_import(action: BulkImport, sprites):
    result = list(sprites)
    for ideal in action.ideal_sprites:
        result.append(Sprite(
            name=deduplicate_name(ideal.name, _names(result)),
            id=next_sprite_id(result),
            image=ideal.image,
            x=ideal.x,
            y=ideal.y,
            width=ideal.width,
        ))
    return result
