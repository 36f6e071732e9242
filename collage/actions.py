from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from collage.image_utils import ImageFile


class ActionKind(Enum):
    CREATE = "Create"
    DELETE = "Delete"
    DUPLICATE = "Duplicate"
    TRANSLATE = "Translate"
    SCALE = "Scale"
    REORDER_LAYERS = "ReorderLayers"
    RENAME = "Rename"
    BULK_IMPORT = "BulkImport"


class LayerDirection(Enum):
    MOVE_UP = "MoveUp"
    MOVE_DOWN = "MoveDown"
    MOVE_TO_TOP = "MoveToTop"
    MOVE_TO_BOTTOM = "MoveToBottom"


@dataclass(frozen=True)
class IdealSprite:
    """A sprite as requested by an import, before id and name allocation."""
    name: str
    image: ImageFile
    x: float
    y: float
    width: float


@dataclass(frozen=True)
class Create:
    image: ImageFile
    kind: ActionKind = ActionKind.CREATE


@dataclass(frozen=True)
class Delete:
    sprite_id: int
    kind: ActionKind = ActionKind.DELETE


@dataclass(frozen=True)
class Duplicate:
    sprite_id: int
    kind: ActionKind = ActionKind.DUPLICATE


@dataclass(frozen=True)
class Translate:
    sprite_id: int
    new_x: float
    new_y: float
    kind: ActionKind = ActionKind.TRANSLATE


@dataclass(frozen=True)
class Scale:
    sprite_id: int
    new_width: float
    kind: ActionKind = ActionKind.SCALE


@dataclass(frozen=True)
class ReorderLayers:
    sprite_id: int
    direction: LayerDirection
    kind: ActionKind = ActionKind.REORDER_LAYERS


@dataclass(frozen=True)
class Rename:
    sprite_id: int
    ideal_new_name: str
    kind: ActionKind = ActionKind.RENAME


@dataclass(frozen=True)
class BulkImport:
    ideal_sprites: Tuple[IdealSprite, ...]
    kind: ActionKind = ActionKind.BULK_IMPORT


Action = Union[Create, Delete, Duplicate, Translate, Scale, ReorderLayers, Rename, BulkImport]
