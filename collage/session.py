from typing import Any, List, Optional, Sequence, Tuple

from rich.markup import escape

from collage import history_utils
from collage.actions import (
    Action, Create, Delete, Duplicate, LayerDirection, Rename, ReorderLayers, Scale, Translate,
)
from collage.clipboard_utils import PasteBuffer, copy_height, copy_width, paste_action
from collage.collision_utils import pick_sprite
from collage.config_manager import get_config
from collage.errors import CollageError, DocumentImportError
from collage.image_utils import ImageFile, ImageLibrary, decode_images
from collage.log_utils import AppLogger
from collage.save_utils import build_bulk_import, export_sprites
from collage.sprite_utils import Sprite, derive_sprites, find_sprite
from collage.transform_utils import (
    PendingTransformation, TransformationKind, finalize_transformation, update_pointer,
)


class CollageSession:
    """One editing session: the action log and everything built around it.

    The log is the only record of the collage. Sprites are recomputed from it
    on demand; gestures and the paste buffer are transient and never logged.
    """

    def __init__(self, library: Optional[ImageLibrary] = None, logger: Optional[AppLogger] = None):
        self.library = library if library is not None else ImageLibrary()
        self.logger = logger if logger is not None else AppLogger(get_config())
        self.actions: List[Action] = []
        self.redo_stack: List[Action] = []
        self.pending_transformation: Optional[PendingTransformation] = None
        self.paste_buffer = PasteBuffer.empty()

    # --- Derived state ------------------------------------------------------

    def sprites(self) -> List[Sprite]:
        """Sprites as displayed, including any gesture in progress."""
        return derive_sprites(self.actions, self.pending_transformation)

    def committed_sprites(self) -> List[Sprite]:
        return derive_sprites(self.actions)

    def find_sprite(self, sprite_id: int) -> Optional[Sprite]:
        return find_sprite(self.sprites(), sprite_id)

    def pick(self, pointer_x, pointer_y, canvas_size) -> Optional[Sprite]:
        return pick_sprite(pointer_x, pointer_y, self.sprites(), canvas_size)

    # --- Log ----------------------------------------------------------------

    def dispatch(self, action: Action):
        self.actions, self.redo_stack = history_utils.push_action(self.actions, self.redo_stack, action)
        self.logger.debug(f"{action.kind.value}: {escape(repr(action))}")

    @property
    def can_undo(self) -> bool:
        return history_utils.can_undo(self.actions)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def undo(self) -> bool:
        self.cancel_transformation()
        result = history_utils.undo(self.actions, self.redo_stack)
        if result is None:
            self.logger.debug("Nothing to undo")
            return False
        self.actions, self.redo_stack = result
        self.logger.debug(f"Undid {self.redo_stack[-1].kind.value}")
        return True

    def redo(self) -> bool:
        self.cancel_transformation()
        result = history_utils.redo(self.actions, self.redo_stack)
        if result is None:
            self.logger.debug("Nothing to redo")
            return False
        self.actions, self.redo_stack = result
        self.logger.debug(f"Redid {self.actions[-1].kind.value}")
        return True

    # --- Edits --------------------------------------------------------------

    def create_sprite(self, image: ImageFile):
        self.dispatch(Create(image))

    def delete_sprite(self, sprite_id: int):
        self.dispatch(Delete(sprite_id))

    def duplicate_sprite(self, sprite_id: int):
        self.dispatch(Duplicate(sprite_id))

    def translate_sprite(self, sprite_id: int, new_x, new_y):
        self.dispatch(Translate(sprite_id, new_x, new_y))

    def scale_sprite(self, sprite_id: int, new_width):
        self.dispatch(Scale(sprite_id, new_width))

    def reorder_sprite(self, sprite_id: int, direction: LayerDirection):
        self.dispatch(ReorderLayers(sprite_id, direction))

    def rename_sprite(self, sprite_id: int, ideal_new_name: str):
        self.dispatch(Rename(sprite_id, ideal_new_name))

    # --- Gestures -----------------------------------------------------------

    def begin_translate(self, sprite_id: int, pointer_x, pointer_y):
        self.pending_transformation = PendingTransformation.start(
            TransformationKind.TRANSLATE, sprite_id, pointer_x, pointer_y)

    def begin_scale(self, sprite_id: int, pointer_x, pointer_y):
        self.pending_transformation = PendingTransformation.start(
            TransformationKind.SCALE, sprite_id, pointer_x, pointer_y)

    def update_pointer(self, pointer_x, pointer_y):
        if self.pending_transformation is not None:
            self.pending_transformation = update_pointer(self.pending_transformation, pointer_x, pointer_y)

    def finish_transformation(self) -> Optional[Action]:
        """Commit the gesture as one absolute action, evaluated against the log alone."""
        pending = self.pending_transformation
        if pending is None:
            return None
        self.pending_transformation = None

        action = finalize_transformation(pending, self.committed_sprites())
        if action is not None:
            self.dispatch(action)
        return action

    def cancel_transformation(self):
        self.pending_transformation = None

    # --- Paste buffer -------------------------------------------------------

    def copy_width(self, sprite_id: int) -> bool:
        sprite = self.find_sprite(sprite_id)
        if sprite is None:
            return False
        self.paste_buffer = copy_width(sprite)
        return True

    def copy_height(self, sprite_id: int) -> bool:
        sprite = self.find_sprite(sprite_id)
        if sprite is None:
            return False
        self.paste_buffer = copy_height(sprite)
        return True

    def paste(self, sprite_id: int) -> bool:
        target = self.find_sprite(sprite_id)
        if target is None:
            return False
        action = paste_action(self.paste_buffer, target)
        if action is None:
            return False
        self.dispatch(action)
        return True

    # --- Images and documents -----------------------------------------------

    def add_images(self, images: Sequence[ImageFile]):
        self.library.add(images)
        for image in images:
            self.logger.debug(f"Added image '{escape(image.name)}' ({image.width}x{image.height})")

    def upload(self, files: Sequence[Tuple[str, bytes]], max_workers: Optional[int] = None) -> List[CollageError]:
        """Decode uploads into the library. Returns the per-file failures."""
        config = get_config()
        if max_workers is None:
            max_workers = config.performance.decode_max_workers
        images, failures = decode_images(files, max_workers, config.supported_extensions.images)
        self.add_images(images)
        for failure in failures:
            self.logger.warning(escape(str(failure)))
        if images:
            self.logger.success(f"Uploaded {len(images)} image(s)")
        return failures

    def export_document(self):
        return export_sprites(self.committed_sprites())

    def import_documents(self, documents: Sequence[Any]):
        try:
            action = build_bulk_import(documents, self.library)
        except DocumentImportError as e:
            self.logger.error(f"Import failed. {escape(str(e))}")
            raise
        self.dispatch(action)
        self.logger.success(f"Imported {len(action.ideal_sprites)} sprite(s)")
        return action
