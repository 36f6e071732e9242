"""
Tests for the editing session that ties the action log, gestures, paste
buffer, uploads and documents together.
"""
import pytest

from collage.actions import BulkImport, Create, LayerDirection, Scale, Translate
from collage.config_manager import get_config
from collage.errors import UnknownImageReferenceError
from collage.save_utils import export_sprites
from collage.session import CollageSession
from conftest import png_bytes


@pytest.fixture
def session(library, quiet_logger):
    return CollageSession(library=library, logger=quiet_logger)


# ── Gestures ────────────────────────────────────────────────────────────

class TestGestures:

    def test_drag_previews_without_logging(self, session, image_a):
        session.create_sprite(image_a)
        session.begin_translate(0, 10, 10)
        session.update_pointer(20, 30)

        preview = session.sprites()[0]
        assert (preview.x, preview.y) == (10, 20)
        assert session.committed_sprites()[0].x == 0
        assert len(session.actions) == 1

    def test_finish_commits_one_absolute_action(self, session, image_a):
        session.create_sprite(image_a)
        session.begin_translate(0, 10, 10)
        for step in range(1, 6):
            session.update_pointer(10 + step, 10 + 2 * step)

        assert session.finish_transformation() == Translate(0, 5, 10)
        assert session.actions[-1] == Translate(0, 5, 10)
        assert session.pending_transformation is None
        assert len(session.actions) == 2

    def test_scale_gesture(self, session, image_a):
        session.create_sprite(image_a)
        session.begin_scale(0, 60, 25)
        session.update_pointer(70, 25)
        session.finish_transformation()
        sprite = session.sprites()[0]
        assert (sprite.x, sprite.y, sprite.width) == (-50, -25, 200)

    def test_cancel_discards_gesture(self, session, image_a):
        session.create_sprite(image_a)
        session.begin_translate(0, 0, 0)
        session.update_pointer(50, 50)
        session.cancel_transformation()

        assert session.finish_transformation() is None
        assert session.actions == [Create(image_a)]
        assert session.sprites()[0].x == 0

    def test_update_without_gesture_is_ignored(self, session):
        session.update_pointer(5, 5)
        assert session.pending_transformation is None

    def test_pick_sees_preview(self, session, image_a):
        session.create_sprite(image_a)
        session.begin_translate(0, 0, 0)
        session.update_pointer(100, 0)
        assert session.pick(150, 10, (300, 300)).id == 0
        assert session.pick(50, 10, (300, 300)) is None


# ── Undo / redo ─────────────────────────────────────────────────────────

class TestUndoRedo:

    def test_undo_redo(self, session, image_a):
        session.create_sprite(image_a)
        session.translate_sprite(0, 5, 5)
        assert session.undo()
        assert session.sprites()[0].x == 0
        assert session.can_redo
        assert session.redo()
        assert session.sprites()[0].x == 5
        assert not session.can_redo

    def test_undo_skips_noop_drag(self, session, image_a):
        session.create_sprite(image_a)
        session.translate_sprite(0, 5, 5)
        session.begin_translate(0, 1, 1)
        session.finish_transformation()  # zero-distance drag
        assert session.undo()
        assert session.sprites()[0].x == 0

    def test_undo_cancels_gesture(self, session, image_a):
        session.create_sprite(image_a)
        session.begin_translate(0, 0, 0)
        assert session.undo()
        assert session.pending_transformation is None
        assert session.sprites() == []

    def test_new_edit_clears_redo(self, session, image_a):
        session.create_sprite(image_a)
        session.undo()
        session.create_sprite(image_a)
        assert not session.redo()

    def test_nothing_to_undo(self, session):
        assert not session.can_undo
        assert not session.undo()
        assert not session.redo()


# ── Edits and paste buffer ──────────────────────────────────────────────

class TestEdits:

    def test_edit_wrappers(self, session, image_a, image_b):
        session.create_sprite(image_a)
        session.create_sprite(image_b)
        session.duplicate_sprite(0)
        session.rename_sprite(2, "copy")
        session.reorder_sprite(2, LayerDirection.MOVE_TO_BOTTOM)
        session.scale_sprite(1, 20)
        session.delete_sprite(0)
        assert [(s.id, s.name) for s in session.sprites()] == [(2, "copy"), (1, "b")]
        assert session.find_sprite(1).width == 20

    def test_paste_height(self, session, image_a, image_b):
        session.create_sprite(image_a)
        session.create_sprite(image_b)
        assert session.copy_height(0)
        assert session.paste(1)
        assert session.actions[-1] == Scale(1, 25)
        assert session.find_sprite(1).height == 50

    def test_paste_with_empty_buffer(self, session, image_a):
        session.create_sprite(image_a)
        assert not session.paste(0)
        assert len(session.actions) == 1

    def test_copy_and_paste_missing_sprite(self, session, image_a):
        session.create_sprite(image_a)
        assert not session.copy_width(9)
        assert session.copy_width(0)
        assert not session.paste(9)

    def test_copy_does_not_log(self, session, image_a):
        session.create_sprite(image_a)
        session.copy_width(0)
        assert session.actions == [Create(image_a)]

    def test_negative_scale_never_gives_negative_width(self, session, image_a):
        session.create_sprite(image_a)
        session.scale_sprite(0, -25)
        assert session.find_sprite(0).width == 0


# ── Uploads and documents ───────────────────────────────────────────────

class TestUploadAndDocuments:

    def test_upload_adds_images_and_reports_failures(self, quiet_logger):
        session = CollageSession(logger=quiet_logger)
        failures = session.upload([("z.png", png_bytes(2, 2)), ("bad.png", b"nope"), ("c.png", png_bytes(1, 1))],
                                  max_workers=2)
        assert session.library.names() == ["c.png", "z.png"]
        assert [failure.file_name for failure in failures] == ["bad.png"]
        assert session.actions == []

    def test_configured_extension_uploads_and_names_sprite(self, quiet_logger, monkeypatch):
        extensions = get_config().supported_extensions
        monkeypatch.setattr(extensions, "images", extensions.images + [".tga"])
        session = CollageSession(logger=quiet_logger)
        assert session.upload([("icon.tga", png_bytes(2, 2))], max_workers=1) == []
        session.create_sprite(session.library[0])
        assert session.sprites()[0].name == "icon"

    def test_export_excludes_pending_gesture(self, session, image_a):
        session.create_sprite(image_a)
        session.begin_translate(0, 0, 0)
        session.update_pointer(40, 40)
        assert session.export_document() == export_sprites(session.committed_sprites())
        assert session.export_document()[0]["x"] == 0

    def test_import_round_trip(self, session, image_a, image_b):
        session.create_sprite(image_a)
        session.create_sprite(image_b)
        session.translate_sprite(1, 7, 8)
        document = session.export_document()

        action = session.import_documents([document])
        assert isinstance(action, BulkImport)
        assert [s.name for s in session.sprites()] == ["a", "b", "a (1)", "b (1)"]
        assert (session.sprites()[3].x, session.sprites()[3].y) == (7, 8)
        assert session.undo()
        assert len(session.sprites()) == 2

    def test_failed_import_leaves_log_untouched(self, session, image_a):
        session.create_sprite(image_a)
        document = session.export_document() + [dict(session.export_document()[0], imageSha256="f" * 64)]
        with pytest.raises(UnknownImageReferenceError) as exc_info:
            session.import_documents([document])
        assert exc_info.value.record_index == 1
        assert session.actions == [Create(image_a)]
