"""
Tests for collage document export and import validation.

Covers:
- Exported record keys and values
- Export/import round trip through a file
- Fail-closed validation with located errors
"""
import json
import math

import pytest

from collage.actions import Create, Rename, Scale, Translate
from collage.errors import (
    AspectRatioMismatchError, DocumentImportError, MalformedDocumentError, UnknownImageReferenceError,
)
from collage.save_utils import (
    build_bulk_import, export_sprites, read_documents, write_document,
)
from collage.sprite_utils import derive_sprites


def record(image, **overrides):
    base = {
        "spriteName": "s",
        "imageFileName": image.name,
        "imageSha256": image.sha256,
        "x": 0,
        "y": 0,
        "width": image.width,
        "height": image.height,
    }
    base.update(overrides)
    return base


# ── Export ──────────────────────────────────────────────────────────────

class TestExport:

    def test_record_fields(self, image_a):
        sprites = derive_sprites([Create(image_a), Translate(0, 3, 4), Scale(0, 50), Rename(0, "hero")])
        assert export_sprites(sprites) == [{
            "spriteName": "hero",
            "imageFileName": "a.png",
            "imageSha256": image_a.sha256,
            "x": 28,
            "y": 16.5,
            "width": 50,
            "height": 25,
        }]

    def test_keeps_layer_order(self, image_a, image_b):
        sprites = derive_sprites([Create(image_a), Create(image_b)])
        assert [r["spriteName"] for r in export_sprites(sprites)] == ["a", "b"]

    def test_empty_canvas(self):
        assert export_sprites([]) == []

    def test_round_trip_through_file(self, tmp_path, image_a, image_b, library):
        sprites = derive_sprites([Create(image_a), Create(image_b), Translate(1, 10, 20), Scale(0, 30)])
        path = tmp_path / "collage.json"
        write_document(str(path), export_sprites(sprites))

        action = build_bulk_import(read_documents([str(path)]), library)
        imported = derive_sprites([action])
        assert [(s.name, s.image, s.x, s.y, s.width) for s in imported] == \
            [(s.name, s.image, s.x, s.y, s.width) for s in sprites]


# ── Import ──────────────────────────────────────────────────────────────

class TestImport:

    def test_valid_documents_are_concatenated(self, image_a, image_b, library):
        documents = [[record(image_a, spriteName="one")], [record(image_b, spriteName="two", x=5.5)]]
        action = build_bulk_import(documents, library)
        assert [ideal.name for ideal in action.ideal_sprites] == ["one", "two"]
        assert action.ideal_sprites[1].image is image_b
        assert action.ideal_sprites[1].x == 5.5

    def test_no_documents(self, library):
        assert build_bulk_import([], library).ideal_sprites == ()

    def test_tolerates_small_aspect_error(self, image_a, library):
        action = build_bulk_import([[record(image_a, width=100.04, height=50)]], library)
        assert action.ideal_sprites[0].width == 100.04

    def test_zero_size_sprite(self, image_a, library):
        action = build_bulk_import([[record(image_a, width=0, height=0)]], library)
        assert action.ideal_sprites[0].width == 0

    def test_aspect_mismatch(self, image_a, library):
        with pytest.raises(AspectRatioMismatchError) as exc_info:
            build_bulk_import([[record(image_a, width=100, height=51)]], library)
        assert exc_info.value.document_index == 0
        assert exc_info.value.record_index == 0

    def test_zero_height_with_width(self, image_a, library):
        with pytest.raises(AspectRatioMismatchError):
            build_bulk_import([[record(image_a, width=10, height=0)]], library)

    def test_unknown_hash(self, image_a, library):
        with pytest.raises(UnknownImageReferenceError) as exc_info:
            build_bulk_import([[record(image_a)], [record(image_a, imageSha256="0" * 64)]], library)
        assert exc_info.value.document_index == 1
        assert exc_info.value.field == "imageSha256"

    def test_matches_by_hash_not_file_name(self, image_a, library):
        action = build_bulk_import([[record(image_a, imageFileName="renamed.png")]], library)
        assert action.ideal_sprites[0].image is image_a

    @pytest.mark.parametrize("field, value", [
        ("x", "10"),
        ("y", None),
        ("x", True),
        ("width", math.nan),
        ("height", math.inf),
        ("width", -1),
    ])
    def test_bad_numbers(self, image_a, library, field, value):
        with pytest.raises(MalformedDocumentError) as exc_info:
            build_bulk_import([[record(image_a, **{field: value})]], library)
        assert exc_info.value.field == field

    @pytest.mark.parametrize("field", ["spriteName", "imageFileName", "imageSha256"])
    def test_missing_string_field(self, image_a, library, field):
        bad = record(image_a)
        del bad[field]
        with pytest.raises(MalformedDocumentError) as exc_info:
            build_bulk_import([[bad]], library)
        assert exc_info.value.field == field

    def test_document_not_a_list(self, image_a, library):
        with pytest.raises(MalformedDocumentError) as exc_info:
            build_bulk_import([record(image_a)], library)
        assert exc_info.value.record_index is None

    def test_record_not_an_object(self, image_a, library):
        with pytest.raises(MalformedDocumentError) as exc_info:
            build_bulk_import([[record(image_a), 42]], library)
        assert exc_info.value.record_index == 1

    def test_error_message_locates_field(self, image_a, library):
        with pytest.raises(DocumentImportError, match=r"Document 0, sprite 2, field 'y'"):
            build_bulk_import([[record(image_a), record(image_a), record(image_a, y="oops")]], library)


# ── Reading files ───────────────────────────────────────────────────────

class TestReadDocuments:

    def test_reads_each_file(self, tmp_path):
        paths = []
        for i in range(2):
            path = tmp_path / f"doc{i}.json"
            path.write_text(json.dumps([{"i": i}]), encoding="utf-8")
            paths.append(str(path))
        assert read_documents(paths) == [[{"i": 0}], [{"i": 1}]]

    def test_invalid_json(self, tmp_path):
        good = tmp_path / "good.json"
        good.write_text("[]", encoding="utf-8")
        bad = tmp_path / "bad.json"
        bad.write_text("[{", encoding="utf-8")
        with pytest.raises(MalformedDocumentError) as exc_info:
            read_documents([str(good), str(bad)])
        assert exc_info.value.document_index == 1

    def test_file_that_is_not_utf8(self, tmp_path):
        bad = tmp_path / "latin1.json"
        bad.write_bytes(b'[{"spriteName": "\xff\xfe"}]')
        with pytest.raises(MalformedDocumentError) as exc_info:
            read_documents([str(bad)])
        assert exc_info.value.document_index == 0
        assert "UTF-8" in str(exc_info.value)
