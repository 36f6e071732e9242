import json
import math
from typing import Any, Dict, List, Sequence

import pygame
from PIL import Image

from collage.actions import BulkImport, IdealSprite
from collage.drawing_utils import render_canvas
from collage.errors import (
    AspectRatioMismatchError, MalformedDocumentError, UnknownImageReferenceError,
)

ASPECT_RATIO_TOLERANCE = 0.001

STRING_FIELDS = ("spriteName", "imageFileName", "imageSha256")


def export_sprites(sprites) -> List[Dict[str, Any]]:
    """Serialize sprites, bottom to top, to the portable collage document."""
    return [
        {
            "spriteName": sprite.name,
            "imageFileName": sprite.image.name,
            "imageSha256": sprite.image.sha256,
            "x": sprite.x,
            "y": sprite.y,
            "width": sprite.width,
            "height": sprite.height,
        }
        for sprite in sprites
    ]


def _is_finite_number(value) -> bool:
    # bool is an int subclass but JSON true/false is not a coordinate
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _validate_record(record, document_index: int, record_index: int, library) -> IdealSprite:
    if not isinstance(record, dict):
        raise MalformedDocumentError("sprite record must be an object", document_index, record_index)

    for field in STRING_FIELDS:
        if not isinstance(record.get(field), str):
            raise MalformedDocumentError("must be a string", document_index, record_index, field)

    image = library.find_by_sha256(record["imageSha256"])
    if image is None:
        raise UnknownImageReferenceError(
            f"image not found ({record['imageFileName']})", document_index, record_index, "imageSha256"
        )

    for field in ("x", "y"):
        if not _is_finite_number(record.get(field)):
            raise MalformedDocumentError("must be a finite number", document_index, record_index, field)

    for field in ("width", "height"):
        value = record.get(field)
        if not _is_finite_number(value) or value < 0:
            raise MalformedDocumentError("must be a finite, non-negative number", document_index, record_index, field)

    width, height = record["width"], record["height"]
    if height == 0:
        consistent = width == 0
    else:
        consistent = abs(width / height - image.aspect_ratio) <= ASPECT_RATIO_TOLERANCE
    if not consistent:
        raise AspectRatioMismatchError(
            f"{width}x{height} does not match the {image.width}x{image.height} image '{image.name}'",
            document_index, record_index, "width",
        )

    return IdealSprite(name=record["spriteName"], image=image, x=record["x"], y=record["y"], width=width)


def build_bulk_import(documents: Sequence[Any], library) -> BulkImport:
    """
    Validate untrusted parsed-JSON documents and turn them into one BulkImport.

    Every document must be a list of sprite records. The first violation
    raises a DocumentImportError subclass and nothing is imported.
    """
    ideal_sprites = []
    for document_index, document in enumerate(documents):
        if not isinstance(document, list):
            raise MalformedDocumentError("document must be an array of sprites", document_index)
        for record_index, record in enumerate(document):
            ideal_sprites.append(_validate_record(record, document_index, record_index, library))

    return BulkImport(tuple(ideal_sprites))


def write_document(path: str, records: List[Dict[str, Any]]):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(records, f, indent=2)


def read_documents(paths: Sequence[str]) -> List[Any]:
    """Parse each file as JSON. Invalid JSON is reported like any other malformed document."""
    documents = []
    for document_index, path in enumerate(paths):
        try:
            with open(path, 'r', encoding='utf-8') as f:
                documents.append(json.load(f))
        except json.JSONDecodeError as e:
            raise MalformedDocumentError(f"invalid JSON ({e.msg})", document_index) from e
        except UnicodeDecodeError as e:
            raise MalformedDocumentError(f"not UTF-8 text ({e})", document_index) from e
    return documents


def pygame_surface_to_pil_image(surface):
    """Convert a pygame surface to a PIL image, keeping per-pixel alpha."""
    return Image.frombytes('RGBA', surface.get_size(), pygame.image.tobytes(surface, 'RGBA'))


def save_canvas_image(path: str, canvas_size, sprites, background=None):
    """Render the collage at full canvas resolution and write it as an image file."""
    canvas = render_canvas(canvas_size, sprites, background)
    pygame_surface_to_pil_image(canvas).save(path)
