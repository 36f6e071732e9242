import hashlib
import io
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pygame
from PIL import Image, UnidentifiedImageError

from collage.errors import CollageError, DecodeError, InvalidFileTypeError
from collage.file_utils import SUPPORTED_IMAGE_EXTENSIONS, is_image_file_name


@dataclass(frozen=True, eq=False)
class ImageFile:
    """A decoded upload.

    Two ImageFiles are equal only if they are the same object; ``sha256`` is
    the identity used across sessions.
    """
    name: str
    width: int
    height: int
    pixels: np.ndarray = field(repr=False)
    surface: pygame.Surface = field(repr=False)
    sha256: str

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


def pil_to_pygame_surface(pil_image):
    """Convert PIL Image to a pygame surface with per-pixel alpha."""
    if pil_image.mode != 'RGBA':
        pil_image = pil_image.convert('RGBA')

    img_bytes = pil_image.tobytes()
    return pygame.image.frombytes(img_bytes, pil_image.size, 'RGBA')


def decode_image(data: bytes, name: str, extensions: Iterable[str] = SUPPORTED_IMAGE_EXTENSIONS) -> ImageFile:
    """Decode raw upload bytes into an ImageFile."""
    if not is_image_file_name(name, extensions):
        raise InvalidFileTypeError(name)

    try:
        with Image.open(io.BytesIO(data)) as pil_image:
            pil_image.load()
            rgba_image = pil_image.convert('RGBA')
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeError(name, str(e)) from e

    width, height = rgba_image.size
    if width == 0 or height == 0:
        raise DecodeError(name, "image has no pixels")

    pixels = np.array(rgba_image, dtype=np.uint8)
    pixels.setflags(write=False)

    return ImageFile(
        name=name,
        width=width,
        height=height,
        pixels=pixels,
        surface=pil_to_pygame_surface(rgba_image),
        sha256=hashlib.sha256(data).hexdigest(),
    )


def decode_images(files: Sequence[Tuple[str, bytes]], max_workers: int = 4,
                  extensions: Iterable[str] = SUPPORTED_IMAGE_EXTENSIONS
                  ) -> Tuple[List[ImageFile], List[CollageError]]:
    """Decode a batch of uploads in parallel.

    A failing file does not stop its siblings; failures are returned next to
    the decoded images. Images come back sorted by name.
    """
    extensions = tuple(extensions)
    images = []
    failures = []
    if not files:
        return images, failures

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = [executor.submit(decode_image, data, name, extensions) for name, data in files]
        for future in as_completed(futures):
            try:
                images.append(future.result())
            except CollageError as e:
                failures.append(e)

    images.sort(key=lambda image: image.name)
    return images, failures


class ImageLibrary:
    """Images uploaded during the session, kept sorted by name."""

    def __init__(self, images: Optional[Iterable[ImageFile]] = None):
        self._images: List[ImageFile] = []
        if images:
            self.add(images)

    def add(self, images: Iterable[ImageFile]):
        self._images = sorted(list(self._images) + list(images), key=lambda image: image.name)

    def find_by_sha256(self, sha256: str) -> Optional[ImageFile]:
        for image in self._images:
            if image.sha256 == sha256:
                return image
        return None

    def names(self) -> List[str]:
        return [image.name for image in self._images]

    def __getitem__(self, index: int) -> ImageFile:
        return self._images[index]

    def __iter__(self) -> Iterator[ImageFile]:
        return iter(self._images)

    def __len__(self) -> int:
        return len(self._images)
