import os
from typing import Iterable, Tuple

SUPPORTED_IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.bmp', '.gif', '.webp')
SUPPORTED_DOCUMENT_EXTENSIONS = ('.json',)


def is_image_file_name(name: str, extensions: Iterable[str] = SUPPORTED_IMAGE_EXTENSIONS) -> bool:
    """True for names ending in a recognized image extension.

    Hidden files (last path component starting with a dot) are rejected even
    when the extension matches.
    """
    lower_case_name = name.lower()
    if not lower_case_name:
        return False

    base_name = lower_case_name.replace('\\', '/').split('/')[-1]
    if base_name.startswith('.'):
        return False

    return any(lower_case_name.endswith(ext) for ext in extensions)


def is_document_file_name(name: str) -> bool:
    return name.lower().endswith(SUPPORTED_DOCUMENT_EXTENSIONS)


def get_images_from_directory(directory_path, extensions=SUPPORTED_IMAGE_EXTENSIONS):
    """Get list of supported image files from directory."""
    if not os.path.exists(directory_path):
        return []

    image_files = []
    for filename in os.listdir(directory_path):
        if is_image_file_name(filename, extensions):
            image_files.append(os.path.join(directory_path, filename))
    return sorted(image_files)


def read_upload(path: str) -> Tuple[str, bytes]:
    """Read a file from disk as an upload: (base name, raw bytes)."""
    with open(path, 'rb') as f:
        return os.path.basename(path), f.read()
