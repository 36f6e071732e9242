import re
from typing import AbstractSet, Iterable, Optional

from collage.config_manager import get_config

COUNTER_SUFFIX_PATTERN = re.compile(r"^(.*) \((\d+)\)$")


def next_sprite_id(sprites) -> int:
    """Smallest id above every live sprite's id (0 for an empty canvas)."""
    if not sprites:
        return 0
    return 1 + max(sprite.id for sprite in sprites)


def strip_image_extension(file_name: str, extensions: Optional[Iterable[str]] = None) -> str:
    """Drop a recognized image extension; defaults to the configured upload extensions."""
    if extensions is None:
        extensions = get_config().supported_extensions.images
    lower_case_name = file_name.lower()
    for ext in extensions:
        if lower_case_name.endswith(ext) and len(file_name) > len(ext):
            return file_name[:-len(ext)]
    return file_name


def deduplicate_name(ideal_name: str, existing_names: AbstractSet[str], minimum_counter: int = 1) -> str:
    """
    Return ``ideal_name`` if it is free, otherwise the first free
    ``"<base> (<n>)"``.

    A taken name that already ends in a counter, e.g. ``"Foo (3)"``, is split
    into ``"Foo"`` and counting resumes from 4, so repeated duplication never
    stacks suffixes.
    """
    if ideal_name not in existing_names:
        return ideal_name

    base_name = ideal_name
    counter = minimum_counter
    match = COUNTER_SUFFIX_PATTERN.match(ideal_name)
    if match:
        base_name = match.group(1)
        counter = max(counter, int(match.group(2)) + 1)

    # At most len(existing_names) + 1 candidates are tried.
    while True:
        candidate = f"{base_name} ({counter})"
        if candidate not in existing_names:
            return candidate
        counter += 1
