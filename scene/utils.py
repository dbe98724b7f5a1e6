"""
utils.py
---------
Helper utilities for the image-layer stage.

This module includes:
  - The image extension allow-list and directory listing
  - Image input kind selection
"""

import os
from dataclasses import dataclass
from typing import List

from common.errors import NoImageKindFound
from common.io_utils import normalize_file_path

# ----------------------------
# Image configuration
# ----------------------------
IMAGE_EXTS = {
    ".png", ".jpg", ".jpeg", ".gif",
    ".bmp", ".tif", ".tiff", ".webp",
}

PREFERRED_IMAGE_KIND = "image_source"


@dataclass(frozen=True)
class DesiredImage:
    file_name: str
    file_path: str


def _sort_key(name: str):
    # case-insensitive first, raw name as tie-break so ordering is total
    return (name.casefold(), name)


def list_images_in_dir(directory: str) -> List[DesiredImage]:
    """Image files directly inside `directory`, sorted by file name."""
    with os.scandir(directory) as entries:
        names = [
            e.name for e in entries
            if e.is_file() and os.path.splitext(e.name)[1].lower() in IMAGE_EXTS
        ]
    return [
        DesiredImage(file_name=name, file_path=normalize_file_path(os.path.join(directory, name)))
        for name in sorted(names, key=_sort_key)
    ]


def pick_image_input_kind(kinds: List[str]) -> str:
    """Prefer `image_source`, else any kind mentioning 'image'."""
    if PREFERRED_IMAGE_KIND in kinds:
        return PREFERRED_IMAGE_KIND
    for kind in kinds:
        if "image" in kind.lower():
            return kind
    raise NoImageKindFound(f"No image input kind found. Available: {', '.join(kinds)}")
