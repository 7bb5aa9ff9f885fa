"""Utility helper functions shared by the store, server and uploader."""

import re
from typing import Tuple, Union

_DIGIT_RUN = re.compile(r'(\d+)')


def format_file_size(size_bytes: Union[int, float]) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{int(size_bytes)} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def natural_sort_key(name: str) -> Tuple:
    """
    Build a sort key that orders names the way a file browser does.

    Digit runs compare numerically and letters compare case-insensitively,
    so "a_2.ipa" sorts before "a_10.ipa" and "B.ipa" after "a.ipa".
    The raw name is the final tie-breaker to keep the order total.

    Args:
        name: File name

    Returns:
        Tuple usable as a sorted() key
    """
    parts = []
    for index, piece in enumerate(_DIGIT_RUN.split(name)):
        if index % 2:
            parts.append((1, int(piece), ''))
        else:
            parts.append((0, 0, piece.casefold()))
    return tuple(parts), name
