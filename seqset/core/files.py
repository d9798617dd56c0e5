"""File helpers shared by the extractors and the dataset."""

from __future__ import annotations

import gzip
from pathlib import Path
from typing import TextIO, Union


def open_text(path: Union[str, Path], mode: str = "r") -> TextIO:
    """
    Open a text file for reading or writing.

    Files whose name ends in ``.gz`` are transparently (de)compressed.

    Args:
        path: File path
        mode: ``"r"`` or ``"w"``

    Returns:
        Text file object, to be used as a context manager
    """
    if mode not in ("r", "w"):
        raise ValueError(f"Unsupported mode: {mode}")

    path = Path(path)
    if path.name.endswith(".gz"):
        return gzip.open(path, mode + "t", encoding="utf-8")
    return open(path, mode, encoding="utf-8")
