"""
Draw instructions handed to the encode collaborator.

All coordinates are document space (points, origin bottom-left).
Instructions are immutable snapshots; the encoder never mutates them.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from .styles import RGB


@dataclass(frozen=True)
class DrawText:
    """Text placed with its baseline starting at (x, y)"""
    page_index: int
    x: float
    y: float
    text: str
    font: str
    size: float
    color: RGB = (0.0, 0.0, 0.0)
    opacity: float = 1.0
    rotation: float = 0.0  # degrees, counter-clockwise about (x, y)


@dataclass(frozen=True)
class DrawImage:
    """Image filling the rectangle whose bottom-left corner is (x, y)"""
    page_index: int
    x: float
    y: float
    width: float
    height: float
    data: bytes
    kind: str
    opacity: float = 1.0
    rotation: float = 0.0


@dataclass(frozen=True)
class DrawPath:
    """Open polyline stroke"""
    page_index: int
    points: Tuple[Tuple[float, float], ...]
    color: RGB
    width: float


DrawInstruction = Union[DrawText, DrawImage, DrawPath]
