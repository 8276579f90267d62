"""
Landmark frame: the per-call lookup of pose landmarks keyed by the upstream
model's fixed index layout.
"""
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Union

import numpy as np


class PoseLandmark(IntEnum):
    """Full-body landmark indices as emitted by the upstream pose model."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


@dataclass(frozen=True)
class Point:
    """A single landmark in normalized image coordinates."""
    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None  # None = assumed fully visible

    @property
    def confidence(self) -> float:
        return 1.0 if self.visibility is None else self.visibility


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _read_field(raw: Any, name: str, position: int) -> Any:
    if isinstance(raw, Mapping):
        return raw.get(name)
    if isinstance(raw, (list, tuple, np.ndarray)):
        return raw[position] if len(raw) > position else None
    return getattr(raw, name, None)


def to_point(raw: Any) -> Optional[Point]:
    """
    Convert one upstream landmark into a Point.

    Accepts a mapping with x/y keys, an object with x/y attributes, or a
    sequence / array row [x, y, z?, visibility?]. Returns None when x or y is missing.
    A visibility that is present but not a finite number reads as 0.0.
    """
    if raw is None:
        return None
    if isinstance(raw, Point):
        return raw
    x = _as_float(_read_field(raw, "x", 0))
    y = _as_float(_read_field(raw, "y", 1))
    if x is None or y is None:
        return None
    z = _as_float(_read_field(raw, "z", 2))
    raw_visibility = _read_field(raw, "visibility", 3)
    visibility = None
    if raw_visibility is not None:
        # a reported but unreadable visibility is not evidence of visibility
        visibility = _as_float(raw_visibility)
        if visibility is None:
            visibility = 0.0
    return Point(x=x, y=y, z=z if z is not None else 0.0, visibility=visibility)


class LandmarkFrame:
    """Immutable mapping from landmark index to Point for one video frame."""

    __slots__ = ("_points",)

    def __init__(self, points: Optional[Mapping[int, Point]] = None):
        self._points: Dict[int, Point] = dict(points or {})

    @classmethod
    def from_points(cls, raw_points: Union[Iterable[Any], Mapping[int, Any], None]) -> "LandmarkFrame":
        """
        Build a frame from the upstream landmark list.

        List position is the landmark index. Entries without usable x/y are
        dropped instead of stored as zeros, so absence stays distinguishable
        from a point at the origin.
        """
        if raw_points is None:
            return cls()
        if isinstance(raw_points, LandmarkFrame):
            return raw_points
        if isinstance(raw_points, Mapping):
            items = raw_points.items()
        else:
            items = enumerate(raw_points)
        points = {}
        for key, raw in items:
            try:
                index = int(key)
            except (TypeError, ValueError, OverflowError):
                continue
            point = to_point(raw)
            if point is not None:
                points[index] = point
        return cls(points)

    def get(self, index: int) -> Optional[Point]:
        return self._points.get(int(index))

    def visibility(self, index: int) -> float:
        point = self.get(index)
        return point.confidence if point is not None else 0.0

    def __contains__(self, index: object) -> bool:
        return index in self._points

    def __getitem__(self, index: int) -> Point:
        return self._points[int(index)]

    def __iter__(self) -> Iterator[int]:
        return iter(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"LandmarkFrame({len(self._points)} points)"
