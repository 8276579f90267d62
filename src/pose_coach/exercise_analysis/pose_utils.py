"""
pose_utils.py - Shared 2D geometry helpers for landmark analysis.
"""
import numpy as np

_EPSILON = 1e-6


# --- Math & Geometry Utilities ---
def calculate_angle(a, b, c) -> float:
    """
    Calculate the angle between three points in the image plane.

    Point ordering convention:
    - a: First point (e.g., hip for knee angle)
    - b: Middle point (e.g., knee for knee angle) - angle is calculated here
    - c: Last point (e.g., ankle for knee angle)
    - The angle is calculated at point 'b' between vectors 'ba' and 'bc'

    Only x and y are used; z from the pose model is too noisy for joint angles.

    Args:
        a: First point (anything with .x and .y)
        b: Vertex point
        c: Last point

    Returns:
        Angle in degrees in the range 0-180
    """
    ba = np.array([a.x - b.x, a.y - b.y], dtype=float)
    bc = np.array([c.x - b.x, c.y - b.y], dtype=float)
    magnitude = np.linalg.norm(ba) * np.linalg.norm(bc)
    cosine_angle = np.dot(ba, bc) / max(magnitude, _EPSILON)
    cosine_angle = np.clip(cosine_angle, -1.0, 1.0)
    return float(np.degrees(np.arccos(cosine_angle)))


class _ReferencePoint:
    __slots__ = ("x", "y")

    def __init__(self, x: float, y: float):
        self.x = x
        self.y = y


def calculate_vertical_angle(p1, p2) -> float:
    """
    Angle of the segment p2->p1 relative to true vertical (0 = upright, 90 = horizontal).

    Image y grows downward, so the reference point sits one unit above p2.
    """
    above = _ReferencePoint(p2.x, p2.y - 1.0)
    return calculate_angle(p1, p2, above)


def calculate_distance(a, b) -> float:
    """Calculate Euclidean distance between two points in the image plane."""
    return float(np.linalg.norm(np.array([a.x - b.x, a.y - b.y], dtype=float)))
