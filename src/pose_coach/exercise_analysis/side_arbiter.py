from enum import Enum
from typing import TYPE_CHECKING, Sequence

from .feedback import FeedbackGenerator
from .landmarks import LandmarkFrame, PoseLandmark
from .log_utils import get_logger

if TYPE_CHECKING:
    from .base_analyzer import AnalyzerState

logger = get_logger(__name__)


class Side(Enum):
    """Which half of the body is used as the tracking reference."""
    LEFT = "left"
    RIGHT = "right"
    NONE = "none"


PRIMARY_HIP = {
    Side.LEFT: PoseLandmark.LEFT_HIP,
    Side.RIGHT: PoseLandmark.RIGHT_HIP,
}


def is_side_visible(frame: LandmarkFrame, indices: Sequence[int], threshold: float) -> bool:
    """Check if all required landmarks are present and visible above threshold."""
    if not indices:
        return False
    for index in indices:
        point = frame.get(index)
        if point is None or point.confidence <= threshold:
            return False
    return True


class SideArbiter:
    """
    Decides whether the left side, right side, or neither side is trackable.

    The previously active side wins while it stays visible, so a subject
    standing square to the camera does not flap between sides at the
    visibility threshold.
    """

    def __init__(self, left_indices: Sequence[int], right_indices: Sequence[int], visibility_threshold: float = 0.6):
        self.left_indices = tuple(left_indices)
        self.right_indices = tuple(right_indices)
        self.visibility_threshold = visibility_threshold

    def arbitrate(self, frame: LandmarkFrame, previous: Side) -> Side:
        left_visible = is_side_visible(frame, self.left_indices, self.visibility_threshold)
        right_visible = is_side_visible(frame, self.right_indices, self.visibility_threshold)

        if previous == Side.LEFT and left_visible:
            return Side.LEFT
        if previous == Side.RIGHT and right_visible:
            return Side.RIGHT
        if left_visible:
            side = Side.LEFT
        elif right_visible:
            side = Side.RIGHT
        else:
            side = Side.NONE
        if side != previous:
            logger.debug(f"Side arbitration: {previous.value} -> {side.value}")
        return side

    def apply(self, frame: LandmarkFrame, state: "AnalyzerState") -> Side:
        """
        Arbitrate the side for this frame and record it on the state.

        When no side is trackable the detection timer and jitter baseline are
        dropped and the subject is asked to step into view; stage and counter
        are left alone.
        """
        side = self.arbitrate(frame, state.active_side)
        if side == Side.NONE and state.active_side != Side.NONE:
            logger.info("Lost sight of the tracked side; waiting for the body to be visible again")
        state.active_side = side
        if side == Side.NONE:
            state.detection_start_time = None
            state.last_valid_frame = None
            state.baseline_side = Side.NONE
            state.feedback = FeedbackGenerator.body_not_visible()
        return side
