from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .feedback import FeedbackGenerator
from .landmarks import LandmarkFrame
from .log_utils import get_logger
from .pose_utils import calculate_distance
from .side_arbiter import PRIMARY_HIP, Side

if TYPE_CHECKING:
    from .base_analyzer import AnalyzerState

logger = get_logger(__name__)


class GateReason(Enum):
    DETECTING = "detecting"
    STABILIZING = "stabilizing"
    SIDE_SWITCHED = "side_switched"
    BASELINE = "baseline"
    HIP_MISSING = "hip_missing"
    JITTER = "jitter"
    ACCEPTED = "accepted"


@dataclass(frozen=True)
class GateDecision:
    passed: bool
    reason: GateReason


class StabilityGate:
    """
    Decides whether exercise logic may run on the current frame.

    A newly visible subject is held for a grace period, a change of tracking
    side resets the jitter baseline, and frames whose primary hip jumps
    further than the velocity threshold since the last accepted frame are
    rejected as tracking noise.
    """

    def __init__(self, grace_period_ms: float = 1500, velocity_threshold: float = 0.1):
        self.grace_period_ms = grace_period_ms
        self.velocity_threshold = velocity_threshold

    def evaluate(self, frame: LandmarkFrame, side: Side, state: "AnalyzerState", now: float) -> GateDecision:
        """
        Args:
            frame: Landmarks of the current frame
            side: Side chosen by the arbiter (never Side.NONE here)
            state: Analyzer state; detection time, baseline and feedback are updated in place
            now: Current wall-clock time in seconds

        Returns:
            GateDecision telling the caller whether to run the exercise transition
        """
        # --- Grace period ---
        if state.detection_start_time is None:
            state.detection_start_time = now
            state.feedback = FeedbackGenerator.detecting()
            return GateDecision(False, GateReason.DETECTING)

        elapsed_ms = (now - state.detection_start_time) * 1000.0
        if elapsed_ms < self.grace_period_ms:
            state.feedback = FeedbackGenerator.stabilizing(self.grace_period_ms - elapsed_ms)
            return GateDecision(False, GateReason.STABILIZING)

        # --- Side switch: drop the baseline, keep the grace timer ---
        if side != state.baseline_side:
            if state.baseline_side != Side.NONE:
                logger.info(f"Switched tracking side: {state.baseline_side.value} -> {side.value}")
            state.last_valid_frame = None
            state.baseline_side = side
            state.feedback = FeedbackGenerator.side_switched()
            return GateDecision(False, GateReason.SIDE_SWITCHED)

        if state.last_valid_frame is None:
            state.last_valid_frame = frame
            state.feedback = FeedbackGenerator.tracking_stable()
            return GateDecision(False, GateReason.BASELINE)

        # --- Jitter filter ---
        hip_index = PRIMARY_HIP[side]
        old_hip = state.last_valid_frame.get(hip_index)
        new_hip = frame.get(hip_index)
        if old_hip is None or new_hip is None:
            state.feedback = FeedbackGenerator.hip_not_visible()
            return GateDecision(False, GateReason.HIP_MISSING)

        displacement = calculate_distance(old_hip, new_hip)
        if displacement > self.velocity_threshold:
            logger.debug(f"Jitter: hip moved {displacement:.3f} > {self.velocity_threshold}")
            state.feedback = FeedbackGenerator.jitter_detected()
            return GateDecision(False, GateReason.JITTER)

        state.last_valid_frame = frame
        return GateDecision(True, GateReason.ACCEPTED)
