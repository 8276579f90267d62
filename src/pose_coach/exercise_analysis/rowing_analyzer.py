"""
Rowing stroke analysis (side view of an ergometer).

The stroke cycles CATCH -> DRIVING -> FINISH -> RECOVERING -> CATCH. The
drive must be legs first, then body, then arms; the recovery reverses the
order: arms away, then body, then knees.

Horizontal drift is measured against fixed anatomy rather than the image:
the shoulder relative to the hip (the seat slides along the rail) and the
knee relative to the ankle (the feet stay on the footplate). The rower's
forward direction is taken from the hip->knee direction at the catch.
"""
from typing import Dict, Optional

from .base_analyzer import AnalyzerState, ExerciseDefinition, ExerciseKind, register_exercise
from .landmarks import LandmarkFrame, PoseLandmark as PL
from .pose_utils import calculate_angle
from .side_arbiter import Side


class RowingPhase:
    CATCH = "CATCH"
    DRIVING = "DRIVING"
    FINISH = "FINISH"
    RECOVERING = "RECOVERING"


# elbow and wrist are optional: hands are often hidden behind the handle
ARM_LANDMARKS = {
    Side.LEFT: (PL.LEFT_ELBOW, PL.LEFT_WRIST),
    Side.RIGHT: (PL.RIGHT_ELBOW, PL.RIGHT_WRIST),
}

ROWING_DEFINITION = ExerciseDefinition(
    kind=ExerciseKind.ROWING,
    stages=(RowingPhase.CATCH, RowingPhase.DRIVING, RowingPhase.FINISH, RowingPhase.RECOVERING),
    initial_stage=RowingPhase.CATCH,
    left_landmarks=(PL.LEFT_SHOULDER, PL.LEFT_HIP, PL.LEFT_KNEE, PL.LEFT_ANKLE),
    right_landmarks=(PL.RIGHT_SHOULDER, PL.RIGHT_HIP, PL.RIGHT_KNEE, PL.RIGHT_ANKLE),
    threshold_names=(
        "catch_knee_angle",
        "catch_elbow_angle",
        "finish_knee_angle",
        "finish_elbow_angle",
        "leg_straight_threshold",
        "arm_straight_threshold",
        "catch_hip_angle_max",
        "catch_buffer",
        "drift_tolerance",
        "arm_visibility_threshold",
    ),
)


def _elbow_angle(frame: LandmarkFrame, side: Side, shoulder, min_visibility: float) -> Optional[float]:
    elbow_index, wrist_index = ARM_LANDMARKS[side]
    elbow = frame.get(elbow_index)
    wrist = frame.get(wrist_index)
    if elbow is None or wrist is None:
        return None
    if elbow.confidence <= min_visibility or wrist.confidence <= min_visibility:
        return None
    return calculate_angle(shoulder, elbow, wrist)


@register_exercise(ROWING_DEFINITION)
def rowing_transition(frame: LandmarkFrame, side: Side, state: AnalyzerState, definition: ExerciseDefinition) -> Dict[str, float]:
    t = definition.thresholds
    memory = state.memory
    shoulder, hip, knee, ankle = (frame[i] for i in definition.landmarks_for(side))

    knee_angle = calculate_angle(hip, knee, ankle)
    hip_angle = calculate_angle(shoulder, hip, knee)
    measured_elbow = _elbow_angle(frame, side, shoulder, t["arm_visibility_threshold"])
    # Unseen arms are assumed straight so they never block the catch
    elbow_angle = measured_elbow if measured_elbow is not None else t["catch_elbow_angle"] + 10

    is_at_catch = knee_angle < t["catch_knee_angle"] and elbow_angle > t["catch_elbow_angle"]
    is_at_finish = knee_angle > t["finish_knee_angle"] and elbow_angle < t["finish_elbow_angle"]
    legs_are_bent = knee_angle < t["leg_straight_threshold"]
    arms_are_bent = elbow_angle < t["arm_straight_threshold"]

    forward = memory.get("forward", 1.0)
    shoulder_offset = (shoulder.x - hip.x) * forward
    knee_offset = (knee.x - ankle.x) * forward
    tolerance = t["drift_tolerance"]

    if state.stage == RowingPhase.CATCH:
        if hip_angle > t["catch_hip_angle_max"]:
            state.feedback = "Lean forward more at the catch!"
        else:
            state.feedback = "Drive!"
        if knee_angle > t["catch_knee_angle"] + t["catch_buffer"]:
            state.stage = RowingPhase.DRIVING
            forward = 1.0 if knee.x >= hip.x else -1.0
            memory["forward"] = forward
            memory["shoulder_x_at_catch"] = shoulder.x
            memory["hip_x_at_catch"] = hip.x

    elif state.stage == RowingPhase.DRIVING:
        state.feedback = "Driving..."
        catch_offset = (memory.get("shoulder_x_at_catch", shoulder.x) - memory.get("hip_x_at_catch", hip.x)) * forward
        if arms_are_bent and legs_are_bent:
            state.feedback = "Legs first! (Don't pull arms yet)"
        elif legs_are_bent and shoulder_offset < catch_offset - tolerance:
            state.feedback = "Legs first! (Don't open back yet)"
        if is_at_finish:
            state.stage = RowingPhase.FINISH
            state.counter += 1
            memory["shoulder_offset_at_finish"] = shoulder_offset
            memory["knee_offset_at_finish"] = knee_offset

    elif state.stage == RowingPhase.FINISH:
        state.feedback = "Recovering..."
        if not is_at_finish:
            state.stage = RowingPhase.RECOVERING

    elif state.stage == RowingPhase.RECOVERING:
        state.feedback = "Recovering..."
        if arms_are_bent:
            if shoulder_offset > memory.get("shoulder_offset_at_finish", shoulder_offset) + tolerance:
                state.feedback = "Arms away first! (Then body)"
            elif knee_offset > memory.get("knee_offset_at_finish", knee_offset) + tolerance:
                state.feedback = "Arms away first! (Don't bend knees yet)"
        if is_at_catch:
            state.stage = RowingPhase.CATCH

    extras = {"knee_angle": knee_angle, "hip_angle": hip_angle}
    if measured_elbow is not None:
        extras["elbow_angle"] = measured_elbow
    return extras
