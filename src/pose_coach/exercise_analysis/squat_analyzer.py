from typing import Dict

from .base_analyzer import AnalyzerState, ExerciseDefinition, ExerciseKind, register_exercise
from .landmarks import LandmarkFrame, PoseLandmark as PL
from .pose_utils import calculate_angle, calculate_vertical_angle
from .side_arbiter import Side


# --- Phases ---
class SquatPhase:
    UP = "UP"
    DOWN = "DOWN"


SQUAT_DEFINITION = ExerciseDefinition(
    kind=ExerciseKind.SQUAT,
    stages=(SquatPhase.UP, SquatPhase.DOWN),
    initial_stage=SquatPhase.UP,
    left_landmarks=(PL.LEFT_SHOULDER, PL.LEFT_HIP, PL.LEFT_KNEE, PL.LEFT_ANKLE, PL.LEFT_HEEL, PL.LEFT_FOOT_INDEX),
    right_landmarks=(PL.RIGHT_SHOULDER, PL.RIGHT_HIP, PL.RIGHT_KNEE, PL.RIGHT_ANKLE, PL.RIGHT_HEEL, PL.RIGHT_FOOT_INDEX),
    threshold_names=("depth_threshold", "up_threshold", "torso_angle_threshold", "heel_lift_tolerance"),
)


@register_exercise(SQUAT_DEFINITION)
def squat_transition(frame: LandmarkFrame, side: Side, state: AnalyzerState, definition: ExerciseDefinition) -> Dict[str, float]:
    """Side-view squat: a rep is DOWN below depth, then back UP past the standing angle."""
    t = definition.thresholds
    shoulder, hip, knee, ankle, heel, toe = (frame[i] for i in definition.landmarks_for(side))

    knee_angle = calculate_angle(hip, knee, ankle)
    torso_angle = calculate_vertical_angle(shoulder, hip)

    if knee_angle < t["depth_threshold"]:
        state.stage = SquatPhase.DOWN
    if knee_angle > t["up_threshold"] and state.stage == SquatPhase.DOWN:
        state.stage = SquatPhase.UP
        state.counter += 1

    if state.stage == SquatPhase.DOWN:
        # smaller y is higher in the image
        if heel.y < toe.y - t["heel_lift_tolerance"]:
            state.feedback = "Keep your heels down!"
        elif torso_angle > t["torso_angle_threshold"]:
            state.feedback = "Keep your chest up!"
        else:
            state.feedback = "Good depth!"
    else:
        state.feedback = "Begin Squat"

    return {"knee_angle": knee_angle, "torso_angle": torso_angle}
