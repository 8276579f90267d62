from typing import Dict

from .base_analyzer import AnalyzerState, ExerciseDefinition, ExerciseKind, register_exercise
from .landmarks import LandmarkFrame, PoseLandmark as PL
from .side_arbiter import Side

POSE_TRACKING_STAGE = "N/A"

POSE_TRACKING_DEFINITION = ExerciseDefinition(
    kind=ExerciseKind.POSE_TRACKING,
    stages=(POSE_TRACKING_STAGE,),
    initial_stage=POSE_TRACKING_STAGE,
    left_landmarks=(PL.LEFT_HIP,),
    right_landmarks=(PL.RIGHT_HIP,),
)


@register_exercise(POSE_TRACKING_DEFINITION)
def pose_tracking_transition(frame: LandmarkFrame, side: Side, state: AnalyzerState, definition: ExerciseDefinition) -> Dict[str, float]:
    """Free movement: only confirms that a stable body is being tracked."""
    hip = frame[definition.landmarks_for(side)[0]]
    state.feedback = "Pose tracking active. Begin."
    return {"hip_x": hip.x, "hip_y": hip.y}
