from typing import Dict

from .base_analyzer import AnalyzerState, ExerciseDefinition, ExerciseKind, register_exercise
from .landmarks import LandmarkFrame, PoseLandmark as PL
from .pose_utils import calculate_angle
from .side_arbiter import Side


class SprintPhase:
    IDLE = "IDLE"
    SET = "SET"
    DRIVE = "DRIVE"


SPRINT_START_DEFINITION = ExerciseDefinition(
    kind=ExerciseKind.SPRINT_START,
    stages=(SprintPhase.IDLE, SprintPhase.SET, SprintPhase.DRIVE),
    initial_stage=SprintPhase.IDLE,
    left_landmarks=(PL.LEFT_SHOULDER, PL.LEFT_HIP, PL.LEFT_KNEE, PL.LEFT_ANKLE, PL.LEFT_FOOT_INDEX),
    right_landmarks=(PL.RIGHT_SHOULDER, PL.RIGHT_HIP, PL.RIGHT_KNEE, PL.RIGHT_ANKLE, PL.RIGHT_FOOT_INDEX),
    threshold_names=(
        "set_hip_knee_angle",
        "set_entry_margin",
        "drive_entry_margin",
        "drive_lean_angle_good",
        "drive_lean_angle_bad",
        "extension_threshold",
    ),
)


@register_exercise(SPRINT_START_DEFINITION)
def sprint_start_transition(frame: LandmarkFrame, side: Side, state: AnalyzerState, definition: ExerciseDefinition) -> Dict[str, float]:
    """
    Block start: IDLE -> SET (crouched, hips above shoulders) -> DRIVE (front
    leg extending). Full extension in DRIVE counts one start and resets to IDLE.

    The phases are checked in sequence so one frame may advance more than one
    phase when the angles allow it.
    """
    t = definition.thresholds
    shoulder, hip, knee, ankle, _toe = (frame[i] for i in definition.landmarks_for(side))

    hip_knee_angle = calculate_angle(hip, knee, ankle)
    body_lean_angle = calculate_angle(shoulder, hip, knee)

    if state.stage == SprintPhase.IDLE:
        state.feedback = "Get into your blocks"
        if hip_knee_angle < t["set_hip_knee_angle"] + t["set_entry_margin"] and hip.y < shoulder.y:
            state.stage = SprintPhase.SET

    if state.stage == SprintPhase.SET:
        state.feedback = "Set"
        if hip_knee_angle > t["set_hip_knee_angle"] + t["drive_entry_margin"]:
            state.stage = SprintPhase.DRIVE

    if state.stage == SprintPhase.DRIVE:
        if body_lean_angle > t["drive_lean_angle_bad"]:
            state.feedback = "Popping up too fast!"
        elif body_lean_angle < t["drive_lean_angle_good"]:
            state.feedback = "Excellent drive angle!"
        else:
            state.feedback = "Good lean"

        if hip_knee_angle > t["extension_threshold"]:
            state.feedback += " Full Extension!"
            state.counter += 1
            state.stage = SprintPhase.IDLE

    return {"hip_knee_angle": hip_knee_angle, "body_lean_angle": body_lean_angle}
