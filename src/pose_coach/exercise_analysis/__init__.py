"""
Exercise analysis package: landmark stabilization and per-exercise form state machines.
"""

from .base_analyzer import (
    EXERCISE_REGISTRY,
    AnalysisResult,
    AnalyzerState,
    ExerciseAnalyzer,
    ExerciseDefinition,
    ExerciseKind,
    register_exercise,
)
from .errors import ConfigurationError, ExerciseNotImplementedError, PoseCoachError
from .landmarks import LandmarkFrame, Point, PoseLandmark
from .pose_utils import calculate_angle, calculate_distance, calculate_vertical_angle
from .side_arbiter import Side, SideArbiter, is_side_visible
from .stability_gate import GateDecision, GateReason, StabilityGate

# Importing the analyzers registers their transitions
from .squat_analyzer import SquatPhase, squat_transition
from .sprint_start_analyzer import SprintPhase, sprint_start_transition
from .rowing_analyzer import RowingPhase, rowing_transition
from .pose_tracking_analyzer import pose_tracking_transition

__all__ = [
    'EXERCISE_REGISTRY',
    'AnalysisResult',
    'AnalyzerState',
    'ExerciseAnalyzer',
    'ExerciseDefinition',
    'ExerciseKind',
    'register_exercise',
    'ConfigurationError',
    'ExerciseNotImplementedError',
    'PoseCoachError',
    'LandmarkFrame',
    'Point',
    'PoseLandmark',
    'calculate_angle',
    'calculate_distance',
    'calculate_vertical_angle',
    'Side',
    'SideArbiter',
    'is_side_visible',
    'GateDecision',
    'GateReason',
    'StabilityGate',
    'SquatPhase',
    'SprintPhase',
    'RowingPhase',
    'squat_transition',
    'sprint_start_transition',
    'rowing_transition',
    'pose_tracking_transition',
]
