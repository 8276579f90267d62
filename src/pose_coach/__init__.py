"""
Pose-based exercise coaching: turns per-frame body landmarks into phase,
rep count and corrective feedback.
"""

from .exercise_analysis import (
    AnalysisResult,
    ConfigurationError,
    ExerciseAnalyzer,
    ExerciseKind,
    ExerciseNotImplementedError,
    LandmarkFrame,
    Point,
    PoseCoachError,
    PoseLandmark,
    Side,
)
from .trainer import FormTrainer

__all__ = [
    'AnalysisResult',
    'ConfigurationError',
    'ExerciseAnalyzer',
    'ExerciseKind',
    'ExerciseNotImplementedError',
    'FormTrainer',
    'LandmarkFrame',
    'Point',
    'PoseCoachError',
    'PoseLandmark',
    'Side',
]
