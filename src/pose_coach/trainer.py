from typing import Any, Dict, Iterable, Optional

from .exercise_analysis import AnalysisResult, ExerciseAnalyzer, ExerciseKind
from .exercise_analysis.log_utils import get_logger

logger = get_logger(__name__)


class FormTrainer:
    """
    Session facade for one tracked subject.

    The caller feeds the landmark list produced by the pose model for each
    camera frame; rendering and speech are left to the caller, which reads
    the returned AnalysisResult.
    """

    def __init__(self, exercise_type=ExerciseKind.SQUAT, **analyzer_options: Any):
        """
        Initialize the trainer.

        Args:
            exercise_type: Type of exercise to analyze
            analyzer_options: Forwarded to ExerciseAnalyzer (thresholds, clock, ...)
        """
        self._analyzer_options = analyzer_options
        self.exercise_analyzer = ExerciseAnalyzer(exercise_type, **analyzer_options)
        self.last_result: Optional[AnalysisResult] = None

    @property
    def exercise(self) -> ExerciseKind:
        return self.exercise_analyzer.kind

    def process_landmarks(self, landmarks: Iterable[Any]) -> AnalysisResult:
        """
        Process the landmarks of a single frame.

        Args:
            landmarks: Landmark list from the pose model

        Returns:
            AnalysisResult for the frame
        """
        result = self.exercise_analyzer.update(landmarks)
        if self.last_result is not None and result.feedback != self.last_result.feedback:
            logger.debug(f"[{result.stage}] {result.feedback}")
        self.last_result = result
        return result

    def switch_exercise(self, exercise_type) -> None:
        """Start a new session for a different exercise; the old counter is dropped."""
        self.exercise_analyzer = ExerciseAnalyzer(exercise_type, **self._analyzer_options)
        self.last_result = None
        logger.info(f"Switched exercise to {self.exercise_analyzer.get_exercise_name()}")

    def reset(self) -> None:
        self.exercise_analyzer.reset()
        self.last_result = None

    def summary(self) -> Dict[str, Any]:
        state = self.exercise_analyzer.state
        return {
            "exercise": self.exercise_analyzer.get_exercise_name(),
            "counter": state.counter,
            "stage": state.stage,
            "feedback": state.feedback,
        }
