import time
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from .config_utils import get_exercise_thresholds, get_stability_settings, load_exercise_config
from .errors import ConfigurationError, ExerciseNotImplementedError
from .feedback import FeedbackGenerator
from .landmarks import LandmarkFrame
from .log_utils import get_logger
from .side_arbiter import Side, SideArbiter
from .stability_gate import GateDecision, StabilityGate

logger = get_logger(__name__)


class ExerciseKind(Enum):
    """Exercises the analyzer knows how to judge; values name their config section."""
    SQUAT = "squat"
    SPRINT_START = "sprint_start"
    ROWING = "rowing"
    POSE_TRACKING = "pose_tracking"


@dataclass(frozen=True)
class ExerciseDefinition:
    """Constant per-exercise data: phases, required landmarks and thresholds."""
    kind: ExerciseKind
    stages: Tuple[str, ...]
    initial_stage: str
    left_landmarks: Tuple[int, ...]  # required landmarks, in the order the transition unpacks them
    right_landmarks: Tuple[int, ...]
    threshold_names: Tuple[str, ...] = ()
    thresholds: Mapping[str, float] = field(default_factory=dict)

    def landmarks_for(self, side: Side) -> Tuple[int, ...]:
        if side == Side.LEFT:
            return self.left_landmarks
        if side == Side.RIGHT:
            return self.right_landmarks
        raise ValueError("No landmarks for Side.NONE")

    def with_thresholds(self, thresholds: Mapping[str, float]) -> "ExerciseDefinition":
        return replace(self, thresholds=MappingProxyType(dict(thresholds)))


@dataclass
class AnalyzerState:
    """Mutable session state for one tracked subject."""
    stage: str
    counter: int = 0
    feedback: str = ""
    active_side: Side = Side.NONE
    baseline_side: Side = Side.NONE  # side that established last_valid_frame
    detection_start_time: Optional[float] = None
    last_valid_frame: Optional[LandmarkFrame] = None
    memory: Dict[str, float] = field(default_factory=dict)  # exercise-private values, e.g. catch positions


@dataclass(frozen=True)
class AnalysisResult:
    """Read-only snapshot returned from every update call."""
    exercise: str
    counter: int
    stage: str
    feedback: str
    side: str
    extras: Mapping[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "counter": self.counter,
            "stage": self.stage,
            "feedback": self.feedback,
            "side": self.side,
        }
        result.update(self.extras)
        return result


TransitionFn = Callable[[LandmarkFrame, Side, AnalyzerState, ExerciseDefinition], Dict[str, float]]

# --- Exercise Registry ---
EXERCISE_REGISTRY: Dict[ExerciseKind, Tuple[ExerciseDefinition, Optional[TransitionFn]]] = {}


def register_exercise(definition: ExerciseDefinition):
    def decorator(fn):
        EXERCISE_REGISTRY[definition.kind] = (definition, fn)
        return fn
    return decorator


def _resolve_kind(exercise) -> ExerciseKind:
    if isinstance(exercise, ExerciseKind):
        return exercise
    try:
        return ExerciseKind(str(exercise).lower())
    except ValueError:
        raise ExerciseNotImplementedError(f"Unsupported exercise type: {exercise}") from None


class ExerciseAnalyzer:
    """
    Per-subject analysis pipeline.

    Each update call runs landmark normalization, side arbitration, the
    stability gate and, if the frame is accepted, the exercise transition,
    then returns a fresh AnalysisResult. update never raises; bad frames
    degrade to guidance feedback instead.
    """

    def __init__(
        self,
        exercise=ExerciseKind.SQUAT,
        thresholds: Optional[Mapping[str, float]] = None,
        visibility_threshold: Optional[float] = None,
        grace_period_ms: Optional[float] = None,
        velocity_threshold: Optional[float] = None,
        config: Optional[Dict[str, Any]] = None,
        config_path: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the analyzer with configuration parameters.

        Args:
            exercise: ExerciseKind or its name (e.g. "squat")
            thresholds: Optional per-instance overrides of the exercise thresholds
            visibility_threshold: Minimum landmark visibility for a side to be trackable
            grace_period_ms: Delay after detection before any exercise judgment
            velocity_threshold: Max primary-hip displacement between accepted frames
            config: Already loaded configuration dict (skips file loading)
            config_path: Alternative JSON configuration file
            clock: Wall-clock source in seconds

        Raises:
            ExerciseNotImplementedError: exercise is unknown or has no transition logic
            ConfigurationError: configuration is missing or invalid
        """
        self.kind = _resolve_kind(exercise)
        entry = EXERCISE_REGISTRY.get(self.kind)
        if entry is None or not callable(entry[1]):
            raise ExerciseNotImplementedError(f"No transition logic registered for '{self.kind.value}'")
        definition, self._transition = entry
        if definition.initial_stage not in definition.stages:
            raise ExerciseNotImplementedError(
                f"Initial stage '{definition.initial_stage}' of '{self.kind.value}' is not one of its stages"
            )

        if config is None:
            config = load_exercise_config(config_path)
        merged = get_exercise_thresholds(config, self.kind.value)
        merged.update(thresholds or {})
        missing = [name for name in definition.threshold_names if name not in merged]
        if missing:
            raise ConfigurationError(f"Missing thresholds for '{self.kind.value}': {', '.join(missing)}")
        self.definition = definition.with_thresholds(merged)

        stability = get_stability_settings(config)
        if visibility_threshold is not None:
            stability["visibility_threshold"] = visibility_threshold
        if grace_period_ms is not None:
            stability["grace_period_ms"] = grace_period_ms
        if velocity_threshold is not None:
            stability["velocity_threshold"] = velocity_threshold

        self.arbiter = SideArbiter(
            definition.left_landmarks,
            definition.right_landmarks,
            visibility_threshold=float(stability["visibility_threshold"]),
        )
        self.gate = StabilityGate(
            grace_period_ms=float(stability["grace_period_ms"]),
            velocity_threshold=float(stability["velocity_threshold"]),
        )
        self._clock = clock
        self.state = AnalyzerState(stage=definition.initial_stage)
        logger.debug(f"Analyzer ready for {self.kind.value} with thresholds {dict(merged)}")

    def get_exercise_name(self) -> str:
        return self.kind.value

    def reset(self) -> None:
        """Start a fresh session: zero the counter and forget all tracking state."""
        self.state = AnalyzerState(stage=self.definition.initial_stage)
        logger.info(f"{self.kind.value} session reset")

    def update(self, landmarks: Iterable[Any]) -> AnalysisResult:
        """
        Analyze a single frame.

        Args:
            landmarks: Upstream landmark list (position = landmark index) or an
                index -> point mapping

        Returns:
            AnalysisResult built from the post-transition state
        """
        frame = self._to_frame(landmarks)
        side = self.arbiter.apply(frame, self.state)
        if side == Side.NONE:
            return self.get_results()

        decision: GateDecision = self.gate.evaluate(frame, side, self.state, self._clock())
        if not decision.passed:
            logger.debug(f"Frame held back by stability gate: {decision.reason.value}")
            return self.get_results()
        return self.get_results(self._run_transition(frame, side))

    def get_results(self, extras: Optional[Mapping[str, float]] = None) -> AnalysisResult:
        return AnalysisResult(
            exercise=self.kind.value,
            counter=self.state.counter,
            stage=self.state.stage,
            feedback=self.state.feedback,
            side=self.state.active_side.value,
            extras=MappingProxyType(dict(extras or {})),
        )

    def _to_frame(self, landmarks) -> LandmarkFrame:
        try:
            return LandmarkFrame.from_points(landmarks)
        except Exception as e:
            logger.warning(f"Discarding unreadable landmark input: {e!r}")
            return LandmarkFrame()

    def _run_transition(self, frame: LandmarkFrame, side: Side) -> Dict[str, float]:
        counter_before = self.state.counter
        stage_before = self.state.stage
        memory_before = dict(self.state.memory)
        try:
            extras = self._transition(frame, side, self.state, self.definition) or {}
            if self.state.stage not in self.definition.stages:
                raise ValueError(f"Unknown stage '{self.state.stage}'")
        except Exception as e:
            logger.warning(f"{self.kind.value} transition failed: {e}")
            logger.debug("Transition failure details", exc_info=True)
            self.state.counter = counter_before
            self.state.stage = stage_before
            self.state.memory = memory_before
            self.state.feedback = FeedbackGenerator.form_unreadable()
            return {}
        if self.state.counter != counter_before:
            logger.info(f"{self.kind.value} rep {self.state.counter} completed ({side.value} side)")
        return extras
