import dataclasses
import json

import pytest

from pose_coach.exercise_analysis import (
    EXERCISE_REGISTRY,
    ConfigurationError,
    ExerciseAnalyzer,
    ExerciseKind,
    ExerciseNotImplementedError,
)
from pose_coach.exercise_analysis.config_utils import load_exercise_config
from pose_coach.exercise_analysis import base_analyzer

from pose_factory import RIGHT, FakeClock, squat_frame, warm_up


class ExplodingLandmark:
    @property
    def x(self):
        raise RuntimeError("tracker went away")

    y = 0.5


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def analyzer(clock):
    return ExerciseAnalyzer(ExerciseKind.SQUAT, clock=clock)


class TestConstruction:
    def test_accepts_exercise_name(self, clock):
        assert ExerciseAnalyzer("sprint_start", clock=clock).kind == ExerciseKind.SPRINT_START
        assert ExerciseAnalyzer("ROWING", clock=clock).state.stage == "CATCH"

    def test_unknown_exercise_fails_at_construction(self):
        with pytest.raises(ExerciseNotImplementedError):
            ExerciseAnalyzer("bench_press")

    def test_initial_stage_must_be_declared(self, monkeypatch):
        definition, transition = EXERCISE_REGISTRY[ExerciseKind.SQUAT]
        broken = dataclasses.replace(definition, initial_stage="SIDEWAYS")
        monkeypatch.setitem(EXERCISE_REGISTRY, ExerciseKind.SQUAT, (broken, transition))
        with pytest.raises(ExerciseNotImplementedError):
            ExerciseAnalyzer(ExerciseKind.SQUAT)

    def test_missing_transition_fails_at_construction(self, monkeypatch):
        definition, _ = EXERCISE_REGISTRY[ExerciseKind.POSE_TRACKING]
        monkeypatch.setitem(EXERCISE_REGISTRY, ExerciseKind.POSE_TRACKING, (definition, None))
        with pytest.raises(ExerciseNotImplementedError):
            ExerciseAnalyzer(ExerciseKind.POSE_TRACKING)

    def test_missing_threshold_in_config(self):
        config = load_exercise_config()
        del config["exercises"]["squat"]["thresholds"]["up_threshold"]
        with pytest.raises(ConfigurationError):
            ExerciseAnalyzer("squat", config=config)

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ExerciseAnalyzer("squat", config_path=str(tmp_path / "nope.json"))

    def test_non_numeric_threshold(self, tmp_path):
        config = load_exercise_config()
        config["exercises"]["squat"]["thresholds"]["depth_threshold"] = "deep"
        path = tmp_path / "config.json"
        path.write_text(json.dumps(config))
        with pytest.raises(ConfigurationError):
            ExerciseAnalyzer("squat", config_path=str(path))

    def test_overrides(self, clock):
        analyzer = ExerciseAnalyzer("squat", thresholds={"depth_threshold": 100}, grace_period_ms=0,
                                    velocity_threshold=0.2, visibility_threshold=0.3, clock=clock)
        assert analyzer.definition.thresholds["depth_threshold"] == 100
        assert analyzer.definition.thresholds["up_threshold"] == 160
        assert analyzer.gate.grace_period_ms == 0
        assert analyzer.gate.velocity_threshold == 0.2
        assert analyzer.arbiter.visibility_threshold == 0.3

    def test_defaults_from_shipped_config(self, analyzer):
        assert analyzer.gate.grace_period_ms == 1500
        assert analyzer.gate.velocity_threshold == 0.1
        assert analyzer.arbiter.visibility_threshold == 0.6


class TestUpdate:
    def test_invisible_body_leaves_stage_and_counter(self, analyzer, clock):
        frame = squat_frame(170)
        warm_up(analyzer, clock, frame)
        analyzer.update(squat_frame(80))
        before = analyzer.state.stage, analyzer.state.counter
        for raw in ([], [None] * 33, squat_frame(170)[:20]):
            result = analyzer.update(raw)
            assert (result.stage, result.counter) == before
            assert result.feedback == "Make sure your full body is visible"
            assert result.side == "none"

    def test_nan_visibility_is_not_trackable(self, analyzer):
        frame = squat_frame(170)
        for point in frame:
            if point is not None:
                point["visibility"] = float("nan")
        result = analyzer.update(frame)
        assert result.side == "none"
        assert result.feedback == "Make sure your full body is visible"

    def test_low_visibility_is_not_trackable(self, analyzer):
        frame = squat_frame(170)
        for point in frame:
            if point is not None:
                point["visibility"] = 0.5
        result = analyzer.update(frame)
        assert result.feedback == "Make sure your full body is visible"

    @pytest.mark.parametrize("garbage", [
        None, 42, "landmarks", [1, 2, 3], [{"x": "a", "y": None}], {"knee": {}},
        {float("inf"): {"x": 0.5, "y": 0.5}}, [ExplodingLandmark()],
    ])
    def test_never_raises_on_garbage(self, analyzer, garbage):
        result = analyzer.update(garbage)
        assert result.counter == 0
        assert result.stage == "UP"
        assert isinstance(result.feedback, str) and result.feedback

    def test_no_logic_before_grace_period(self, analyzer, clock):
        analyzer.update(squat_frame(170))
        for _ in range(10):
            clock.advance(0.1)
            result = analyzer.update(squat_frame(80))
            assert result.stage == "UP"
            assert result.feedback.startswith("Stabilizing")

    def test_transition_failure_becomes_feedback(self, analyzer, clock, monkeypatch):
        def broken(frame, side, state, definition):
            state.counter += 5
            state.stage = "DOWN"
            raise ZeroDivisionError("bad point")

        warm_up(analyzer, clock, squat_frame(170))
        monkeypatch.setattr(analyzer, "_transition", broken)
        result = analyzer.update(squat_frame(170))
        assert result.feedback == "Could not read form. Adjust your position."
        assert result.counter == 0
        assert result.stage == "UP"

    def test_result_is_a_snapshot(self, analyzer, clock):
        warm_up(analyzer, clock, squat_frame(170))
        result = analyzer.update(squat_frame(170))
        with pytest.raises(AttributeError):
            result.counter = 10
        with pytest.raises(TypeError):
            result.extras["knee_angle"] = 1.0
        analyzer.update(squat_frame(80))
        assert result.stage == "UP"
        assert set(result.to_dict()) == {"counter", "stage", "feedback", "side", "knee_angle", "torso_angle"}

    def test_side_switch_holds_one_frame(self, analyzer, clock):
        warm_up(analyzer, clock, squat_frame(170))
        assert analyzer.update(squat_frame(170)).side == "left"
        result = analyzer.update(squat_frame(80, side=RIGHT))
        assert result.feedback == "Switched tracking side. Hold."
        assert result.side == "right"
        assert result.stage == "UP"
        assert analyzer.update(squat_frame(80, side=RIGHT)).feedback == "Tracking stable. Begin."
        assert analyzer.update(squat_frame(80, side=RIGHT)).stage == "DOWN"

    def test_reset(self, analyzer, clock):
        warm_up(analyzer, clock, squat_frame(170))
        analyzer.update(squat_frame(80))
        analyzer.update(squat_frame(170))
        assert analyzer.state.counter == 1
        analyzer.reset()
        assert analyzer.state.counter == 0
        assert analyzer.state.detection_start_time is None

    def test_instances_do_not_share_state(self, clock):
        first = ExerciseAnalyzer("squat", clock=clock)
        second = ExerciseAnalyzer("squat", clock=clock)
        warm_up(first, clock, squat_frame(170))
        first.update(squat_frame(80))
        assert first.state.stage == "DOWN"
        assert second.state.stage == "UP"
        assert second.state.detection_start_time is None


def test_registry_covers_every_exercise():
    assert set(base_analyzer.EXERCISE_REGISTRY) == set(ExerciseKind)


class TestStages:
    def test_undeclared_stage_is_rolled_back(self, analyzer, clock, monkeypatch):
        def wandering(frame, side, state, definition):
            state.stage = "SIDEWAYS"
            return {}

        warm_up(analyzer, clock, squat_frame(170))
        monkeypatch.setattr(analyzer, "_transition", wandering)
        result = analyzer.update(squat_frame(170))
        assert result.stage == "UP"
        assert result.feedback == "Could not read form. Adjust your position."

    @pytest.mark.parametrize("kind", list(ExerciseKind))
    def test_stage_always_declared(self, kind, clock):
        analyzer = ExerciseAnalyzer(kind, clock=clock)
        stages = analyzer.definition.stages
        assert analyzer.state.stage in stages
        warm_up(analyzer, clock, squat_frame(170))
        for angle in list(range(170, 55, -15)) + list(range(55, 185, 15)):
            result = analyzer.update(squat_frame(angle))
            assert result.stage in stages
