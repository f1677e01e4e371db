"""
Tests for selfie auto-capture readiness.
"""
import pytest

from pipeline.face_readiness import FaceConditions, FaceReadiness, guidance, is_face_ready


def good_conditions(**changes):
    values = dict(
        face_detected=True,
        lighting="good",
        centered=True,
        distance="good",
        angle="good",
        quality_score=90,
    )
    values.update(changes)
    return FaceConditions(**values)


class TestFaceReady:

    def test_all_good(self):
        assert is_face_ready(good_conditions())

    def test_quality_threshold_is_inclusive(self):
        assert is_face_ready(good_conditions(quality_score=75))
        assert not is_face_ready(good_conditions(quality_score=74))

    @pytest.mark.parametrize("change", [
        {"face_detected": False},
        {"lighting": "low"},
        {"centered": False},
        {"distance": "too-far"},
        {"angle": "left"},
    ])
    def test_failing_condition(self, change):
        assert not is_face_ready(good_conditions(**change))

    def test_unknown_angle_rejected(self):
        with pytest.raises(ValueError):
            FaceConditions(angle="sideways")


class TestGuidance:

    def test_no_face(self):
        assert guidance(FaceConditions()) == ["Position your face in the frame"]

    def test_angle_and_distance_prompts(self):
        prompts = guidance(good_conditions(angle="down", distance="too-close"))
        assert prompts == ["Raise your chin", "Move back slightly"]

    def test_ready_face_needs_no_prompts(self):
        assert guidance(good_conditions()) == []


class TestFaceReadiness:

    def test_ready_face_starts_countdown_and_fires(self):
        captures = []
        readiness = FaceReadiness(on_capture=lambda: captures.append(1))
        assert readiness.update(good_conditions())
        assert readiness.countdown.phase == "counting"
        for _ in range(3):
            readiness.countdown.advance()
        assert captures == [1]

    def test_face_turning_away_cancels(self):
        readiness = FaceReadiness(on_capture=lambda: None)
        readiness.update(good_conditions())
        assert not readiness.update(good_conditions(angle="right"))
        assert readiness.countdown.phase == "idle"

    def test_retake_resets(self):
        captures = []
        readiness = FaceReadiness(on_capture=lambda: captures.append(1))
        readiness.update(good_conditions())
        for _ in range(3):
            readiness.countdown.advance()
        readiness.retake()
        assert readiness.countdown.phase == "idle"
        assert not readiness.ready


class TestPackageExports:

    def test_face_readiness_is_exported(self):
        import pipeline
        assert pipeline.FaceReadiness is FaceReadiness
        assert pipeline.FaceConditions is FaceConditions
