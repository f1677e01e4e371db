"""
Tests for the live capture-quality analyzer.
"""
import random
from dataclasses import replace

import pytest

from pipeline.models import EdgeFlags, QualityState, ScanWarning
from pipeline.quality import (
    QualityAnalyzer,
    classify_lighting,
    is_capture_ready,
    raw_clarity,
    smooth_clarity,
)
from conftest import make_flat, make_stripes


ALL_EDGES = EdgeFlags(top=True, bottom=True, left=True, right=True)


def ready_state():
    return QualityState(
        clarity_score=80,
        lighting="good",
        edges=ALL_EDGES,
        warnings=(),
        document_detected=True,
    )


class TestScoring:

    def test_lighting_bands(self):
        assert classify_lighting(10) == "low"
        assert classify_lighting(49.9) == "low"
        assert classify_lighting(50) == "good"
        assert classify_lighting(220) == "good"
        assert classify_lighting(230) == "high"

    def test_raw_clarity_is_clamped(self):
        assert raw_clarity(0) == 0
        assert raw_clarity(5) == 0
        assert raw_clarity(15) == 40
        assert raw_clarity(30) == 100
        assert raw_clarity(500) == 100

    def test_smoothing_blends_previous_and_raw(self):
        assert smooth_clarity(50, 100) == pytest.approx(65)

    def test_smoothing_stays_in_range(self):
        rng = random.Random(7)
        score = 50.0
        for _ in range(200):
            score = smooth_clarity(score, rng.uniform(-50, 150))
            assert 0 <= score <= 100

    def test_constant_input_converges_within_fifteen_ticks(self):
        score = 50.0
        for _ in range(15):
            score = smooth_clarity(score, 100)
        assert abs(score - 100) <= 1


class TestReadiness:

    def test_all_conditions_met(self):
        assert is_capture_ready(ready_state())

    @pytest.mark.parametrize("change", [
        {"edges": EdgeFlags(top=True, bottom=True, left=True, right=False)},
        {"clarity_score": 59.9},
        {"lighting": "low"},
        {"lighting": "high"},
        {"warnings": (ScanWarning("lighting", "high", "Too dark"),)},
        {"document_detected": False},
    ])
    def test_any_failing_condition_blocks_capture(self, change):
        assert not is_capture_ready(replace(ready_state(), **change))

    def test_non_high_warnings_do_not_block(self):
        state = replace(ready_state(), warnings=(
            ScanWarning("resolution", "medium", "Low resolution"),
            ScanWarning("glare", "medium", "Potential glare"),
        ))
        assert is_capture_ready(state)


class TestAnalyzer:

    def test_sharp_frame_measurements(self, stripes):
        sample = QualityAnalyzer().analyze(stripes)
        assert sample.avg_luminance == pytest.approx(130)
        assert raw_clarity(sample.avg_gradient) == 100
        assert all(activity > 12 for activity in sample.edge_activity.values())
        assert sample.text_density > 150

    def test_flat_frame_measurements(self):
        sample = QualityAnalyzer().analyze(make_flat())
        assert sample.avg_gradient == 0
        assert sample.text_density == 0
        assert all(activity == 0 for activity in sample.edge_activity.values())

    def test_ready_frame_starts_countdown(self, stripes):
        analyzer = QualityAnalyzer()
        state = analyzer.update(stripes)

        assert state.clarity_score == pytest.approx(65)
        assert state.lighting == "good"
        assert state.edges.all_detected
        assert state.document_detected
        assert analyzer.ready
        assert state.countdown.phase == "counting"
        assert state.countdown.remaining == 3

    def test_flat_frame_warnings(self):
        state = QualityAnalyzer().update(make_flat())
        types = [w.type for w in state.warnings]
        assert types == ["blur", "alignment", "resolution"]
        assert state.warnings[0].severity == "medium"
        assert not state.document_detected

    def test_dark_frame_is_blocked(self):
        analyzer = QualityAnalyzer()
        state = analyzer.update(make_stripes(low=0, high=80))
        assert state.lighting == "low"
        assert ScanWarning("lighting", "high", "Too dark") in state.warnings
        assert not analyzer.ready
        assert state.countdown.phase == "idle"

    def test_dark_blurry_frame_has_high_blur_warning(self):
        state = QualityAnalyzer().update(make_flat(value=20))
        blur = [w for w in state.warnings if w.type == "blur"]
        assert blur[0].severity == "high"

    def test_glare_warning(self):
        state = QualityAnalyzer().update(make_stripes(low=200, high=255))
        assert state.lighting == "high"
        assert ScanWarning("glare", "medium", "Potential glare") in state.warnings

    def test_full_resolution_frame_has_no_resolution_warning(self, ready_frame):
        state = QualityAnalyzer().update(ready_frame)
        assert state.warnings == ()

    def test_losing_readiness_cancels_countdown(self, stripes):
        analyzer = QualityAnalyzer()
        analyzer.update(stripes)
        analyzer.update(make_flat())
        assert analyzer.countdown.phase == "idle"
        assert analyzer.countdown.cancellations == 1

    def test_state_serializes(self, stripes):
        data = QualityAnalyzer().update(stripes).to_dict()
        assert data["countdown"] == {"phase": "counting", "remaining": 3}
        assert data["edges"]["top"] is True


class TestThrottle:

    def test_ticks_inside_interval_do_nothing(self, stripes):
        grabs = []

        def grab():
            grabs.append(1)
            return stripes

        analyzer = QualityAnalyzer()
        assert analyzer.tick(grab, now=0.0)
        state = analyzer.state

        assert not analyzer.tick(grab, now=0.1)
        assert len(grabs) == 1
        assert analyzer.state is state

        assert analyzer.tick(grab, now=0.25)
        assert len(grabs) == 2

    def test_reset_restores_initial_state(self, stripes):
        analyzer = QualityAnalyzer()
        analyzer.update(stripes)
        analyzer.reset()
        assert analyzer.state.clarity_score == 50
        assert analyzer.countdown.phase == "idle"
        assert analyzer.tick(lambda: stripes, now=0.0)

    def test_due_claims_the_slot_without_a_frame(self):
        analyzer = QualityAnalyzer()
        assert analyzer.due(now=0.0)
        assert not analyzer.due(now=0.05)
        assert analyzer.due(now=0.2)
