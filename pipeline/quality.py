import logging
import time
import numpy as np
from dataclasses import replace
from typing import Callable, List, Optional

from config import settings
from .countdown import CaptureCountdown
from .frame import Frame, sample_frame
from .models import AnalysisSample, EdgeFlags, QualityState, ScanWarning

logger = logging.getLogger(__name__)


def classify_lighting(avg_luminance: float) -> str:
    if avg_luminance < settings.LOW_LIGHT_LUMA:
        return "low"
    if avg_luminance > settings.GLARE_LUMA:
        return "high"
    return "good"


def raw_clarity(avg_gradient: float) -> float:
    """Map average gradient onto 0-100 (below 5 is flat, 30+ is sharp)"""
    return min(100.0, max(0.0, (avg_gradient - 5) * 4))


def smooth_clarity(previous: float, raw: float, factor: Optional[float] = None) -> float:
    """First-order low-pass on the clarity score, clamped to 0-100"""
    factor = settings.CLARITY_SMOOTHING if factor is None else factor
    return min(100.0, max(0.0, previous * factor + raw * (1 - factor)))


def is_capture_ready(state: QualityState) -> bool:
    """All five auto-capture conditions must hold at once"""
    return (
        state.edges.all_detected
        and state.clarity_score >= settings.READY_CLARITY_SCORE
        and state.lighting == "good"
        and not state.has_high_warning
        and state.document_detected
    )


class QualityAnalyzer:
    """
    Live capture-quality analysis for the document scanner.

    Each tick downsamples the current frame, measures lighting, sharpness,
    edge activity and text density, updates the smoothed clarity score and
    feeds readiness into the auto-capture countdown.
    """

    def __init__(
        self,
        on_ready: Optional[Callable[[], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        auto_tick: bool = False,
        countdown: Optional[CaptureCountdown] = None,
    ):
        self.analysis_width = settings.ANALYSIS_WIDTH
        self.interval = settings.ANALYSIS_INTERVAL_MS / 1000
        self.stride = settings.SAMPLE_STRIDE
        self.margin_ratio = settings.EDGE_MARGIN_RATIO
        self.edge_threshold = settings.EDGE_ACTIVITY_THRESHOLD
        self.text_contrast = settings.TEXT_CONTRAST_THRESHOLD
        self.text_density_threshold = settings.TEXT_DENSITY_THRESHOLD
        self.blur_warning_score = settings.BLUR_WARNING_SCORE
        self.min_source_width = settings.MIN_SOURCE_WIDTH

        self.clock = clock
        self.state = QualityState(clarity_score=settings.INITIAL_CLARITY_SCORE)
        self.countdown = countdown or CaptureCountdown(
            on_fire=on_ready or (lambda: None),
            is_ready=lambda: self.ready,
            auto_tick=auto_tick,
        )
        self._last_analysis: Optional[float] = None

    @property
    def ready(self) -> bool:
        return is_capture_ready(self.state)

    def tick(self, grab_frame: Callable[[], Frame], now: Optional[float] = None) -> bool:
        """
        Run one analysis if the throttle window has elapsed.
        Returns False without touching the frame source or state otherwise.
        """
        if not self.due(now):
            return False
        self.update(grab_frame())
        return True

    def due(self, now: Optional[float] = None) -> bool:
        """Claim the next analysis slot if the throttle window has elapsed"""
        now = self.clock() if now is None else now
        if self._last_analysis is not None and now - self._last_analysis < self.interval:
            return False
        self._last_analysis = now
        return True

    def update(self, frame: Frame) -> QualityState:
        """Analyze a full-resolution frame and advance the state"""
        sample = self.analyze(sample_frame(frame, self.analysis_width))
        raw = raw_clarity(sample.avg_gradient)
        lighting = classify_lighting(sample.avg_luminance)
        edges = EdgeFlags(**{
            side: activity > self.edge_threshold
            for side, activity in sample.edge_activity.items()
        })
        warnings = self.build_warnings(raw, lighting, edges, frame.width)

        state = QualityState(
            clarity_score=smooth_clarity(self.state.clarity_score, raw),
            lighting=lighting,
            edges=edges,
            warnings=tuple(warnings),
            document_detected=sample.text_density > self.text_density_threshold,
            countdown=self.state.countdown,
        )
        self.state = state
        self.countdown.update(is_capture_ready(state))
        self.state = replace(state, countdown=self.countdown.status)

        logger.debug(
            f"luma={sample.avg_luminance:.1f} gradient={sample.avg_gradient:.1f} "
            f"clarity={self.state.clarity_score:.1f} text={sample.text_density} "
            f"countdown={self.countdown.phase}"
        )
        return self.state

    def analyze(self, frame: Frame) -> AnalysisSample:
        """Measure a frame that is already at analysis resolution"""
        stride = self.stride
        width, height = frame.width, frame.height
        margin_x = int(width * self.margin_ratio)
        margin_y = int(height * self.margin_ratio)

        luma = frame.luma()[::stride, ::stride]
        avg_luminance = float(luma.mean())
        pixel_count = luma.size

        contrast = frame.horizontal_contrast(stride)
        ys, xs = frame.sample_coords(stride)
        rows = ys[:, None]
        cols = xs[:-1][None, :]
        avg_gradient = float(contrast.sum()) / pixel_count

        center = (
            (rows > margin_y) & (rows < height - margin_y)
            & (cols > margin_x) & (cols < width - margin_x)
        )
        text_density = int(np.count_nonzero((contrast > self.text_contrast) & center))

        strips = {
            "top": rows < margin_y,
            "bottom": rows > height - margin_y,
            "left": cols < margin_x,
            "right": cols > width - margin_x,
        }
        strip_pixels = {
            "top": width * margin_y / stride ** 2,
            "bottom": width * margin_y / stride ** 2,
            "left": height * margin_x / stride ** 2,
            "right": height * margin_x / stride ** 2,
        }
        edge_activity = {}
        for side, mask in strips.items():
            area = strip_pixels[side]
            total = float((contrast * mask).sum())
            edge_activity[side] = total / area if area > 0 else 0.0

        return AnalysisSample(
            avg_luminance=avg_luminance,
            avg_gradient=avg_gradient,
            edge_activity=edge_activity,
            text_density=text_density,
        )

    def build_warnings(
        self, raw_score: float, lighting: str, edges: EdgeFlags, source_width: int
    ) -> List[ScanWarning]:
        warnings = []

        if raw_score < self.blur_warning_score:
            warnings.append(ScanWarning(
                type="blur",
                severity="high" if lighting == "low" else "medium",
                message="Image is blurry",
            ))

        if lighting == "low":
            warnings.append(ScanWarning(type="lighting", severity="high", message="Too dark"))
        elif lighting == "high":
            warnings.append(ScanWarning(type="glare", severity="medium", message="Potential glare"))

        if not edges.all_detected:
            warnings.append(ScanWarning(type="alignment", severity="low", message="Align edges"))

        if source_width < self.min_source_width:
            warnings.append(ScanWarning(type="resolution", severity="medium", message="Low resolution"))

        return warnings

    def reset(self) -> None:
        """Fresh state for a new scan"""
        self.countdown.reset()
        self.state = QualityState(clarity_score=settings.INITIAL_CLARITY_SCORE)
        self._last_analysis = None
