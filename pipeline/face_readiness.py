"""
Selfie auto-capture readiness.

Landmark detection happens elsewhere; this module only turns the detector's
observations into a readiness decision and drives the same countdown the
document scanner uses.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from config import settings
from .countdown import CaptureCountdown

logger = logging.getLogger(__name__)

DISTANCES = ("too-close", "too-far", "good")
ANGLES = ("left", "right", "up", "down", "good")

ANGLE_PROMPTS = {
    "left": "Turn slightly right",
    "right": "Turn slightly left",
    "up": "Lower your chin",
    "down": "Raise your chin",
}

DISTANCE_PROMPTS = {
    "too-close": "Move back slightly",
    "too-far": "Move closer",
}


@dataclass(frozen=True)
class FaceConditions:
    face_detected: bool = False
    lighting: str = "good"
    centered: bool = False
    distance: str = "good"
    angle: str = "good"
    quality_score: float = 0

    def __post_init__(self):
        if self.distance not in DISTANCES:
            raise ValueError(f"Unknown face distance: {self.distance}")
        if self.angle not in ANGLES:
            raise ValueError(f"Unknown face angle: {self.angle}")


def is_face_ready(conditions: FaceConditions) -> bool:
    return (
        conditions.face_detected
        and conditions.lighting == "good"
        and conditions.centered
        and conditions.distance == "good"
        and conditions.angle == "good"
        and conditions.quality_score >= settings.FACE_MIN_QUALITY
    )


def guidance(conditions: FaceConditions) -> List[str]:
    """User-facing prompts for whatever is keeping the selfie from being ready"""
    prompts = []
    if not conditions.face_detected:
        prompts.append("Position your face in the frame")
        return prompts
    if conditions.angle in ANGLE_PROMPTS:
        prompts.append(ANGLE_PROMPTS[conditions.angle])
    if conditions.distance in DISTANCE_PROMPTS:
        prompts.append(DISTANCE_PROMPTS[conditions.distance])
    if not conditions.centered:
        prompts.append("Center your face")
    if conditions.lighting == "low":
        prompts.append("Find better lighting")
    elif conditions.lighting == "high":
        prompts.append("Reduce glare")
    return prompts


class FaceReadiness:
    """Feeds face observations into an auto-capture countdown"""

    def __init__(self, on_capture: Callable[[], None], auto_tick: bool = False):
        self.conditions = FaceConditions()
        self.countdown = CaptureCountdown(
            on_fire=on_capture,
            is_ready=lambda: self.ready,
            auto_tick=auto_tick,
        )

    @property
    def ready(self) -> bool:
        return is_face_ready(self.conditions)

    def update(self, conditions: FaceConditions) -> bool:
        self.conditions = conditions
        ready = self.ready
        self.countdown.update(ready)
        return ready

    def retake(self, conditions: Optional[FaceConditions] = None) -> None:
        self.countdown.reset()
        self.conditions = conditions or FaceConditions()
        logger.info("Selfie retake requested")
