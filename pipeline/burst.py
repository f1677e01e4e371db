"""
Burst capture: grab a few full-resolution frames, keep the sharpest one and
contrast-stretch it for text recognition.
"""
import asyncio
import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from config import settings
from .frame import Frame

logger = logging.getLogger(__name__)


@dataclass
class BurstResult:
    frames: List[Frame]
    scores: List[float]
    best_index: int
    enhanced: Frame
    metadata: dict = field(default_factory=dict)

    @property
    def best_frame(self) -> Frame:
        return self.frames[self.best_index]

    def to_jpeg(self, quality: Optional[int] = None) -> bytes:
        return self.enhanced.to_jpeg(quality or settings.JPEG_QUALITY)


def select_best(scores: Sequence[float]) -> int:
    """Index of the strictly highest score; ties keep the earliest frame"""
    if not scores:
        raise ValueError("No frames to choose from")
    best_index = 0
    for idx, score in enumerate(scores):
        if score > scores[best_index]:
            best_index = idx
    return best_index


def enhance(frame: Frame) -> Frame:
    """
    Grayscale via luma, then stretch the luma range to 0-255.
    A flat frame (min == max) is only converted to grayscale.
    """
    luma = frame.luma()
    low, high = float(luma.min()), float(luma.max())
    if high > low:
        luma = (luma - low) * (255.0 / (high - low))
    gray = np.clip(np.rint(luma), 0, 255).astype(np.uint8)
    return Frame(gray)


class BurstCapture:
    """
    Takes BURST_FRAMES frames BURST_DELAY_MS apart and keeps the sharpest.
    The caller pauses live analysis while capture() runs.
    """

    def __init__(self, scorer: Optional[Callable[[Frame], float]] = None):
        self.frame_count = settings.BURST_FRAMES
        self.delay = settings.BURST_DELAY_MS / 1000
        self.stride = settings.BURST_SCORE_STRIDE
        self.scorer = scorer or self.score

    def score(self, frame: Frame) -> float:
        return frame.gradient_sum(self.stride)

    async def capture(self, grab_frame: Callable[[], Frame]) -> BurstResult:
        frames = []
        for idx in range(self.frame_count):
            if idx > 0:
                await asyncio.sleep(self.delay)
            frames.append(await asyncio.to_thread(grab_frame))
        return self.process(frames)

    def process(self, frames: List[Frame]) -> BurstResult:
        """Score, pick and enhance an already captured burst"""
        scores = [self.scorer(frame) for frame in frames]
        best_index = select_best(scores)
        logger.info(
            f"Burst of {len(frames)} frames scored {[round(s, 1) for s in scores]}, "
            f"selected frame {best_index}"
        )
        best = frames[best_index]
        return BurstResult(
            frames=frames,
            scores=scores,
            best_index=best_index,
            enhanced=enhance(best),
            metadata={"width": best.width, "height": best.height},
        )
