"""
Live document scan session.

Drives the quality analyzer off a frame source, lets the countdown trigger a
burst capture, then runs recognition and field extraction on the enhanced
frame. One session per scan; the session owns its analyzer state and drops
it when the scan ends.
"""
import argparse
import asyncio
import json
import logging
import time
from typing import Callable, Optional

from config import settings
from .burst import BurstCapture, BurstResult
from .extractor import extract
from .frame_source import CameraFrameSource, FrameSource, SnapshotFrameSource
from .models import QualityState, ValidationResult
from .quality import QualityAnalyzer
from .recognizer import TextRecognizer, build_recognizer

logger = logging.getLogger(__name__)


class ScanSession:

    def __init__(
        self,
        source: FrameSource,
        document_type: str = "unknown",
        recognizer: Optional[TextRecognizer] = None,
        burst: Optional[BurstCapture] = None,
        clock: Callable[[], float] = time.monotonic,
        frame_interval: float = 1 / 60,
        on_state: Optional[Callable[[QualityState], None]] = None,
    ):
        self.source = source
        self.document_type = document_type
        self.recognizer = recognizer
        self.burst = burst or BurstCapture()
        self.frame_interval = frame_interval
        self.on_state = on_state

        self.analyzer = QualityAnalyzer(on_ready=self.trigger_capture, clock=clock, auto_tick=True)
        self.burst_result: Optional[BurstResult] = None
        self.captured_image: Optional[bytes] = None
        self.scanning = False
        self._stop_requested = False
        self._capture_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> QualityState:
        return self.analyzer.state

    async def run(self) -> Optional[ValidationResult]:
        """
        Analyze frames until a capture fires, then return its result.
        Returns None if the scan is stopped before any capture.
        """
        self.scanning = True
        self._stop_requested = False
        self._capture_task = None
        self.analyzer.reset()
        logger.info(f"Scan started for {self.document_type}")

        try:
            while self._capture_task is None and not self._stop_requested:
                if self.analyzer.due():
                    frame = await asyncio.to_thread(self.source.get_frame)
                    # a capture or stop may have landed while the grab was in flight
                    if self._capture_task is not None or self._stop_requested:
                        break
                    self.analyzer.update(frame)
                    if self.on_state:
                        self.on_state(self.analyzer.state)
                await asyncio.sleep(self.frame_interval)

            if self._capture_task is None:
                logger.info("Scan stopped without capture")
                return None
            return await self._capture_task
        finally:
            if self._capture_task is not None and not self._capture_task.done():
                self._capture_task.cancel()
            self.scanning = False
            self.analyzer.reset()

    def trigger_capture(self) -> None:
        """Start the burst capture (countdown fire or explicit user action)"""
        if self._capture_task is not None:
            return
        # live analysis stops ticking once a capture task exists
        clarity_score = self.analyzer.state.clarity_score
        self._capture_task = asyncio.get_running_loop().create_task(self._capture(clarity_score))

    def stop(self) -> None:
        self._stop_requested = True
        self.analyzer.countdown.cancel()

    async def _capture(self, clarity_score: float) -> ValidationResult:
        logger.info("Capture triggered, starting burst")
        self.burst_result = await self.burst.capture(self.source.get_frame)
        self.captured_image = self.burst_result.to_jpeg()

        if self.recognizer is None:
            self.recognizer = build_recognizer()
        text = await asyncio.to_thread(self.recognizer.recognize, self.captured_image)
        return extract(text, self.document_type, clarity_score=clarity_score)


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Scan a document from a live camera")
    parser.add_argument("--document-type", default="unknown")
    parser.add_argument("--camera", type=int, default=None, help="OpenCV camera index")
    parser.add_argument("--snapshot-url", default=None, help="HTTP JPEG snapshot URL")
    parser.add_argument("--save", default=None, help="Write the enhanced capture here")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.LOG_LEVEL)

    if args.snapshot_url:
        source = SnapshotFrameSource(args.snapshot_url)
    else:
        source = CameraFrameSource(args.camera)

    def report(state: QualityState) -> None:
        logger.info(
            f"clarity={state.clarity_score:.0f} lighting={state.lighting} "
            f"warnings={[w.type for w in state.warnings]} countdown={state.countdown.remaining}"
        )

    session = ScanSession(source, document_type=args.document_type, on_state=report)
    try:
        result = asyncio.run(session.run())
    finally:
        source.release()

    if args.save and session.captured_image:
        with open(args.save, "wb") as f:
            f.write(session.captured_image)
    if result is not None:
        print(json.dumps(result.to_dict(), indent=2))


if __name__ == "__main__":
    main()
