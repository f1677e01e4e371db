"""
Frame sources for the live scanner: a local camera through OpenCV and an
HTTP snapshot endpoint (network / ESP32 style cameras).
"""
import logging
from typing import Optional

import cv2
import requests

from config import settings
from .errors import FrameSourceError
from .frame import Frame

logger = logging.getLogger(__name__)


class FrameSource:
    """Anything that can hand out the current frame"""

    def get_frame(self) -> Frame:
        raise NotImplementedError

    def release(self) -> None:
        pass


class CameraFrameSource(FrameSource):
    """OpenCV VideoCapture device"""

    def __init__(
        self,
        camera_index: Optional[int] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ):
        self.camera_index = settings.CAMERA_INDEX if camera_index is None else camera_index
        self.width = width or settings.CAMERA_WIDTH
        self.height = height or settings.CAMERA_HEIGHT
        self.camera: Optional[cv2.VideoCapture] = None

    def open(self) -> None:
        if self.camera is not None:
            return
        camera = cv2.VideoCapture(self.camera_index)
        if not camera.isOpened():
            camera.release()
            raise FrameSourceError(f"camera {self.camera_index}", reason="Failed to open camera device")

        camera.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        camera.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        # Minimal buffer so reads return the latest frame
        camera.set(cv2.CAP_PROP_BUFFERSIZE, 1)
        self.camera = camera

        actual_w = int(camera.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_h = int(camera.get(cv2.CAP_PROP_FRAME_HEIGHT))
        logger.info(f"Camera {self.camera_index} opened at {actual_w}x{actual_h}")

    def get_frame(self) -> Frame:
        self.open()
        ok, image = self.camera.read()
        if not ok or image is None:
            raise FrameSourceError(f"camera {self.camera_index}", reason="Frame read failed")
        return Frame.from_bgr(image)

    def release(self) -> None:
        if self.camera is not None:
            self.camera.release()
            self.camera = None
            logger.info(f"Camera {self.camera_index} released")


class SnapshotFrameSource(FrameSource):
    """Camera exposing the current frame as a JPEG over HTTP"""

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url or settings.SNAPSHOT_URL
        if not self.url:
            raise ValueError("SNAPSHOT_URL is not configured")
        self.timeout = settings.SNAPSHOT_TIMEOUT_SECONDS if timeout is None else timeout
        self.session = requests.Session()

    def get_frame(self) -> Frame:
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            return Frame.from_bytes(response.content)
        except (requests.RequestException, ValueError) as e:
            raise FrameSourceError(self.url, reason=str(e)) from e

    def release(self) -> None:
        self.session.close()
