"""
Frame abstraction over an RGB pixel buffer, plus the frame sampler that
shrinks live frames to the analysis resolution.
"""
import math
import cv2
import numpy as np
from typing import Tuple

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])


class Frame:
    """
    RGB frame (height x width x 3, uint8).
    Strided sampling helpers keep index arithmetic out of the scoring code.
    """

    def __init__(self, pixels: np.ndarray):
        if pixels.ndim == 2:
            pixels = np.stack([pixels] * 3, axis=-1)
        if pixels.ndim != 3 or pixels.shape[2] < 3:
            raise ValueError(f"Expected an HxWx3 pixel buffer, got shape {pixels.shape}")
        self.pixels = np.ascontiguousarray(pixels[:, :, :3], dtype=np.uint8)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @classmethod
    def from_bgr(cls, image: np.ndarray) -> "Frame":
        """Wrap an OpenCV BGR image"""
        return cls(cv2.cvtColor(image, cv2.COLOR_BGR2RGB))

    @classmethod
    def from_bytes(cls, data: bytes) -> "Frame":
        """Decode an encoded image (JPEG/PNG/...)"""
        img_array = np.frombuffer(data, dtype=np.uint8)
        img = cv2.imdecode(img_array, cv2.IMREAD_COLOR)
        if img is None:
            raise ValueError("Image could not be decoded")
        return cls.from_bgr(img)

    def luma(self) -> np.ndarray:
        """Per-pixel luma as float (0-255)"""
        return self.pixels.astype(np.float64) @ LUMA_WEIGHTS

    def sample_grid(self, stride: int) -> np.ndarray:
        """Pixels at every `stride`-th row and column"""
        return self.pixels[::stride, ::stride]

    def sample_coords(self, stride: int) -> Tuple[np.ndarray, np.ndarray]:
        """Row and column coordinates of the sampled grid"""
        return np.arange(0, self.height, stride), np.arange(0, self.width, stride)

    def horizontal_contrast(self, stride: int) -> np.ndarray:
        """
        Channel-summed |difference| between each sampled pixel and the pixel
        `stride` positions to its right.

        Returns an array of shape (sampled rows, sampled columns - 1): only
        columns whose right neighbour lies inside the frame have a value,
        which is every sampled column except the last.
        """
        grid = self.sample_grid(stride).astype(np.int16)
        return np.abs(grid[:, :-1] - grid[:, 1:]).sum(axis=2)

    def gradient_sum(self, stride: int) -> float:
        """Total horizontal contrast over the strided grid"""
        return float(self.horizontal_contrast(stride).sum())

    def to_jpeg(self, quality: int = 90) -> bytes:
        bgr = cv2.cvtColor(self.pixels, cv2.COLOR_RGB2BGR)
        ok, buffer = cv2.imencode(".jpg", bgr, [cv2.IMWRITE_JPEG_QUALITY, quality])
        if not ok:
            raise ValueError("JPEG encoding failed")
        return buffer.tobytes()


def sample_frame(frame: Frame, width: int = 320) -> Frame:
    """Downsample to a fixed analysis width, keeping the aspect ratio"""
    if frame.width == width:
        return frame
    scale = width / frame.width
    height = max(1, math.floor(frame.height * scale))
    resized = cv2.resize(frame.pixels, (width, height), interpolation=cv2.INTER_AREA)
    return Frame(resized)
