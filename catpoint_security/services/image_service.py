"""Image analysis services that decide whether a picture shows a cat."""

import os
import random
from typing import Any, List, Optional, Tuple

import cv2
import numpy as np

from .interfaces import ImageServiceInterface
from .error_handler import AnalysisFailure
from ..config.defaults import CASCADE_SETTINGS
from ..logging_config import get_logger

logger = get_logger("image_service")


def load_image(source: Any) -> np.ndarray:
    """Decode an image from raw bytes, a file path or an existing array.

    Raises:
        AnalysisFailure: if the source cannot be decoded into an image.
    """
    if isinstance(source, np.ndarray):
        if source.size == 0:
            raise AnalysisFailure("Image array is empty")
        return source

    if isinstance(source, (bytes, bytearray)):
        if not source:
            raise AnalysisFailure("Image data is empty")
        buffer = np.frombuffer(bytes(source), dtype=np.uint8)
        image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
        if image is None:
            raise AnalysisFailure("Image data could not be decoded")
        return image

    if isinstance(source, (str, os.PathLike)):
        image = cv2.imread(os.fspath(source), cv2.IMREAD_COLOR)
        if image is None:
            raise AnalysisFailure(f"Image file could not be read: {source}")
        return image

    raise AnalysisFailure(f"Unsupported image type: {type(source).__name__}")


class FakeImageService(ImageServiceInterface):
    """Returns a random verdict. Useful for demos without a camera."""

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def image_contains_cat(self, image: Any, confidence_threshold: float) -> bool:
        detected = self._random.random() < 0.5
        logger.debug(f"Fake analysis verdict: {detected}")
        return detected


class OpenCVImageService(ImageServiceInterface):
    """Local cat detection using an OpenCV Haar cascade.

    Each cascade hit carries a level weight; weights are scaled into a 0..1
    confidence and compared against the caller's threshold.
    """

    def __init__(self,
                 cascade_path: Optional[str] = None,
                 scale_factor: float = CASCADE_SETTINGS["scale_factor"],
                 min_neighbors: int = CASCADE_SETTINGS["min_neighbors"],
                 min_size: Tuple[int, int] = CASCADE_SETTINGS["min_size"],
                 max_level_weight: float = CASCADE_SETTINGS["max_level_weight"]):
        self.cascade_path = cascade_path or os.path.join(
            cv2.data.haarcascades, CASCADE_SETTINGS["cascade_file"]
        )
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.min_size = min_size
        self.max_level_weight = max_level_weight
        self._cascade = None

    def image_contains_cat(self, image: Any, confidence_threshold: float) -> bool:
        frame = load_image(image)
        cascade = self._load_cascade()

        try:
            gray = self._preprocess(frame)
            _, _, level_weights = cascade.detectMultiScale3(
                gray,
                scaleFactor=self.scale_factor,
                minNeighbors=self.min_neighbors,
                minSize=self.min_size,
                outputRejectLevels=True
            )
        except cv2.error as e:
            raise AnalysisFailure(f"Cat detection failed: {e}", e) from e

        confidences = self._to_confidences(level_weights)
        detected = any(c >= confidence_threshold for c in confidences)

        logger.debug(f"Cascade found {len(confidences)} candidates, "
                     f"best confidence {max(confidences, default=0.0):.2f}, cat={detected}")
        return detected

    def _load_cascade(self):
        if self._cascade is not None:
            return self._cascade

        cascade = cv2.CascadeClassifier(self.cascade_path)
        if cascade.empty():
            raise AnalysisFailure(f"Failed to load cascade from {self.cascade_path}")

        logger.info(f"Loaded Haar cascade from {self.cascade_path}")
        self._cascade = cascade
        return cascade

    def _preprocess(self, frame: np.ndarray) -> np.ndarray:
        """Convert to equalized grayscale for the cascade."""
        if frame.ndim == 3:
            gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        else:
            gray = frame
        if gray.dtype != np.uint8:
            gray = cv2.convertScaleAbs(gray)
        return cv2.equalizeHist(gray)

    def _to_confidences(self, level_weights: Any) -> List[float]:
        weights = np.asarray(level_weights, dtype=float).ravel()
        return [float(min(1.0, max(0.0, w / self.max_level_weight))) for w in weights]


def create_image_service(backend: str = "opencv",
                         cascade_path: Optional[str] = None) -> ImageServiceInterface:
    """Build the image service named by the configuration."""
    if backend == "fake":
        return FakeImageService()
    if backend == "opencv":
        return OpenCVImageService(cascade_path=cascade_path)
    raise ValueError(f"Unknown image backend: {backend}")
