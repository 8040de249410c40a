import logging
import os
from dataclasses import dataclass

import cv2
import numpy as np

from .errors import ModelLoadError, MultipleFacesDetectedError, NoFaceDetectedError
from .landmarks import template_face, to_points_68

logger = logging.getLogger(__name__)


class MediaPipeLandmarkDetector:
    """
    MediaPipe FaceLandmarker (tasks API) wrapper.
    2 faces 까지 검출해서 여러 얼굴이 있는 사진을 거른다.
    """

    def __init__(self, model_path: str):
        # mediapipe 는 무거우므로 실제 모델을 쓸 때만 import 한다
        import mediapipe as mp
        from mediapipe.tasks import python
        from mediapipe.tasks.python import vision

        self._mp = mp
        base_options = python.BaseOptions(model_asset_path=model_path)
        options = vision.FaceLandmarkerOptions(
            base_options=base_options,
            output_face_blendshapes=False,
            output_facial_transformation_matrixes=False,
            num_faces=2,
        )
        self._landmarker = vision.FaceLandmarker.create_from_options(options)

    def detect(self, img_bgr: np.ndarray) -> np.ndarray:
        # MediaPipe expects RGB
        img_rgb = cv2.cvtColor(img_bgr, cv2.COLOR_BGR2RGB)
        mp_image = self._mp.Image(image_format=self._mp.ImageFormat.SRGB, data=img_rgb)

        result = self._landmarker.detect(mp_image)
        faces = result.face_landmarks or []
        if not faces:
            raise NoFaceDetectedError()
        if len(faces) > 1:
            raise MultipleFacesDetectedError()

        return to_points_68(faces[0], img_bgr.shape[:2])

    def close(self) -> None:
        self._landmarker.close()


class TemplateLandmarkDetector:
    """Mock detector: always finds one synthetic face scaled to the image."""

    def detect(self, img_bgr: np.ndarray) -> np.ndarray:
        return template_face(img_bgr.shape[:2])

    def close(self) -> None:
        pass


@dataclass
class DetectorHandle:
    """
    load_detector() 가 돌려주는 핸들. 호출자가 보관하고 유효성을 직접 확인한다.
    """

    detector: object
    model_path: str
    mock: bool = False

    def detect(self, img_bgr: np.ndarray) -> np.ndarray:
        return self.detector.detect(img_bgr)

    def close(self) -> None:
        self.detector.close()


def load_detector(model_path: str = "./face_landmarker.task", use_mock: bool = False) -> DetectorHandle:
    if use_mock:
        logger.info("Using template landmark detector (mock mode)")
        return DetectorHandle(TemplateLandmarkDetector(), model_path, mock=True)

    if not os.path.exists(model_path):
        logger.error("Model file %s not found", model_path)
        raise ModelLoadError()

    try:
        detector = MediaPipeLandmarkDetector(model_path)
    except Exception as e:
        logger.exception("Failed to load MediaPipe model from %s", model_path)
        raise ModelLoadError() from e

    logger.info("MediaPipe FaceLandmarker loaded from %s", model_path)
    return DetectorHandle(detector, model_path)
