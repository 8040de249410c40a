import logging
import os
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from .detector import DetectorHandle
from .errors import ImageDecodeError
from .landmarks import extract_facial_features, serialize_landmarks
from .rules import PhysiognomyEngine
from .schemas import FacialLandmarks, LandmarkOverlay, PhysiognomyResults

logger = logging.getLogger(__name__)


@dataclass
class AnalysisOutcome:
    landmarks: FacialLandmarks
    overlay: LandmarkOverlay
    results: PhysiognomyResults


class FaceAnalyzer:
    """
    관상 분석 시스템의 Facade 클래스.
    이미지 → 68점 랜드마크 → 부위별 그룹 → 규칙 엔진
    """

    def __init__(self, handle: DetectorHandle, engine: Optional[PhysiognomyEngine] = None):
        self.handle = handle
        self.engine = engine or PhysiognomyEngine()

    def analyze_image(self, image_path: str, gender: Optional[str] = None) -> AnalysisOutcome:
        if not os.path.exists(image_path):
            raise ImageDecodeError(f"파일을 찾을 수 없습니다: {image_path}")

        img = cv2.imread(image_path)
        if img is None:
            raise ImageDecodeError()

        return self.analyze_from_array(img, gender=gender)

    def analyze_bytes(self, data: bytes, gender: Optional[str] = None) -> AnalysisOutcome:
        nparr = np.frombuffer(data, np.uint8)
        img = cv2.imdecode(nparr, cv2.IMREAD_COLOR) if nparr.size else None
        if img is None:
            raise ImageDecodeError()

        return self.analyze_from_array(img, gender=gender)

    def analyze_from_array(
        self, img_bgr: np.ndarray, gender: Optional[str] = None
    ) -> AnalysisOutcome:
        """
        img_bgr: OpenCV BGR image
        """
        # 1. Detect Landmarks (raises on no face / multiple faces)
        points = self.handle.detect(img_bgr)

        # 2. Group into facial regions
        landmarks = extract_facial_features(points)

        # 3. Physiognomy rules
        results = self.engine.analyze(landmarks, gender=gender)
        logger.debug(
            "Analysis done: animal=%s balance=%d",
            results.animal_face.primary_animal,
            results.overall.balance,
        )

        return AnalysisOutcome(
            landmarks=landmarks,
            overlay=serialize_landmarks(points),
            results=results,
        )
