from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_serializer

Gender = Literal["male", "female"]


class Point(BaseModel):
    x: float
    y: float


class EyePoints(BaseModel):
    left: List[Point]
    right: List[Point]


class FacialLandmarks(BaseModel):
    """68점 랜드마크를 부위별로 묶은 것 (pixel 좌표)."""

    forehead: List[Point]
    eyes: EyePoints
    nose: List[Point]
    mouth: List[Point]
    chin: List[Point]
    jawline: List[Point]


class Measurements(BaseModel):
    """부위별 측정값. 해당 부위에서 재지 않은 항목은 직렬화에서 빠진다."""

    width: Optional[int] = None
    height: Optional[int] = None
    ratio: Optional[float] = None
    angle: Optional[int] = None
    distance: Optional[int] = None

    @model_serializer(mode="wrap")
    def _drop_unmeasured(self, handler):
        return {k: v for k, v in handler(self).items() if v is not None}


class FeatureAnalysis(BaseModel):
    feature: str  # e.g. "이마 (지혜와 사고력)"
    score: int = Field(..., ge=0, le=100)
    interpretation: str
    meaning: str
    traits: List[str]
    measurements: Measurements
    detailed_analysis: str


class SecondaryAnimal(BaseModel):
    animal: str
    percentage: int
    reason: str


class AnimalFaceAnalysis(BaseModel):
    primary_animal: str
    percentage: int = Field(..., description="60-95")
    characteristics: List[str]
    description: str
    secondary_animals: List[SecondaryAnimal]


class OverallAssessment(BaseModel):
    balance: int
    harmony: int
    summary: str


class DetailedMeasurements(BaseModel):
    face_ratio: float
    eye_distance: int
    nose_to_mouth_ratio: float
    jawline_angle: int
    facial_symmetry: int


class PhysiognomyResults(BaseModel):
    overall: OverallAssessment
    features: List[FeatureAnalysis]  # forehead, eyes, nose, mouth, chin
    recommendations: List[str]
    animal_face: AnimalFaceAnalysis
    detailed_measurements: DetailedMeasurements


class LandmarkOverlay(BaseModel):
    face_box: List[int]  # [x, y, w, h]
    chin_line: List[List[int]]  # [[x,y], [x,y]]
    left_eye_line: List[List[int]]
    right_eye_line: List[List[int]]
    all_points: List[List[int]]


# --- Persistence ---


class AnalysisCreate(BaseModel):
    image_url: str = Field(..., min_length=1)
    gender: Optional[Gender] = None
    # 저장 시에는 구조만 확인하고 내용은 그대로 보관한다
    facial_landmarks: Dict[str, Any]
    analysis_results: Dict[str, Any]


class AnalysisRecord(AnalysisCreate):
    id: int
    created_at: datetime


# --- API responses ---


class AnalyzeFaceResponse(BaseModel):
    success: bool = True
    image_url: Optional[str] = None
    analysis_id: Optional[int] = None
    landmarks: FacialLandmarks
    overlay: LandmarkOverlay
    results: PhysiognomyResults


class SaveAnalysisResponse(BaseModel):
    success: bool = True
    analysis_id: int
    message: str = "Analysis saved successfully"
