from typing import List, Optional

from .schemas import DetailedMeasurements, FacialLandmarks, Point

# 68점 모델에서 추정이 불가능한 값은 고정값을 쓴다
JAWLINE_ANGLE = 125
FACIAL_SYMMETRY = 90


def _at(points: List[Point], idx: int) -> Optional[Point]:
    return points[idx] if idx < len(points) else None


def _span(a: Optional[float], b: Optional[float], fallback: float) -> float:
    """|a - b|, or the fallback when a point is missing or the span is zero."""
    if a is None or b is None:
        return fallback
    return abs(a - b) or fallback


class MeasurementCalculator:
    """
    랜드마크 좌표로부터 얼굴 비율을 계산하는 클래스.
    face ratio / eye distance / nose-to-mouth ratio 는 실제 좌표 차이로 계산하고,
    jawline angle / symmetry 는 고정값.
    """

    def calculate(self, landmarks: FacialLandmarks) -> DetailedMeasurements:
        jaw_left = _at(landmarks.jawline, 0)
        jaw_right = _at(landmarks.jawline, 16)
        chin = _at(landmarks.chin, 0)
        forehead = _at(landmarks.forehead, 0)

        face_width = _span(
            jaw_right.x if jaw_right else None, jaw_left.x if jaw_left else None, 120
        )
        face_height = _span(
            chin.y if chin else None, forehead.y if forehead else None, 150
        )
        face_ratio = face_height / face_width

        left_eye = _at(landmarks.eyes.left, 0)
        right_eye = _at(landmarks.eyes.right, 0)
        eye_distance = _span(
            right_eye.x if right_eye else None, left_eye.x if left_eye else None, 35
        )

        nose_top = _at(landmarks.nose, 0)
        nose_bottom = _at(landmarks.nose, 8)
        nose_height = _span(
            nose_bottom.y if nose_bottom else None, nose_top.y if nose_top else None, 40
        )

        # 입 내부 윗입술(61) / 아랫입술(67)
        lip_top = _at(landmarks.mouth, 13)
        lip_bottom = _at(landmarks.mouth, 19)
        mouth_height = _span(
            lip_bottom.y if lip_bottom else None, lip_top.y if lip_top else None, 8
        )
        nose_to_mouth_ratio = nose_height / mouth_height

        return DetailedMeasurements(
            face_ratio=round(face_ratio, 2),
            eye_distance=round(eye_distance),
            nose_to_mouth_ratio=round(nose_to_mouth_ratio, 2),
            jawline_angle=JAWLINE_ANGLE,
            facial_symmetry=FACIAL_SYMMETRY,
        )
