"""
MediaPipe Face Mesh (478점) → 68점 랜드마크 변환 및 부위별 그룹화.

68점 배치는 dlib / face-api.js 의 표준 순서를 따른다:
  0-16 턱선, 17-26 눈썹, 27-35 코, 36-47 눈, 48-67 입
"""

from typing import Tuple

import numpy as np

from .schemas import EyePoints, FacialLandmarks, LandmarkOverlay, Point

# 68점 index → MediaPipe index
MEDIAPIPE_TO_68 = [
    # 턱선 (Jawline) 0-16, 8 = 턱끝
    127, 234, 93, 132, 58, 172, 136, 150, 152, 379, 365, 397, 288, 361, 323, 454, 356,
    # 눈썹 (Eyebrows) 17-26
    70, 63, 105, 66, 107, 336, 296, 334, 293, 300,
    # 코 (Nose) 27-35: 콧대 27-30, 콧방울 31-35
    168, 6, 197, 4, 98, 97, 2, 326, 327,
    # 왼쪽 눈 36-41
    33, 160, 158, 133, 153, 144,
    # 오른쪽 눈 42-47
    362, 385, 387, 263, 373, 380,
    # 입 외곽 48-59
    61, 40, 37, 0, 267, 270, 291, 321, 314, 17, 84, 91,
    # 입 내부 60-67
    78, 81, 13, 311, 308, 402, 14, 178,
]

# 이마는 눈썹 위쪽으로 추정한다 (68점 모델에는 이마 점이 없음)
FOREHEAD_OFFSET_PX = 30

JAW = slice(0, 17)
NOSE = slice(27, 36)
LEFT_EYE = slice(36, 42)
RIGHT_EYE = slice(42, 48)
MOUTH = slice(48, 68)
CHIN_TIP = 8


def to_points_68(mediapipe_landmarks, image_shape: Tuple[int, int]) -> np.ndarray:
    """
    Args:
        mediapipe_landmarks: NormalizedLandmark 리스트 (x, y 는 0.0-1.0)
        image_shape: (height, width)

    Returns:
        np.ndarray: (68, 2) pixel 좌표
    """
    h, w = image_shape
    return np.array(
        [
            [mediapipe_landmarks[idx].x * w, mediapipe_landmarks[idx].y * h]
            for idx in MEDIAPIPE_TO_68
        ],
        dtype=np.float64,
    )


def _points(rows: np.ndarray):
    return [Point(x=float(x), y=float(y)) for x, y in rows]


def extract_facial_features(points: np.ndarray) -> FacialLandmarks:
    """(68, 2) 배열을 이마/눈/코/입/턱/턱선 그룹으로 나눈다."""
    points = np.asarray(points, dtype=np.float64)
    if points.shape != (68, 2):
        raise ValueError(f"expected (68, 2) landmark array, got {points.shape}")

    forehead = [
        Point(x=float(points[19, 0]), y=float(points[19, 1] - FOREHEAD_OFFSET_PX)),
        Point(x=float(points[24, 0]), y=float(points[24, 1] - FOREHEAD_OFFSET_PX)),
    ]

    return FacialLandmarks(
        forehead=forehead,
        eyes=EyePoints(left=_points(points[LEFT_EYE]), right=_points(points[RIGHT_EYE])),
        nose=_points(points[NOSE]),
        mouth=_points(points[MOUTH]),
        chin=_points(points[CHIN_TIP : CHIN_TIP + 1]),
        jawline=_points(points[JAW]),
    )


def serialize_landmarks(points: np.ndarray) -> LandmarkOverlay:
    """
    Convert landmark points to a JSON-friendly overlay for drawing.
    Eye lines are closed loops of 6 points.
    """
    px = [[int(round(x)), int(round(y))] for x, y in np.asarray(points)]

    xs = [p[0] for p in px]
    ys = [p[1] for p in px]
    face_box = [min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys)]

    def get_line(sl: slice) -> list:
        return px[sl]

    return LandmarkOverlay(
        face_box=face_box,
        chin_line=get_line(JAW),
        left_eye_line=get_line(LEFT_EYE),
        right_eye_line=get_line(RIGHT_EYE),
        all_points=px,
    )


def template_face(image_shape: Tuple[int, int]) -> np.ndarray:
    """
    Synthetic frontal face in 68-point layout, scaled to the image.
    Used by the mock detector when no model file is available.
    """
    h, w = image_shape
    cx, cy = w * 0.5, h * 0.5
    fw, fh = w * 0.4, h * 0.5  # face width / height

    pts = np.zeros((68, 2), dtype=np.float64)

    # 턱선: 귀 옆에서 턱끝을 지나 반대편 귀까지 반타원
    theta = np.linspace(np.pi, 0.0, 17)
    pts[JAW, 0] = cx + (fw / 2) * np.cos(theta)
    pts[JAW, 1] = (cy - fh * 0.05) + (fh * 0.55) * np.sin(theta)

    # 눈썹
    brow_y = cy - fh * 0.22
    pts[17:22, 0] = np.linspace(cx - fw * 0.38, cx - fw * 0.08, 5)
    pts[22:27, 0] = np.linspace(cx + fw * 0.08, cx + fw * 0.38, 5)
    pts[17:27, 1] = brow_y - np.array([0, 4, 6, 4, 0, 0, 4, 6, 4, 0]) * (h / 640)

    # 코
    pts[27:31, 0] = cx
    pts[27:31, 1] = np.linspace(cy - fh * 0.15, cy + fh * 0.12, 4)
    pts[31:36, 0] = np.linspace(cx - fw * 0.1, cx + fw * 0.1, 5)
    pts[31:36, 1] = cy + fh * 0.16

    # 눈: 외측, 상단 2점, 내측, 하단 2점 순서
    def eye(center_x: float) -> np.ndarray:
        ew, eh = fw * 0.2, fh * 0.05
        ey = cy - fh * 0.12
        return np.array(
            [
                [center_x - ew / 2, ey],
                [center_x - ew / 6, ey - eh / 2],
                [center_x + ew / 6, ey - eh / 2],
                [center_x + ew / 2, ey],
                [center_x + ew / 6, ey + eh / 2],
                [center_x - ew / 6, ey + eh / 2],
            ]
        )

    pts[LEFT_EYE] = eye(cx - fw * 0.22)
    pts[RIGHT_EYE] = eye(cx + fw * 0.22)

    # 입: 외곽 12점은 타원, 내부 8점은 더 납작한 타원
    my = cy + fh * 0.3
    mw, mh = fw * 0.4, fh * 0.09
    outer = np.linspace(np.pi, -np.pi, 12, endpoint=False)
    pts[48:60, 0] = cx + (mw / 2) * np.cos(outer)
    pts[48:60, 1] = my - (mh / 2) * np.sin(outer)
    inner = np.linspace(np.pi, -np.pi, 8, endpoint=False)
    pts[60:68, 0] = cx + (mw * 0.35) * np.cos(inner)
    pts[60:68, 1] = my - (mh * 0.25) * np.sin(inner)

    return pts

