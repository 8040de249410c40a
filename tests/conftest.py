import cv2
import numpy as np
import pytest
from fastapi.testclient import TestClient

from gwansang.analyzer import FaceAnalyzer
from gwansang.config import Settings
from gwansang.detector import load_detector
from gwansang.landmarks import extract_facial_features, template_face
from gwansang.main import create_app
from gwansang.storage import MemoryAnalysisStore


class FixedRng:
    """Stand-in for numpy Generator that always draws the same integer."""

    def __init__(self, value: int):
        self.value = value

    def integers(self, low, high=None):
        return self.value


@pytest.fixture
def fixed_rng():
    return FixedRng


@pytest.fixture
def landmarks():
    return extract_facial_features(template_face((640, 640)))


@pytest.fixture
def jpeg_bytes():
    # 640x640 black image
    img = np.zeros((640, 640, 3), dtype=np.uint8)
    _, encoded = cv2.imencode(".jpg", img)
    return encoded.tobytes()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        model_path=str(tmp_path / "missing.task"),
        use_mock=True,
        upload_dir=str(tmp_path / "uploads"),
        max_upload_mb=1,
        cors_origins=["*"],
        log_level="WARNING",
    )


@pytest.fixture
def store():
    return MemoryAnalysisStore()


@pytest.fixture
def client(settings, store):
    analyzer = FaceAnalyzer(load_detector(use_mock=True))
    app = create_app(settings=settings, store=store, analyzer=analyzer)
    return TestClient(app)
