import numpy as np
import pytest

from gwansang.analyzer import FaceAnalyzer
from gwansang.detector import DetectorHandle, load_detector
from gwansang.errors import (
    ImageDecodeError,
    ModelLoadError,
    MultipleFacesDetectedError,
    NoFaceDetectedError,
)


class RaisingDetector:
    def __init__(self, error):
        self.error = error

    def detect(self, img_bgr):
        raise self.error

    def close(self):
        pass


def test_mock_handle_detects_template_face():
    handle = load_detector(use_mock=True)
    assert handle.mock
    points = handle.detect(np.zeros((480, 640, 3), dtype=np.uint8))
    assert points.shape == (68, 2)


def test_missing_model_file_raises(tmp_path):
    with pytest.raises(ModelLoadError) as exc:
        load_detector(str(tmp_path / "nope.task"))
    assert "모델" in exc.value.message


def test_analyzer_runs_full_pipeline(jpeg_bytes):
    outcome = FaceAnalyzer(load_detector(use_mock=True)).analyze_bytes(jpeg_bytes, gender="male")
    assert len(outcome.results.features) == 5
    assert outcome.results.features[4].traits == ["리더십", "결단력", "추진력"]
    assert len(outcome.overlay.all_points) == 68
    assert len(outcome.landmarks.jawline) == 17


def test_analyzer_rejects_undecodable_bytes():
    analyzer = FaceAnalyzer(load_detector(use_mock=True))
    with pytest.raises(ImageDecodeError):
        analyzer.analyze_bytes(b"not an image")
    with pytest.raises(ImageDecodeError):
        analyzer.analyze_bytes(b"")


def test_analyze_image_missing_file(tmp_path):
    analyzer = FaceAnalyzer(load_detector(use_mock=True))
    with pytest.raises(ImageDecodeError):
        analyzer.analyze_image(str(tmp_path / "missing.jpg"))


@pytest.mark.parametrize("error", [NoFaceDetectedError, MultipleFacesDetectedError])
def test_detection_errors_abort_before_rules(error):
    handle = DetectorHandle(RaisingDetector(error()), "fake.task")
    analyzer = FaceAnalyzer(handle)
    with pytest.raises(error) as exc:
        analyzer.analyze_from_array(np.zeros((64, 64, 3), dtype=np.uint8))
    assert exc.value.message == error.message
