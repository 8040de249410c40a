class FaceAnalysisError(Exception):
    """
    얼굴 분석 파이프라인의 기본 예외.
    message 는 사용자에게 그대로 표시되는 문구.
    """

    message = "얼굴 분석 중 오류가 발생했습니다."

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ModelLoadError(FaceAnalysisError):
    message = "얼굴 인식 모델을 로드하는데 실패했습니다."


class ImageDecodeError(FaceAnalysisError):
    message = "이미지를 로드할 수 없습니다."


class NoFaceDetectedError(FaceAnalysisError):
    message = "얼굴을 감지할 수 없습니다. 얼굴이 명확히 보이는 사진을 사용해주세요."


class MultipleFacesDetectedError(FaceAnalysisError):
    message = "여러 개의 얼굴이 감지되었습니다. 한 명의 얼굴만 포함된 사진을 사용해주세요."
