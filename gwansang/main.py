import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from fastapi import FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .analyzer import AnalysisOutcome, FaceAnalyzer
from .config import Settings, configure_logging, get_settings
from .detector import load_detector
from .errors import (
    FaceAnalysisError,
    ImageDecodeError,
    ModelLoadError,
    MultipleFacesDetectedError,
    NoFaceDetectedError,
)
from .schemas import (
    AnalysisCreate,
    AnalysisRecord,
    AnalyzeFaceResponse,
    SaveAnalysisResponse,
)
from .storage import AnalysisStore, MemoryAnalysisStore

logger = logging.getLogger(__name__)

GENDERS = ("male", "female")


def _build_analyzer(settings: Settings) -> Optional[FaceAnalyzer]:
    try:
        handle = load_detector(settings.model_path, use_mock=settings.use_mock)
    except ModelLoadError:
        # 모델이 없어도 저장/조회 API 는 동작해야 한다
        logger.warning("Face detector unavailable; /api/analyze-face will return 503")
        return None
    return FaceAnalyzer(handle)


def _persist(
    store: AnalysisStore,
    upload_dir: Path,
    filename: str,
    contents: bytes,
    gender: Optional[str],
    outcome: AnalysisOutcome,
) -> Tuple[Optional[str], Optional[int]]:
    """
    Best-effort save. The analysis result is returned even if this fails.

    Returns (image_url, analysis_id). image_url is None when the upload could
    not be written; a written upload is removed again if the record is not
    stored.
    """
    path = upload_dir / filename
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(contents)
    except OSError:
        logger.warning("Failed to write upload %s", path, exc_info=True)
        return None, None

    image_url = f"/uploads/{filename}"
    try:
        record = store.create(
            AnalysisCreate(
                image_url=image_url,
                gender=gender,
                facial_landmarks=outcome.landmarks.model_dump(),
                analysis_results=outcome.results.model_dump(),
            )
        )
    except Exception:
        logger.warning("Failed to save analysis results", exc_info=True)
        path.unlink(missing_ok=True)
        return None, None
    return image_url, record.id


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[AnalysisStore] = None,
    analyzer: Optional[FaceAnalyzer] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # 앱이 보관한 MediaPipe landmarker 를 해제한다
        face_analyzer: Optional[FaceAnalyzer] = app.state.analyzer
        if face_analyzer is not None:
            face_analyzer.handle.close()
            logger.info("Face detector closed")

    app = FastAPI(
        title="Gwansang API",
        description="Face physiognomy (관상) analysis API",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.store = store if store is not None else MemoryAnalysisStore()
    app.state.analyzer = analyzer if analyzer is not None else _build_analyzer(settings)

    upload_dir = Path(settings.upload_dir)
    app.mount("/uploads", StaticFiles(directory=upload_dir, check_dir=False), name="uploads")

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        if request.url.path == "/api/save-analysis":
            message = "Invalid analysis data"
        else:
            message = "Invalid request"
        return JSONResponse(
            status_code=400,
            content={
                "message": message,
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})

    @app.get("/api/health")
    def health_check():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.post("/api/analyze-face", response_model=AnalyzeFaceResponse)
    async def analyze_face(
        request: Request,
        image: Optional[UploadFile] = File(None),
        gender: Optional[str] = Form(None),
    ):
        start_time = time.time()

        # 1. Validation
        if image is None:
            raise HTTPException(status_code=400, detail="No image file provided")
        if not (image.content_type or "").startswith("image/"):
            raise HTTPException(status_code=400, detail="Only image files are allowed")

        gender = gender or None
        if gender is not None and gender not in GENDERS:
            raise HTTPException(status_code=400, detail="Invalid gender value")

        # 한도 + 1 바이트까지만 읽어서 초과 여부를 판단한다
        contents = await image.read(settings.max_upload_bytes + 1)
        if len(contents) > settings.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"Image exceeds {settings.max_upload_mb}MB limit",
            )

        face_analyzer: Optional[FaceAnalyzer] = request.app.state.analyzer
        if face_analyzer is None:
            raise HTTPException(status_code=503, detail=ModelLoadError.message)

        # 2. Analyze
        try:
            outcome = face_analyzer.analyze_bytes(contents, gender=gender)
        except ImageDecodeError as e:
            raise HTTPException(status_code=400, detail=e.message)
        except (NoFaceDetectedError, MultipleFacesDetectedError) as e:
            logger.info("Detection rejected upload %s: %s", image.filename, e.message)
            raise HTTPException(status_code=422, detail=e.message)
        except FaceAnalysisError as e:
            raise HTTPException(status_code=500, detail=e.message)
        except Exception as e:
            logger.exception("Analyzer Error")
            raise HTTPException(status_code=500, detail=f"Face analysis failed: {str(e)}")

        # 3. Save (never blocks the result)
        suffix = Path(image.filename or "").suffix.lower() or ".jpg"
        filename = f"{uuid.uuid4().hex}{suffix}"
        image_url, analysis_id = _persist(
            request.app.state.store, upload_dir, filename, contents, gender, outcome
        )

        logger.info(
            "Analyzed %s in %.3fs (id=%s)", image.filename, time.time() - start_time, analysis_id
        )

        return AnalyzeFaceResponse(
            image_url=image_url,
            analysis_id=analysis_id,
            landmarks=outcome.landmarks,
            overlay=outcome.overlay,
            results=outcome.results,
        )

    @app.post("/api/save-analysis", response_model=SaveAnalysisResponse)
    def save_analysis(payload: AnalysisCreate, request: Request):
        try:
            record = request.app.state.store.create(payload)
        except Exception as e:
            logger.exception("Save analysis error")
            raise HTTPException(status_code=500, detail=f"Failed to save analysis: {str(e)}")
        return SaveAnalysisResponse(analysis_id=record.id)

    @app.get("/api/analysis/{analysis_id}", response_model=AnalysisRecord)
    def get_analysis(analysis_id: str, request: Request):
        # "1_0", " 1", 전각 숫자 등은 int() 가 받아주므로 ASCII 숫자만 허용
        if not (analysis_id.isascii() and analysis_id.isdigit()):
            raise HTTPException(status_code=400, detail="Invalid analysis ID")

        record = request.app.state.store.get(int(analysis_id))
        if record is None:
            raise HTTPException(status_code=404, detail="Analysis not found")
        return record

    @app.get("/api/analyses", response_model=List[AnalysisRecord])
    def list_analyses(request: Request, hours: int = Query(24, ge=1)):
        return request.app.state.store.list_by_time_range(hours)

    return app


app = create_app()
