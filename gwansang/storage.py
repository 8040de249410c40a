import itertools
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from .schemas import AnalysisCreate, AnalysisRecord

logger = logging.getLogger(__name__)


class AnalysisStore(ABC):
    """분석 기록 저장소. 추가와 조회만 있고 수정/삭제는 없다."""

    @abstractmethod
    def create(self, payload: AnalysisCreate) -> AnalysisRecord:
        """Store the payload under a newly generated id."""

    @abstractmethod
    def get(self, analysis_id: int) -> Optional[AnalysisRecord]:
        ...

    @abstractmethod
    def list_by_time_range(self, hours: int) -> List[AnalysisRecord]:
        """Records created within the last `hours` hours, oldest first."""


class MemoryAnalysisStore(AnalysisStore):
    def __init__(self):
        self._records: Dict[int, AnalysisRecord] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create(self, payload: AnalysisCreate) -> AnalysisRecord:
        with self._lock:
            record = AnalysisRecord(
                **payload.model_dump(),
                id=next(self._ids),
                created_at=datetime.now(timezone.utc),
            )
            self._records[record.id] = record
        logger.info("Saved analysis %d", record.id)
        return record

    def get(self, analysis_id: int) -> Optional[AnalysisRecord]:
        return self._records.get(analysis_id)

    def list_by_time_range(self, hours: int) -> List[AnalysisRecord]:
        cutoff = datetime.now(timezone.utc) - timedelta(hours=hours)
        with self._lock:
            records = list(self._records.values())
        return [r for r in records if r.created_at >= cutoff]
