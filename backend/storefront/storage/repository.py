from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Sequence, Tuple

from storefront.models.domain import Trip
from storefront.services.booking_workflow import BookingWorkflow

logger = logging.getLogger(__name__)


class InMemoryRepository:
    def __init__(self, catalog: Sequence[Trip] = (), max_sessions: int = 1000) -> None:
        self.catalog: Tuple[Trip, ...] = tuple(catalog)
        self.max_sessions = max_sessions
        # insertion ordered, oldest first
        self.sessions: Dict[str, BookingWorkflow] = {}
        self._sessions_lock = threading.Lock()

    def list_trips(self) -> List[Trip]:
        return list(self.catalog)

    def get_trip(self, trip_id: int) -> Optional[Trip]:
        return next((t for t in self.catalog if t.id == trip_id), None)

    def save_session(self, session_id: str, workflow: BookingWorkflow) -> BookingWorkflow:
        with self._sessions_lock:
            self.sessions.pop(session_id, None)
            self.sessions[session_id] = workflow
            while len(self.sessions) > self.max_sessions:
                oldest = next(iter(self.sessions))
                del self.sessions[oldest]
                logger.info("Evicted booking session %s", oldest)
        return workflow

    def get_session(self, session_id: str) -> Optional[BookingWorkflow]:
        return self.sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        with self._sessions_lock:
            return self.sessions.pop(session_id, None) is not None
