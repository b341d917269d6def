"""Summary counters for the dashboard panel."""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from shumba_admin.api.client import AdminApiClient
from shumba_admin.api.envelope import read_count
from shumba_admin.api.errors import AdminApiError, AuthRequired, SessionExpired
from shumba_admin.services.session_service import SessionService

logger = logging.getLogger(__name__)

COUNT_ENDPOINTS: Dict[str, str] = {
    "users": "/count-clients",
    "questions": "/count-questions",
    "tests": "/count-tests",
    "passes": "/count-pass",
    "payments": "/count-payments",
    "bookings": "/count-bookings",
}


@dataclass
class DashboardStats:
    """Counters; ``None`` means that counter failed to load."""
    users: Optional[int] = None
    questions: Optional[int] = None
    tests: Optional[int] = None
    passes: Optional[int] = None
    payments: Optional[int] = None
    bookings: Optional[int] = None

    @property
    def pass_rate(self) -> str:
        if not self.tests or self.passes is None:
            return "0%"
        return f"{round(100 * self.passes / self.tests)}%"

    @property
    def pass_vs_fail(self) -> str:
        if self.tests is None or self.passes is None:
            return "-"
        return f"{self.passes}/{max(0, self.tests - self.passes)}"

    @property
    def failed(self) -> Dict[str, bool]:
        return {name: getattr(self, name) is None for name in COUNT_ENDPOINTS}


class DashboardService:
    """
    Loads every counter independently; one failure does not hide the others.

    An expired or missing session aborts the whole load instead.
    """

    def __init__(self, client: AdminApiClient, session: SessionService):
        self._client = client
        self._session = session

    def load(self) -> DashboardStats:
        token = self._session.get_token()
        if not token:
            raise AuthRequired()

        stats = DashboardStats()
        for name, path in COUNT_ENDPOINTS.items():
            try:
                setattr(stats, name, read_count(self._client.get_json(path, token)))
            except (AuthRequired, SessionExpired):
                raise
            except AdminApiError as e:
                logger.warning(f"Dashboard counter {name} failed: {e.kind}")
        logger.info(f"Dashboard loaded: {stats}")
        return stats
