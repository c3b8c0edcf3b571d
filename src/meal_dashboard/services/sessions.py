"""Dashboard session lifecycle."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import uuid4

from meal_dashboard.domain.errors import SessionClosedError
from meal_dashboard.services.meal_log import MealLogEngine

_logger = logging.getLogger(__name__)


@dataclass
class DashboardSessionRegistry:
    """Owns one meal log engine per active dashboard session."""

    engine_factory: Callable[[str], MealLogEngine]
    engines: dict[str, MealLogEngine] = field(default_factory=dict)

    async def open(self) -> tuple[str, MealLogEngine]:
        """Create a session and load its meals.

        The session is only registered once its first load has returned.
        """
        session_id = str(uuid4())
        engine = self.engine_factory(session_id)
        try:
            await engine.initialize()
        except Exception:
            engine.close()
            raise
        self.engines[session_id] = engine
        _logger.info("Opened dashboard session", extra={"session_id": session_id})
        return session_id, engine

    def get(self, session_id: str) -> MealLogEngine:
        """Return the engine for a session or raise SessionClosedError."""
        engine = self.engines.get(session_id)
        if engine is None or engine.closed:
            raise SessionClosedError(f"Unknown session: {session_id}")
        return engine

    def close(self, session_id: str) -> None:
        """Tear down a session; unknown ids are ignored."""
        engine = self.engines.pop(session_id, None)
        if engine is None:
            return
        engine.close()
        _logger.info("Closed dashboard session", extra={"session_id": session_id})

    def close_all(self) -> None:
        """Tear down every session."""
        for session_id in list(self.engines):
            self.close(session_id)
