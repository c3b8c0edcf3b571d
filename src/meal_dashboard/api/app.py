"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status

from meal_dashboard.api.schemas import DashboardModel, MealEntryModel, QuickAddRequest
from meal_dashboard.app_logging import configure_logging
from meal_dashboard.containers import AppContainer
from meal_dashboard.domain.errors import (
    GatewayError,
    SessionClosedError,
    ValidationError,
)
from meal_dashboard.domain.meals import QuickAddForm
from meal_dashboard.services.meal_log import MealLogEngine


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/sessions", status_code=status.HTTP_201_CREATED)
    async def open_session(request: Request) -> DashboardModel:
        """Open a dashboard session and load its meals."""
        registry = _container(request).session_registry
        session_id, engine = await registry.open()
        return DashboardModel.from_snapshot(session_id, engine.snapshot())

    @app.get("/sessions/{session_id}")
    async def get_session(session_id: str, request: Request) -> DashboardModel:
        """Return the current dashboard state."""
        engine = _engine(request, session_id)
        return DashboardModel.from_snapshot(session_id, engine.snapshot())

    @app.post("/sessions/{session_id}/refresh")
    async def refresh_session(session_id: str, request: Request) -> DashboardModel:
        """Reload meals from the store."""
        engine = _engine(request, session_id)
        snapshot = await _run_intent(engine.initialize())
        return DashboardModel.from_snapshot(session_id, snapshot)

    @app.post("/sessions/{session_id}/meals", status_code=status.HTTP_201_CREATED)
    async def quick_add(
        session_id: str, body: QuickAddRequest, request: Request
    ) -> MealEntryModel:
        """Log a meal from the quick add form."""
        engine = _engine(request, session_id)
        form = QuickAddForm(
            name=body.name,
            calories=body.calories,
            protein=body.protein,
            carbs=body.carbs,
            fat=body.fat,
        )
        entry = await _run_intent(engine.quick_add(form))
        return MealEntryModel.from_entry(entry)

    @app.delete(
        "/sessions/{session_id}/meals/{meal_id}",
        status_code=status.HTTP_204_NO_CONTENT,
    )
    async def delete_meal(session_id: str, meal_id: str, request: Request) -> Response:
        """Delete a logged meal."""
        engine = _engine(request, session_id)
        await _run_intent(engine.delete_meal(meal_id))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def close_session(session_id: str, request: Request) -> Response:
        """Tear down a dashboard session."""
        _container(request).session_registry.close(session_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    async def _run_intent(intent):  # type: ignore[no-untyped-def]
        try:
            return await intent
        except ValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        except GatewayError as exc:
            logger.warning("Meal store request failed: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
            ) from exc
        except SessionClosedError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
            ) from exc

    return app


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _engine(request: Request, session_id: str) -> MealLogEngine:
    """Return the session's engine or respond with 404."""
    try:
        return _container(request).session_registry.get(session_id)
    except SessionClosedError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
