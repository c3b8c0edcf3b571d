"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import ClientOptions, create_client

from meal_dashboard.adapters.supabase_meal_gateway import SupabaseMealGateway
from meal_dashboard.config import Settings
from meal_dashboard.services.meal_log import MealGateway, MealLogEngine
from meal_dashboard.services.sessions import DashboardSessionRegistry


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    meal_gateway: MealGateway
    session_registry: DashboardSessionRegistry
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url,
        resolved_settings.supabase_service_key,
        options=ClientOptions(
            postgrest_client_timeout=resolved_settings.postgrest_client_timeout
        ),
    )
    meal_gateway = SupabaseMealGateway(
        client=supabase_client, table=resolved_settings.meal_table
    )
    session_registry = build_session_registry(
        meal_gateway, limit=resolved_settings.recent_meal_limit
    )

    async def close_resources() -> None:
        session_registry.close_all()

    return AppContainer(
        settings=resolved_settings,
        meal_gateway=meal_gateway,
        session_registry=session_registry,
        close_resources=close_resources,
    )


def build_session_registry(
    meal_gateway: MealGateway, limit: int
) -> DashboardSessionRegistry:
    """Create a session registry whose engines share one gateway."""

    def engine_factory(session_id: str) -> MealLogEngine:
        return MealLogEngine(
            gateway=meal_gateway, limit=limit, session_id=session_id
        )

    return DashboardSessionRegistry(engine_factory=engine_factory)
