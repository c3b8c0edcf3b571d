"""Supabase gateway for meal entries."""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from meal_dashboard.domain.errors import GatewayError
from meal_dashboard.domain.meals import MealEntry, MealFields
from meal_dashboard.services.meal_log import MealGateway, parse_amount

_COLUMNS = "id, name, calories, protein, carbs, fat, created_at"


@dataclass
class SupabaseMealGateway(MealGateway):
    """Supabase implementation of the meal store.

    The supabase client is blocking, so each call runs in a worker thread.
    """

    client: Client
    table: str = "meal_entries"

    async def list_recent(self, limit: int) -> list[MealEntry]:
        """Return the newest meals."""
        return await self._call(self._list_recent, limit, action="list")

    async def create(self, fields: MealFields) -> MealEntry:
        """Insert a meal and return the stored row."""
        return await self._call(self._create, fields, action="create")

    async def delete_by_id(self, meal_id: str) -> None:
        """Delete a meal by id."""
        await self._call(self._delete_by_id, meal_id, action="delete")

    async def _call(self, func, *args, action: str):  # type: ignore[no-untyped-def]
        try:
            return await asyncio.to_thread(func, *args)
        except (APIError, httpx.HTTPError) as exc:
            raise GatewayError(f"Meal store {action} failed: {exc}") from exc

    def _list_recent(self, limit: int) -> list[MealEntry]:
        response = (
            self.client.table(self.table)
            .select(_COLUMNS)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def _create(self, fields: MealFields) -> MealEntry:
        response = (
            self.client.table(self.table)
            .insert(
                {
                    "name": fields.name,
                    "calories": fields.calories,
                    "protein": fields.protein_g,
                    "carbs": fields.carbs_g,
                    "fat": fields.fat_g,
                }
            )
            .execute()
        )
        if not response.data:
            raise GatewayError("Meal store create returned no row")
        return _parse_row(response.data[0])

    def _delete_by_id(self, meal_id: str) -> None:
        self.client.table(self.table).delete().eq("id", meal_id).execute()


def _parse_row(row: dict[str, object]) -> MealEntry:
    created_raw = row.get("created_at")
    try:
        logged_at = (
            datetime.fromisoformat(created_raw)
            if isinstance(created_raw, str) and created_raw
            else datetime.min.replace(tzinfo=UTC)
        )
    except ValueError as exc:
        raise GatewayError(f"Invalid created_at: {created_raw!r}") from exc
    if logged_at.tzinfo is None:
        logged_at = logged_at.replace(tzinfo=UTC)
    return MealEntry(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        calories=parse_amount(row.get("calories")),
        protein_g=parse_amount(row.get("protein")),
        carbs_g=parse_amount(row.get("carbs")),
        fat_g=parse_amount(row.get("fat")),
        logged_at=logged_at,
    )

