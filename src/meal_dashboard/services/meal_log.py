"""Meal log engine holding the canonical meal collection for a session."""

import dataclasses
import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol

from meal_dashboard.domain.errors import (
    GatewayError,
    SessionClosedError,
    ValidationError,
)
from meal_dashboard.domain.meals import (
    DEFAULT_TARGETS,
    EMPTY_FORM,
    DailyTargets,
    MealEntry,
    MealFields,
    MealLogSnapshot,
    QuickAddForm,
)
from meal_dashboard.services.aggregation import (
    calorie_progress,
    daily_totals,
    macro_progress,
    remaining_budget,
)

RECENT_MEAL_LIMIT = 50

_logger = logging.getLogger(__name__)

SnapshotListener = Callable[[MealLogSnapshot], None]


class MealGateway(Protocol):
    """Remote store for meal entries."""

    async def list_recent(self, limit: int) -> list[MealEntry]:
        """Return up to `limit` meals, newest first."""

    async def create(self, fields: MealFields) -> MealEntry:
        """Persist a meal and return it with store-assigned id and timestamp."""

    async def delete_by_id(self, meal_id: str) -> None:
        """Delete a meal; deleting a missing id succeeds."""


@dataclass
class MealLogEngine:
    """Authoritative in-memory meal log for one dashboard session.

    Mutations are applied only after the gateway confirms them. Each intent
    applies its own result when its call completes, so concurrent intents
    land in completion order. Results that arrive after `close()` are
    discarded.
    """

    gateway: MealGateway
    targets: DailyTargets = DEFAULT_TARGETS
    limit: int = RECENT_MEAL_LIMIT
    session_id: str | None = None
    _entries: tuple[MealEntry, ...] = field(default=(), init=False)
    _loading: bool = field(default=False, init=False)
    _pending_creates: int = field(default=0, init=False)
    _last_error: str | None = field(default=None, init=False)
    _form: QuickAddForm = field(default=EMPTY_FORM, init=False)
    _closed: bool = field(default=False, init=False)
    _load_token: int = field(default=0, init=False)
    _listeners: list[SnapshotListener] = field(default_factory=list, init=False)

    @property
    def entries(self) -> tuple[MealEntry, ...]:
        """Return the canonical collection, newest first."""
        return self._entries

    @property
    def closed(self) -> bool:
        """Return true once the session has been torn down."""
        return self._closed

    async def initialize(self) -> MealLogSnapshot:
        """Load the most recent meals, replacing the collection.

        A failed load empties the collection and records the error. Only the
        most recently issued load may apply its result.
        """
        self._ensure_open()
        self._load_token += 1
        token = self._load_token
        self._loading = True
        self._notify()
        try:
            fetched = await self.gateway.list_recent(self.limit)
        except GatewayError as exc:
            if not self._is_stale_load(token):
                _logger.exception(
                    "Failed to load meals", extra={"session_id": self.session_id}
                )
                self._entries = ()
                self._last_error = str(exc)
        else:
            if self._is_stale_load(token):
                _logger.debug(
                    "Discarding stale meal load", extra={"session_id": self.session_id}
                )
            else:
                self._entries = normalize_entries(fetched)
                self._last_error = None
        finally:
            if not self._is_stale_load(token):
                self._loading = False
                self._notify()
        return self.snapshot()

    async def quick_add(self, raw_form: QuickAddForm) -> MealEntry:
        """Validate the form, create the meal and prepend it once stored.

        Raises ValidationError without contacting the gateway when the form
        is rejected. Raises GatewayError when the store fails; the failed
        form becomes the current form so the user can retry. A success only
        clears the form if no other submission has replaced it meanwhile.
        """
        self._ensure_open()
        self._form = raw_form
        try:
            fields = parse_quick_add(raw_form)
        except ValidationError:
            self._notify()
            raise
        self._pending_creates += 1
        self._notify()
        try:
            created = await self.gateway.create(fields)
        except GatewayError as exc:
            if not self._closed:
                self._form = raw_form
                self._last_error = str(exc)
                _logger.exception(
                    "Failed to add meal",
                    extra={"session_id": self.session_id, "meal_name": fields.name},
                )
            raise
        else:
            if self._closed:
                return created
            entry = coerce_entry(created)
            self._entries = (
                entry,
                *(existing for existing in self._entries if existing.id != entry.id),
            )
            if self._form is raw_form:
                self._form = EMPTY_FORM
            self._last_error = None
            return entry
        finally:
            self._pending_creates -= 1
            if not self._closed:
                self._notify()

    async def delete_meal(self, meal_id: str) -> None:
        """Delete a meal and drop it from the collection once the store confirms."""
        self._ensure_open()
        try:
            await self.gateway.delete_by_id(meal_id)
        except GatewayError as exc:
            if self._closed:
                raise
            self._last_error = str(exc)
            _logger.exception(
                "Failed to delete meal",
                extra={"session_id": self.session_id, "meal_id": meal_id},
            )
            self._notify()
            raise
        if self._closed:
            return
        self._entries = tuple(entry for entry in self._entries if entry.id != meal_id)
        self._last_error = None
        self._notify()

    def close(self) -> None:
        """Tear the session down; pending results will be ignored."""
        self._closed = True
        self._listeners.clear()

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Call `listener` with a fresh snapshot after every state change."""
        self._ensure_open()
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> MealLogSnapshot:
        """Return the current state with aggregates recomputed from scratch."""
        totals = daily_totals(self._entries)
        return MealLogSnapshot(
            entries=self._entries,
            totals=totals,
            targets=self.targets,
            remaining_calories=remaining_budget(totals, self.targets.calories),
            calorie_progress=calorie_progress(totals, self.targets),
            macro_progress=macro_progress(totals, self.targets),
            loading=self._loading,
            saving=self._pending_creates > 0,
            last_error=self._last_error,
            form=self._form,
        )

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError("Meal log session is closed")

    def _is_stale_load(self, token: int) -> bool:
        return self._closed or token != self._load_token

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                _logger.exception(
                    "Meal log listener failed", extra={"session_id": self.session_id}
                )


def parse_quick_add(form: QuickAddForm) -> MealFields:
    """Turn a raw quick add form into create fields.

    The name must be non-blank and at least one numeric field must be filled
    in. Numbers that are unparsable, negative or non-finite become zero.
    """
    name = (form.name or "").strip()
    if not name:
        raise ValidationError("Meal name is required")
    if all(_is_blank(value) for value in form.numeric_values()):
        raise ValidationError("Enter at least one nutrition value")
    return MealFields(
        name=name,
        calories=parse_amount(form.calories),
        protein_g=parse_amount(form.protein),
        carbs_g=parse_amount(form.carbs),
        fat_g=parse_amount(form.fat),
    )


def parse_amount(value: object) -> float:
    """Parse a nutrition amount leniently, returning 0 for anything invalid."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return max(0.0, number)


def coerce_entry(entry: MealEntry) -> MealEntry:
    """Return the entry with every amount forced to a finite non-negative float."""
    return dataclasses.replace(
        entry,
        calories=parse_amount(entry.calories),
        protein_g=parse_amount(entry.protein_g),
        carbs_g=parse_amount(entry.carbs_g),
        fat_g=parse_amount(entry.fat_g),
    )


def normalize_entries(entries: Iterable[MealEntry]) -> tuple[MealEntry, ...]:
    """Coerce, de-duplicate by id and order newest first.

    The store's ordering is kept as-is unless it is out of order.
    """
    seen: set[str] = set()
    unique: list[MealEntry] = []
    for entry in entries:
        if entry.id in seen:
            continue
        seen.add(entry.id)
        unique.append(coerce_entry(entry))
    if not _is_newest_first(unique):
        unique.sort(key=lambda entry: entry.logged_at, reverse=True)
    return tuple(unique)


def _is_newest_first(entries: list[MealEntry]) -> bool:
    return all(
        earlier.logged_at >= later.logged_at
        for earlier, later in zip(entries, entries[1:], strict=False)
    )


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False
