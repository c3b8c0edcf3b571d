"""Domain models for the meal log."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class MealEntry:
    """A logged meal as confirmed by the meal store."""

    id: str
    name: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    logged_at: datetime


@dataclass(frozen=True)
class MealFields:
    """Payload for creating a meal; the store assigns id and timestamp."""

    name: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


@dataclass(frozen=True)
class QuickAddForm:
    """Raw quick add form values as entered by the user."""

    name: str = ""
    calories: str | float | None = ""
    protein: str | float | None = ""
    carbs: str | float | None = ""
    fat: str | float | None = ""

    def numeric_values(self) -> tuple[object, ...]:
        """Return the four numeric inputs in calories, protein, carbs, fat order."""
        return (self.calories, self.protein, self.carbs, self.fat)


EMPTY_FORM = QuickAddForm()


@dataclass(frozen=True)
class DailyTotals:
    """Field-wise sum of the meal log."""

    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0


@dataclass(frozen=True)
class MacroProgress:
    """Consumption of a single macro against its target."""

    label: str
    unit: str
    consumed: float
    target: float
    percent: int


@dataclass(frozen=True)
class DailyTargets:
    """Fixed daily nutrition targets."""

    calories: float = 1700
    protein_g: float = 170
    carbs_g: float = 130
    fat_g: float = 55


DEFAULT_TARGETS = DailyTargets()


@dataclass(frozen=True)
class MealLogSnapshot:
    """Read-only view of a meal log session."""

    entries: tuple[MealEntry, ...]
    totals: DailyTotals
    targets: DailyTargets
    remaining_calories: float
    calorie_progress: MacroProgress
    macro_progress: tuple[MacroProgress, ...]
    loading: bool
    saving: bool
    last_error: str | None
    form: QuickAddForm = field(default=EMPTY_FORM)
