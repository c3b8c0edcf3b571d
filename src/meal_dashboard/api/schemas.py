"""Pydantic models for the dashboard HTTP API."""

from datetime import datetime

from pydantic import BaseModel, Field

from meal_dashboard.domain.meals import MacroProgress, MealEntry, MealLogSnapshot


class QuickAddRequest(BaseModel):
    """Quick add form fields as typed by the user."""

    name: str = ""
    calories: str | float | None = ""
    protein: str | float | None = ""
    carbs: str | float | None = ""
    fat: str | float | None = ""


class MealEntryModel(BaseModel):
    """Logged meal payload."""

    id: str
    name: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    logged_at: datetime

    @classmethod
    def from_entry(cls, entry: MealEntry) -> "MealEntryModel":
        return cls(
            id=entry.id,
            name=entry.name,
            calories=entry.calories,
            protein_g=entry.protein_g,
            carbs_g=entry.carbs_g,
            fat_g=entry.fat_g,
            logged_at=entry.logged_at,
        )


class TotalsModel(BaseModel):
    """Daily totals payload."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


class ProgressModel(BaseModel):
    """Progress toward a daily target."""

    label: str
    unit: str
    consumed: float
    target: float
    percent: int

    @classmethod
    def from_progress(cls, progress: MacroProgress) -> "ProgressModel":
        return cls(
            label=progress.label,
            unit=progress.unit,
            consumed=progress.consumed,
            target=progress.target,
            percent=progress.percent,
        )


class DashboardModel(BaseModel):
    """Rendered state of a dashboard session."""

    session_id: str
    entries: list[MealEntryModel] = Field(default_factory=list)
    totals: TotalsModel
    target_calories: float
    remaining_calories: float
    calorie_progress: ProgressModel
    macro_progress: list[ProgressModel] = Field(default_factory=list)
    loading: bool
    saving: bool
    last_error: str | None = None
    form: QuickAddRequest

    @classmethod
    def from_snapshot(
        cls, session_id: str, snapshot: MealLogSnapshot
    ) -> "DashboardModel":
        form = snapshot.form
        return cls(
            session_id=session_id,
            entries=[MealEntryModel.from_entry(entry) for entry in snapshot.entries],
            totals=TotalsModel(
                calories=snapshot.totals.calories,
                protein_g=snapshot.totals.protein_g,
                carbs_g=snapshot.totals.carbs_g,
                fat_g=snapshot.totals.fat_g,
            ),
            target_calories=snapshot.targets.calories,
            remaining_calories=snapshot.remaining_calories,
            calorie_progress=ProgressModel.from_progress(snapshot.calorie_progress),
            macro_progress=[
                ProgressModel.from_progress(progress)
                for progress in snapshot.macro_progress
            ],
            loading=snapshot.loading,
            saving=snapshot.saving,
            last_error=snapshot.last_error,
            form=QuickAddRequest(
                name=form.name,
                calories=form.calories,
                protein=form.protein,
                carbs=form.carbs,
                fat=form.fat,
            ),
        )
