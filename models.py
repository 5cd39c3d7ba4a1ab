from __future__ import annotations
import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from tools import DateTools


class YesNo(str, Enum):
    """An answered yes/no question. Unanswered is ``None``."""

    YES = "yes"
    NO = "no"


class DietRule(str, Enum):
    NON_KETO_FRUITS = "non_keto_fruits"
    HIGH_CARB_DAIRY = "high_carb_dairy"
    PROCESSED_FOODS = "processed_foods"
    STARCHY_VEGGIES = "starchy_veggies"
    REFINED_CARBS = "refined_carbs"


DIET_RULE_LABELS = {
    DietRule.NON_KETO_FRUITS: "Did you eat any non-keto fruits?",
    DietRule.HIGH_CARB_DAIRY: "Did you eat any high-carb dairy?",
    DietRule.PROCESSED_FOODS: (
        "Did you eat any processed foods, including keto versions?"
    ),
    DietRule.STARCHY_VEGGIES: (
        "Did you eat more than small amounts of starchy vegetables?"
    ),
    DietRule.REFINED_CARBS: "Did you eat any refined carbohydrates?",
}


class DayField(str, Enum):
    """Day-level yes/no answers outside the diet rule list."""

    DIET_EXCEPTION = "diet_exception"
    DESSERT_PASS = "dessert_pass"
    MEAL_PASS = "meal_pass"
    WEIGHT_LIFTING_DONE = "weight_lifting_done"
    WATER_FAST_DONE = "water_fast_done"


class PassKind(str, Enum):
    """Diet exceptions limited to one use per calendar week."""

    DESSERT = "dessert_pass"
    MEAL = "meal_pass"


class WeightSlot(str, Enum):
    MORNING = "morning"
    NIGHT = "night"

    @property
    def value_field(self) -> str:
        return f"weight_{self.value}"

    @property
    def missed_field(self) -> str:
        return f"weight_{self.value}_missed"


class TrackerModel(BaseModel):
    """Immutable base; serialized with the camelCase keys of the stored document."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class DietChecks(TrackerModel):
    non_keto_fruits: Optional[YesNo] = None
    high_carb_dairy: Optional[YesNo] = None
    processed_foods: Optional[YesNo] = None
    starchy_veggies: Optional[YesNo] = None
    refined_carbs: Optional[YesNo] = None

    def get(self, rule: DietRule) -> Optional[YesNo]:
        return getattr(self, rule.value)


class DayRecord(TrackerModel):
    date: str
    diet: DietChecks = Field(default_factory=DietChecks)
    diet_exception: Optional[YesNo] = None
    dessert_pass: Optional[YesNo] = None
    meal_pass: Optional[YesNo] = None
    weight_morning: Optional[float] = None
    weight_night: Optional[float] = None
    weight_morning_missed: bool = False
    weight_night_missed: bool = False
    weight_lifting_done: Optional[YesNo] = None
    water_fast_done: Optional[YesNo] = None

    @classmethod
    def empty(cls, date: str) -> "DayRecord":
        return cls(date=date)


class PlanDates(TrackerModel):
    dates: tuple[str, ...] = ()

    @field_validator("dates")
    @classmethod
    def _check_dates(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for date in value:
            DateTools.parse(date)
        return value


class WeekPlan(PlanDates):
    """Lifting days of the week keyed by its Sunday."""


class FastPlan(PlanDates):
    """Water-only fast days of the month keyed by ``YYYY-MM``."""


class AppState(TrackerModel):
    """Aggregate root persisted as a single document in the record store."""

    days: dict[str, DayRecord] = Field(default_factory=dict)
    week_plans: dict[str, WeekPlan] = Field(default_factory=dict)
    fast_plans: dict[str, FastPlan] = Field(default_factory=dict)
    tracking_start: str
    confirmed_weeks: dict[str, bool] = Field(default_factory=dict)
    confirmed_months: dict[str, bool] = Field(default_factory=dict)

    @field_validator("tracking_start")
    @classmethod
    def _check_tracking_start(cls, value: str) -> str:
        DateTools.parse(value)
        return value

    @field_validator("days")
    @classmethod
    def _check_day_keys(cls, value: dict[str, DayRecord]) -> dict[str, DayRecord]:
        for key in value:
            DateTools.parse(key)
        return value

    @classmethod
    def default(cls, today: datetime.date | None = None) -> "AppState":
        today = today or datetime.date.today()
        return cls(tracking_start=DateTools.format(today))

    @classmethod
    def from_json(cls, raw: str | bytes) -> "AppState":
        return cls.model_validate_json(raw)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
