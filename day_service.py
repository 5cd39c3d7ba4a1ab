from __future__ import annotations
from typing import Optional

from db import RecordStore
from models import (
    AppState,
    DayField,
    DayRecord,
    DIET_RULE_LABELS,
    DietRule,
    PassKind,
    WeightSlot,
    YesNo,
)
from conflict_service import get_pass_conflict
from tools import DateTools, MathTools, WeightTools


def get_day(state: AppState, date: str) -> DayRecord:
    """Return the stored record for ``date`` or an unanswered one."""
    stored = state.days.get(date)
    return stored if stored is not None else DayRecord.empty(date)


def is_lifting_day(state: AppState, date: str) -> bool:
    plan = state.week_plans.get(DateTools.week_key(date))
    return plan is not None and date in plan.dates


def is_fast_day(state: AppState, date: str) -> bool:
    plan = state.fast_plans.get(DateTools.month_key(date))
    return plan is not None and date in plan.dates


def diet_rules_answered(day: DayRecord) -> bool:
    return all(day.diet.get(rule) is not None for rule in DietRule)


def diet_rules_all_clear(day: DayRecord) -> bool:
    return all(day.diet.get(rule) == YesNo.NO for rule in DietRule)


def diet_requirement_satisfied(day: DayRecord) -> bool:
    return (
        day.diet_exception == YesNo.YES
        or day.dessert_pass == YesNo.YES
        or day.meal_pass == YesNo.YES
        or diet_rules_all_clear(day)
    )


def _diet_section_complete(day: DayRecord) -> bool:
    if day.diet_exception is None:
        return False
    if day.diet_exception == YesNo.YES:
        return True
    return (
        diet_rules_answered(day)
        and day.dessert_pass is not None
        and day.meal_pass is not None
    )


def _weights_complete(day: DayRecord) -> bool:
    morning = MathTools.is_finite(day.weight_morning) or day.weight_morning_missed
    night = MathTools.is_finite(day.weight_night) or day.weight_night_missed
    return morning and night


def is_day_complete(state: AppState, day: DayRecord, date: str) -> bool:
    """Whether every question that applies to ``date`` has been answered."""
    lifting_complete = (
        not is_lifting_day(state, date) or day.weight_lifting_done is not None
    )
    fast_complete = not is_fast_day(state, date) or day.water_fast_done is not None
    return (
        _diet_section_complete(day)
        and _weights_complete(day)
        and lifting_complete
        and fast_complete
    )


def toggle_yes_no(current: Optional[YesNo], pressed: YesNo) -> Optional[YesNo]:
    """Pressing the already selected answer clears it."""
    return None if current == pressed else pressed


def _update_day(state: AppState, date: str, **changes) -> AppState:
    current = get_day(state, date)
    updated = current.model_copy(update=changes)
    return state.model_copy(update={"days": {**state.days, date: updated}})


def set_diet_value(
    state: AppState, date: str, rule: DietRule, value: Optional[YesNo]
) -> AppState:
    diet = get_day(state, date).diet.model_copy(update={rule.value: value})
    return _update_day(state, date, diet=diet)


def set_day_value(
    state: AppState, date: str, field: DayField, value: Optional[YesNo]
) -> AppState:
    return _update_day(state, date, **{field.value: value})


def set_weight_value(
    state: AppState, date: str, slot: WeightSlot, value: Optional[float]
) -> AppState:
    """Store a weight; a present value clears the slot's missed flag."""
    value = WeightTools.parse(value)
    changes: dict = {slot.value_field: value}
    if value is not None:
        changes[slot.missed_field] = False
    return _update_day(state, date, **changes)


def toggle_weight_missed(state: AppState, date: str, slot: WeightSlot) -> AppState:
    """Flip the missed flag; marking a slot missed clears its value."""
    day = get_day(state, date)
    missed = not getattr(day, slot.missed_field)
    changes: dict = {slot.missed_field: missed}
    if missed:
        changes[slot.value_field] = None
    return _update_day(state, date, **changes)


class DayService:
    """Daily check-in answers backed by the record store."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def get_day(self, date: str) -> DayRecord:
        DateTools.parse(date)
        return get_day(self.store.get(), date)

    def is_complete(self, date: str) -> bool:
        state = self.store.get()
        return is_day_complete(state, get_day(state, date), date)

    def set_diet_value(self, date: str, rule: DietRule, value: Optional[YesNo]) -> None:
        DateTools.parse(date)
        self.store.replace(set_diet_value(self.store.get(), date, rule, value))

    def set_day_value(self, date: str, field: DayField, value: Optional[YesNo]) -> None:
        DateTools.parse(date)
        self.store.replace(set_day_value(self.store.get(), date, field, value))

    def press_day_value(self, date: str, field: DayField, pressed: YesNo) -> None:
        """Apply a yes/no button press; pressing the current answer clears it."""
        DateTools.parse(date)
        state = self.store.get()
        current = getattr(get_day(state, date), field.value)
        value = toggle_yes_no(current, pressed)
        self.store.replace(set_day_value(state, date, field, value))

    def set_weight_value(self, date: str, slot: WeightSlot, raw: object) -> None:
        """Store raw weight input; blank or non-numeric input clears the value."""
        DateTools.parse(date)
        self.store.replace(set_weight_value(self.store.get(), date, slot, raw))

    def toggle_weight_missed(self, date: str, slot: WeightSlot) -> None:
        DateTools.parse(date)
        self.store.replace(toggle_weight_missed(self.store.get(), date, slot))

    def checklist(self, date: str) -> dict:
        """Everything needed to render the check-in for ``date``."""
        DateTools.parse(date)
        state = self.store.get()
        day = get_day(state, date)
        conflicts = {}
        for kind in PassKind:
            conflict = None
            if getattr(day, kind.value) == YesNo.YES:
                conflict = get_pass_conflict(state, date, kind)
            conflicts[kind.value] = conflict
        return {
            "date": date,
            "day": day.model_dump(mode="json", by_alias=True),
            "complete": is_day_complete(state, day, date),
            "lifting_required": is_lifting_day(state, date),
            "fast_required": is_fast_day(state, date),
            "diet_rules": [
                {
                    "rule": rule.value,
                    "label": DIET_RULE_LABELS[rule],
                    "answer": day.diet.get(rule),
                }
                for rule in DietRule
            ],
            "diet_rules_all_clear": diet_rules_all_clear(day),
            "diet_requirement_satisfied": diet_requirement_satisfied(day),
            "pass_conflicts": conflicts,
        }
