from __future__ import annotations
import logging
from typing import Iterable, Optional

from db import RecordStore
from models import AppState, FastPlan, WeekPlan
from tools import DateTools

logger = logging.getLogger(__name__)

PLAN_SIZE = 3


def replace_week_plan(state: AppState, week_key: str, dates: Iterable[str]) -> AppState:
    """Store ``dates`` as the week's lifting days and drop its confirmation."""
    return state.model_copy(
        update={
            "week_plans": {**state.week_plans, week_key: WeekPlan(dates=tuple(dates))},
            "confirmed_weeks": {**state.confirmed_weeks, week_key: False},
        }
    )


def replace_fast_plan(state: AppState, month_key: str, dates: Iterable[str]) -> AppState:
    """Store ``dates`` as the month's fast window and drop its confirmation."""
    return state.model_copy(
        update={
            "fast_plans": {**state.fast_plans, month_key: FastPlan(dates=tuple(dates))},
            "confirmed_months": {**state.confirmed_months, month_key: False},
        }
    )


def confirm_week_plan(state: AppState, week_key: str) -> AppState:
    return state.model_copy(
        update={"confirmed_weeks": {**state.confirmed_weeks, week_key: True}}
    )


def confirm_month_plan(state: AppState, month_key: str) -> AppState:
    return state.model_copy(
        update={"confirmed_months": {**state.confirmed_months, month_key: True}}
    )


def is_week_plan_complete(state: AppState, week_key: str) -> bool:
    plan = state.week_plans.get(week_key)
    return plan is not None and len(plan.dates) == PLAN_SIZE


def is_week_plan_confirmed(state: AppState, week_key: str) -> bool:
    return bool(state.confirmed_weeks.get(week_key))


def is_month_plan_complete(state: AppState, month_key: str) -> bool:
    plan = state.fast_plans.get(month_key)
    return plan is not None and len(plan.dates) == PLAN_SIZE


def is_month_plan_confirmed(state: AppState, month_key: str) -> bool:
    return bool(state.confirmed_months.get(month_key))


class PlanService:
    """Weekly lifting plans and monthly fasting plans.

    Selections that cannot form a valid plan (a fourth lifting day, a date
    outside the week, a fast that does not fit in the month) are rejected
    here: the store is left untouched and ``False`` is returned.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def week_dates(self, week_key: str) -> list[str]:
        return list(self.store.get().week_plans.get(week_key, WeekPlan()).dates)

    def fast_dates(self, month_key: str) -> list[str]:
        return list(self.store.get().fast_plans.get(month_key, FastPlan()).dates)

    def replace_week_plan(self, week_key: str, dates: Iterable[str]) -> bool:
        allowed = set(DateTools.week_dates(week_key))
        chosen = sorted(set(dates))
        if len(chosen) > PLAN_SIZE or not set(chosen) <= allowed:
            logger.info(f"Rejected lifting plan {chosen} for week {week_key}")
            return False
        self.store.replace(replace_week_plan(self.store.get(), week_key, chosen))
        return True

    def toggle_lifting_day(self, week_key: str, date: str, selected: bool) -> bool:
        chosen = set(self.week_dates(week_key))
        if selected:
            chosen.add(date)
        else:
            chosen.discard(date)
        return self.replace_week_plan(week_key, chosen)

    def replace_fast_plan(self, month_key: str, dates: Iterable[str]) -> bool:
        chosen = sorted(set(dates))
        if chosen:
            low, high = DateTools.fast_start_bounds(month_key)
            start = chosen[0]
            if (
                not DateTools.is_valid(start)
                or not low <= start <= high
                or chosen != DateTools.consecutive_run(start, PLAN_SIZE)
            ):
                logger.info(f"Rejected fast plan {chosen} for month {month_key}")
                return False
        else:
            DateTools.parse_month_key(month_key)
        self.store.replace(replace_fast_plan(self.store.get(), month_key, chosen))
        return True

    def set_fast_start(self, month_key: str, start: Optional[str]) -> bool:
        """Schedule ``start`` and the two following days; ``None`` clears."""
        if not start:
            return self.replace_fast_plan(month_key, [])
        if not DateTools.is_valid(start):
            return False
        return self.replace_fast_plan(
            month_key, DateTools.consecutive_run(start, PLAN_SIZE)
        )

    def confirm_week_plan(self, week_key: str) -> None:
        state = self.store.get()
        if not is_week_plan_complete(state, week_key):
            raise ValueError(f"select exactly {PLAN_SIZE} lifting days first")
        self.store.replace(confirm_week_plan(state, week_key))

    def confirm_month_plan(self, month_key: str) -> None:
        state = self.store.get()
        if not is_month_plan_complete(state, month_key):
            raise ValueError(f"schedule all {PLAN_SIZE} fast days first")
        self.store.replace(confirm_month_plan(state, month_key))

    def week_summary(self, week_key: str) -> dict:
        days = DateTools.week_dates(week_key)
        state = self.store.get()
        return {
            "week_key": week_key,
            "week_end": days[-1],
            "days": days,
            "dates": list(state.week_plans.get(week_key, WeekPlan()).dates),
            "complete": is_week_plan_complete(state, week_key),
            "confirmed": is_week_plan_confirmed(state, week_key),
        }

    def fast_summary(self, month_key: str) -> dict:
        min_start, max_start = DateTools.fast_start_bounds(month_key)
        state = self.store.get()
        dates = list(state.fast_plans.get(month_key, FastPlan()).dates)
        complete = is_month_plan_complete(state, month_key)
        return {
            "month_key": month_key,
            "min_start": min_start,
            "max_start": max_start,
            "dates": dates,
            "last_meal": DateTools.add_days(dates[0], -1) if dates else None,
            "break_fast": DateTools.add_days(dates[-1], 1) if complete else None,
            "complete": complete,
            "confirmed": is_month_plan_confirmed(state, month_key),
        }
