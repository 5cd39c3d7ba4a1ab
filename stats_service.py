from __future__ import annotations
import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from db import RecordStore, SettingsRepository
from day_service import (
    diet_requirement_satisfied,
    get_day,
    is_fast_day,
    is_lifting_day,
)
from models import AppState, DayRecord, DietRule, YesNo
from tools import DateTools, MathTools


class GoalMetric(str, Enum):
    DIET = "diet"
    WEIGHTS = "weights"
    LIFTING = "lifting"
    FAST = "fast"


GOAL_LABELS = {
    GoalMetric.DIET: "Diet requirement met",
    GoalMetric.WEIGHTS: "Weights logged (am + pm)",
    GoalMetric.LIFTING: "Lifting days completed",
    GoalMetric.FAST: "Fast days completed",
}


def daily_average(day: DayRecord) -> Optional[float]:
    """Mean of the day's weigh-ins; a single weigh-in stands alone."""
    return MathTools.mean([day.weight_morning, day.weight_night])


def rolling_average(state: AppState, date: str, window: int) -> Optional[float]:
    """Mean daily average over the ``window`` days ending at ``date``."""
    return MathTools.mean(
        daily_average(get_day(state, d)) for d in DateTools.date_range(date, window)
    )


def weight_series(state: AppState) -> List[Tuple[str, float]]:
    series = []
    for date, day in state.days.items():
        value = daily_average(day)
        if value is not None:
            series.append((date, value))
    return sorted(series)


def _diet_goal(state: AppState, date: str) -> Optional[int]:
    day = get_day(state, date)
    answered = (
        day.diet_exception is not None
        or day.dessert_pass is not None
        or day.meal_pass is not None
        or any(day.diet.get(rule) is not None for rule in DietRule)
    )
    if not answered:
        return None
    return 1 if diet_requirement_satisfied(day) else 0


def _weights_goal(state: AppState, date: str) -> Optional[int]:
    day = get_day(state, date)
    morning = MathTools.is_finite(day.weight_morning)
    night = MathTools.is_finite(day.weight_night)
    if not (morning or night or day.weight_morning_missed or day.weight_night_missed):
        return None
    return 1 if morning and night else 0


def _lifting_goal(state: AppState, date: str) -> Optional[int]:
    if not is_lifting_day(state, date):
        return None
    return 1 if get_day(state, date).weight_lifting_done == YesNo.YES else 0


def _fast_goal(state: AppState, date: str) -> Optional[int]:
    if not is_fast_day(state, date):
        return None
    return 1 if get_day(state, date).water_fast_done == YesNo.YES else 0


_GOAL_EVALUATORS = {
    GoalMetric.DIET: _diet_goal,
    GoalMetric.WEIGHTS: _weights_goal,
    GoalMetric.LIFTING: _lifting_goal,
    GoalMetric.FAST: _fast_goal,
}


def goal_achievement_series(
    state: AppState, metric: GoalMetric, dates: Iterable[str]
) -> List[Optional[int]]:
    """1 when met, 0 when relevant but unmet, ``None`` when not applicable."""
    evaluate = _GOAL_EVALUATORS[metric]
    return [evaluate(state, d) for d in dates]


class StatisticsService:
    """Compute weight trends and goal performance for charts."""

    def __init__(
        self,
        store: RecordStore,
        settings_repo: SettingsRepository | None = None,
    ) -> None:
        self.store = store
        self.settings = settings_repo

    def _goal_weight(self) -> float:
        if self.settings is not None:
            return self.settings.get_float("goal_weight", 170.0)
        return 170.0

    def _chart_days(self) -> int:
        if self.settings is not None:
            return self.settings.get_int("chart_days", 30)
        return 30

    def _rolling_window(self) -> int:
        if self.settings is not None:
            return self.settings.get_int("rolling_window", 7)
        return 7

    @staticmethod
    def _today(today: datetime.date | None) -> str:
        return DateTools.format(today or datetime.date.today())

    def daily_average(self, date: str) -> Optional[float]:
        return daily_average(get_day(self.store.get(), date))

    def rolling_average(self, date: str, window: int | None = None) -> Optional[float]:
        return rolling_average(self.store.get(), date, window or self._rolling_window())

    def weight_series(self) -> List[Dict[str, float]]:
        return [{"date": d, "value": v} for d, v in weight_series(self.store.get())]

    def goal_series(
        self, metric: GoalMetric, start_date: str, end_date: str
    ) -> List[Dict[str, Optional[int]]]:
        days = (DateTools.parse(end_date) - DateTools.parse(start_date)).days + 1
        dates = DateTools.date_range(end_date, days)
        values = goal_achievement_series(self.store.get(), metric, dates)
        return [{"date": d, "value": v} for d, v in zip(dates, values)]

    def goal_rows(
        self, end_date: str | None = None, days: int | None = None
    ) -> Dict[str, object]:
        """All four goal series over the chart window ending at ``end_date``."""
        end_date = end_date or self._today(None)
        dates = DateTools.date_range(end_date, days or self._chart_days())
        state = self.store.get()
        return {
            "dates": dates,
            "rows": [
                {
                    "metric": metric.value,
                    "label": GOAL_LABELS[metric],
                    "values": goal_achievement_series(state, metric, dates),
                }
                for metric in GoalMetric
            ],
        }

    def weight_chart(
        self,
        end_date: str | None = None,
        days: int | None = None,
        window: int | None = None,
    ) -> List[Dict[str, Optional[float]]]:
        """Daily average and rolling average for each day of the chart window."""
        end_date = end_date or self._today(None)
        window = window or self._rolling_window()
        state = self.store.get()
        return [
            {
                "date": d,
                "average": daily_average(get_day(state, d)),
                "rolling": rolling_average(state, d, window),
            }
            for d in DateTools.date_range(end_date, days or self._chart_days())
        ]

    def weight_progress(self, today: datetime.date | None = None) -> Dict[str, Optional[float]]:
        """Progress from the first logged weight toward the goal weight.

        ``current`` is the rolling average at ``today``; ``progress`` is a
        percentage clamped to [0, 100] and is ``None`` until there is data.
        """
        goal = self._goal_weight()
        state = self.store.get()
        series = weight_series(state)
        start = series[0][1] if series else None
        current = rolling_average(state, self._today(today), self._rolling_window())
        if start is None or current is None:
            return {"goal": goal, "start": start, "current": current, "progress": None}
        total_loss = start - goal
        if total_loss > 0:
            progress = MathTools.clamp((start - current) / total_loss * 100, 0.0, 100.0)
        else:
            progress = 100.0
        return {
            "goal": goal,
            "start": start,
            "current": round(current, 2),
            "progress": round(progress, 1),
        }
