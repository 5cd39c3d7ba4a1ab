from __future__ import annotations
import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from day_service import get_day, is_day_complete
from db import RecordStore
from models import AppState
from plan_service import (
    is_month_plan_complete,
    is_month_plan_confirmed,
    is_week_plan_complete,
    is_week_plan_confirmed,
)
from tools import DateTools


class GateKind(str, Enum):
    NONE = "none"
    MONTH_PLAN_REQUIRED = "month_plan_required"
    WEEK_PLAN_REQUIRED = "week_plan_required"
    PREVIOUS_DAY_REQUIRED = "previous_day_required"


class Gate(BaseModel):
    """The single requirement blocking normal use, if any.

    ``key`` is the month key, week key or date the requirement refers to.
    ``can_confirm`` tells whether the blocking plan is complete, i.e. whether
    the confirm action may be offered.
    """

    model_config = ConfigDict(frozen=True)

    kind: GateKind
    key: Optional[str] = None
    can_confirm: bool = False

    @property
    def blocking(self) -> bool:
        return self.kind != GateKind.NONE


def evaluate_gate(state: AppState, today: datetime.date) -> Gate:
    """Month plan first, then week plan, then yesterday's check-in."""
    month_key = DateTools.month_key_for(today)
    month_complete = is_month_plan_complete(state, month_key)
    if not (month_complete and is_month_plan_confirmed(state, month_key)):
        return Gate(
            kind=GateKind.MONTH_PLAN_REQUIRED,
            key=month_key,
            can_confirm=month_complete,
        )

    week_key = DateTools.week_key_for(today)
    week_complete = is_week_plan_complete(state, week_key)
    if not (week_complete and is_week_plan_confirmed(state, week_key)):
        return Gate(
            kind=GateKind.WEEK_PLAN_REQUIRED,
            key=week_key,
            can_confirm=week_complete,
        )

    yesterday = DateTools.format(today - datetime.timedelta(days=1))
    if DateTools.parse(yesterday) < DateTools.parse(state.tracking_start):
        return Gate(kind=GateKind.NONE)
    if not is_day_complete(state, get_day(state, yesterday), yesterday):
        return Gate(kind=GateKind.PREVIOUS_DAY_REQUIRED, key=yesterday)
    return Gate(kind=GateKind.NONE)


class GateService:
    """Evaluates the gate against the current snapshot on every call."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def current(self, today: datetime.date | None = None) -> Gate:
        return evaluate_gate(self.store.get(), today or datetime.date.today())
