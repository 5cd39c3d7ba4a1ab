import datetime
from typing import List, Optional

from fastapi import APIRouter, Body, FastAPI, HTTPException

from config import APP_VERSION
from conflict_service import get_pass_conflict
from day_service import DayService
from db import RecordStore, SettingsRepository
from gate_service import GateService
from models import DayField, DietRule, PassKind, WeightSlot, YesNo
from plan_service import PlanService
from stats_service import GoalMetric, StatisticsService
from tools import DateTools


class TrackerAPI:
    """Provides REST endpoints for the daily goal tracker."""

    def __init__(
        self,
        db_path: str | None = None,
        yaml_path: str = "settings.yaml",
        *,
        today=None,
    ) -> None:
        self._today = today or datetime.date.today
        self.store = RecordStore(db_path, today=self._today)
        self.db_path = self.store.db_path
        self.settings = SettingsRepository(self.db_path, yaml_path)
        self.days = DayService(self.store)
        self.plans = PlanService(self.store)
        self.gates = GateService(self.store)
        self.statistics = StatisticsService(self.store, self.settings)
        self.app = FastAPI(
            title="Goal Tracker API",
            description="REST API for daily check-ins, plans and goal analytics",
            version=APP_VERSION,
        )
        self._setup_routes()

    @staticmethod
    def _check_date(value: str, name: str = "date") -> str:
        try:
            DateTools.parse(value)
        except ValueError:
            raise HTTPException(
                status_code=400, detail=f"{name} must be in YYYY-MM-DD format"
            )
        return value

    @staticmethod
    def _check_week_key(week_key: str) -> str:
        try:
            DateTools.parse_week_key(week_key)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return week_key

    @staticmethod
    def _check_month_key(month_key: str) -> str:
        try:
            DateTools.parse_month_key(month_key)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return month_key

    @staticmethod
    def _status(applied: bool) -> dict:
        return {"status": "updated" if applied else "ignored"}

    def _setup_routes(self) -> None:
        days_router = APIRouter(prefix="/days", tags=["Days"])
        weeks_router = APIRouter(prefix="/weeks", tags=["Weeks"])
        months_router = APIRouter(prefix="/months", tags=["Months"])
        stats_router = APIRouter(prefix="/stats", tags=["Statistics"])

        @self.app.get(
            "/health",
            summary="Health check",
            description="Verify API and database connectivity.",
        )
        def health():
            """Return API and database connection status."""
            try:
                self.store.get()
                return {"status": "ok"}
            except Exception as e:  # pragma: no cover - connectivity failure
                raise HTTPException(status_code=500, detail=str(e))

        @self.app.get("/state")
        def get_state():
            return self.store.get().to_document()

        @self.app.get("/gate")
        def get_gate(today: str = None):
            day = (
                DateTools.parse(self._check_date(today, "today"))
                if today
                else self._today()
            )
            gate = self.gates.current(day)
            return {
                "kind": gate.kind.value,
                "key": gate.key,
                "can_confirm": gate.can_confirm,
                "blocking": gate.blocking,
            }

        @days_router.get("/{date}")
        def get_day(date: str):
            return self.days.checklist(self._check_date(date))

        @days_router.put("/{date}/diet/{rule}")
        def set_diet_value(date: str, rule: DietRule, value: Optional[YesNo] = None):
            self.days.set_diet_value(self._check_date(date), rule, value)
            return self._status(True)

        @days_router.put("/{date}/answers/{field}")
        def set_day_value(date: str, field: DayField, value: Optional[YesNo] = None):
            self.days.set_day_value(self._check_date(date), field, value)
            return self._status(True)

        @days_router.post("/{date}/answers/{field}/press")
        def press_day_value(date: str, field: DayField, pressed: YesNo):
            self.days.press_day_value(self._check_date(date), field, pressed)
            return self._status(True)

        @days_router.put("/{date}/weights/{slot}")
        def set_weight(date: str, slot: WeightSlot, value: str = None):
            self.days.set_weight_value(self._check_date(date), slot, value)
            return self._status(True)

        @days_router.post("/{date}/weights/{slot}/missed")
        def toggle_weight_missed(date: str, slot: WeightSlot):
            self.days.toggle_weight_missed(self._check_date(date), slot)
            return self._status(True)

        @days_router.get("/{date}/pass_conflict/{kind}")
        def pass_conflict(date: str, kind: PassKind):
            state = self.store.get()
            return {"conflict": get_pass_conflict(state, self._check_date(date), kind)}

        @weeks_router.get("/{week_key}")
        def get_week(week_key: str):
            return self.plans.week_summary(self._check_week_key(week_key))

        @weeks_router.put("/{week_key}")
        def replace_week(week_key: str, dates: List[str] = Body(..., embed=True)):
            applied = self.plans.replace_week_plan(self._check_week_key(week_key), dates)
            return self._status(applied)

        @weeks_router.post("/{week_key}/days/{date}")
        def toggle_lifting_day(week_key: str, date: str, selected: bool = True):
            applied = self.plans.toggle_lifting_day(
                self._check_week_key(week_key), self._check_date(date), selected
            )
            return self._status(applied)

        @weeks_router.post("/{week_key}/confirm")
        def confirm_week(week_key: str):
            try:
                self.plans.confirm_week_plan(self._check_week_key(week_key))
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"status": "confirmed"}

        @months_router.get("/{month_key}")
        def get_month(month_key: str):
            return self.plans.fast_summary(self._check_month_key(month_key))

        @months_router.put("/{month_key}")
        def replace_month(month_key: str, dates: List[str] = Body(..., embed=True)):
            applied = self.plans.replace_fast_plan(self._check_month_key(month_key), dates)
            return self._status(applied)

        @months_router.put("/{month_key}/start")
        def set_fast_start(month_key: str, start: str = None):
            applied = self.plans.set_fast_start(self._check_month_key(month_key), start)
            return self._status(applied)

        @months_router.post("/{month_key}/confirm")
        def confirm_month(month_key: str):
            try:
                self.plans.confirm_month_plan(self._check_month_key(month_key))
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"status": "confirmed"}

        @stats_router.get("/daily_average/{date}")
        def stats_daily_average(date: str):
            return {"average": self.statistics.daily_average(self._check_date(date))}

        @stats_router.get("/rolling_average/{date}")
        def stats_rolling_average(date: str, window: int = None):
            if window is not None and window < 1:
                raise HTTPException(status_code=400, detail="window must be positive")
            return {
                "average": self.statistics.rolling_average(self._check_date(date), window)
            }

        @stats_router.get("/weight_series")
        def stats_weight_series():
            return self.statistics.weight_series()

        @stats_router.get("/goals")
        def stats_goals(end_date: str = None, days: int = None):
            if end_date is not None:
                self._check_date(end_date, "end_date")
            if days is not None and days < 1:
                raise HTTPException(status_code=400, detail="days must be positive")
            return self.statistics.goal_rows(
                end_date or DateTools.format(self._today()), days
            )

        @stats_router.get("/goals/{metric}")
        def stats_goal_series(metric: GoalMetric, start_date: str, end_date: str):
            return self.statistics.goal_series(
                metric,
                self._check_date(start_date, "start_date"),
                self._check_date(end_date, "end_date"),
            )

        @stats_router.get("/weight_chart")
        def stats_weight_chart(end_date: str = None, days: int = None):
            if end_date is not None:
                self._check_date(end_date, "end_date")
            if days is not None and days < 1:
                raise HTTPException(status_code=400, detail="days must be positive")
            return self.statistics.weight_chart(
                end_date or DateTools.format(self._today()), days
            )

        @stats_router.get("/weight_progress")
        def stats_weight_progress():
            return self.statistics.weight_progress(self._today())

        @self.app.get("/settings/general")
        def get_general_settings():
            return self.settings.all_settings()

        @self.app.post("/settings/general")
        def update_general_settings(
            goal_weight: float = None,
            chart_days: int = None,
            rolling_window: int = None,
        ):
            values = {
                k: v
                for k, v in {
                    "goal_weight": goal_weight,
                    "chart_days": chart_days,
                    "rolling_window": rolling_window,
                }.items()
                if v is not None
            }
            try:
                self.settings.update(**values)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"status": "updated"}

        self.app.include_router(days_router)
        self.app.include_router(weeks_router)
        self.app.include_router(months_router)
        self.app.include_router(stats_router)


def create_app(db_path: str | None = None, yaml_path: str = "settings.yaml") -> FastAPI:
    return TrackerAPI(db_path=db_path, yaml_path=yaml_path).app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app())
