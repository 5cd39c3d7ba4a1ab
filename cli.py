import argparse
import csv
import datetime
import json
import logging
import shutil

from config import default_db_path
from db import RecordStore
from day_service import DayService, is_day_complete, get_day
from gate_service import GateService
from models import DayField, DietRule, WeightSlot, YesNo
from plan_service import PlanService
from stats_service import daily_average
from tools import DateTools


EXPORT_COLUMNS = [
    "date",
    *[rule.value for rule in DietRule],
    *[field.value for field in DayField],
    "weight_morning",
    "weight_night",
    "weight_morning_missed",
    "weight_night_missed",
    "daily_average",
    "complete",
]


def export_days(db_path: str, fmt: str, out_path: str) -> None:
    """Write every recorded day to ``out_path`` as CSV or JSON."""
    state = RecordStore(db_path).get()
    if fmt == "json":
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump(state.to_document(), f, indent=2)
        return
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=EXPORT_COLUMNS)
        writer.writeheader()
        for date in sorted(state.days):
            day = get_day(state, date)
            row = {"date": date}
            for rule in DietRule:
                answer = day.diet.get(rule)
                row[rule.value] = answer.value if answer else ""
            for field in DayField:
                answer = getattr(day, field.value)
                row[field.value] = answer.value if answer else ""
            row["weight_morning"] = "" if day.weight_morning is None else day.weight_morning
            row["weight_night"] = "" if day.weight_night is None else day.weight_night
            row["weight_morning_missed"] = int(day.weight_morning_missed)
            row["weight_night_missed"] = int(day.weight_night_missed)
            avg = daily_average(day)
            row["daily_average"] = "" if avg is None else round(avg, 2)
            row["complete"] = int(is_day_complete(state, day, date))
            writer.writerow(row)


def import_state(json_path: str, db_path: str) -> None:
    """Replace the stored state with a previously exported JSON document."""
    with open(json_path, "r", encoding="utf-8") as f:
        document = json.load(f)
    RecordStore(db_path).import_document(document)


def backup_db(db_path: str | None, backup_path: str) -> None:
    shutil.copy(db_path or default_db_path(), backup_path)


def restore_db(backup_path: str, db_path: str | None) -> None:
    shutil.copy(backup_path, db_path or default_db_path())


def gate_status(db_path: str, today: datetime.date | None = None) -> str:
    gate = GateService(RecordStore(db_path)).current(today)
    if not gate.blocking:
        return "No blocking requirement"
    return f"{gate.kind.value}: {gate.key}"


def demo_data(db_path: str, today: datetime.date | None = None) -> None:
    """Populate a fresh tracker with plans and a week of check-ins."""
    today = today or datetime.date.today()
    start = today - datetime.timedelta(days=7)
    store = RecordStore(db_path, today=lambda: start)
    if store.get().days:
        print("Tracker already contains check-ins")
        return
    plans = PlanService(store)
    days = DayService(store)
    week_key = DateTools.week_key_for(today)
    plans.replace_week_plan(week_key, DateTools.week_dates(week_key)[1:6:2])
    plans.confirm_week_plan(week_key)
    month_key = DateTools.month_key_for(today)
    low, _high = DateTools.fast_start_bounds(month_key)
    plans.set_fast_start(month_key, low)
    plans.confirm_month_plan(month_key)
    for offset in range(7, 0, -1):
        date = DateTools.format(today - datetime.timedelta(days=offset))
        days.set_day_value(date, DayField.DIET_EXCEPTION, YesNo.NO)
        days.set_day_value(date, DayField.DESSERT_PASS, YesNo.NO)
        days.set_day_value(date, DayField.MEAL_PASS, YesNo.NO)
        for rule in DietRule:
            days.set_diet_value(date, rule, YesNo.NO)
        days.set_weight_value(date, WeightSlot.MORNING, 185.0 - offset * 0.2)
        days.set_weight_value(date, WeightSlot.NIGHT, 186.0 - offset * 0.2)
        days.set_day_value(date, DayField.WEIGHT_LIFTING_DONE, YesNo.YES)
        days.set_day_value(date, DayField.WATER_FAST_DONE, YesNo.YES)
    print("Demo data inserted")


def main() -> None:
    parser = argparse.ArgumentParser(description="Goal tracker utility commands")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="cmd", required=True)

    status = sub.add_parser("status")
    status.add_argument("--db", default=None)

    exp = sub.add_parser("export")
    exp.add_argument("--db", default=None)
    exp.add_argument("--fmt", choices=["csv", "json"], default="csv")
    exp.add_argument("--out", default="days.csv")

    imp = sub.add_parser("import")
    imp.add_argument("--json", required=True)
    imp.add_argument("--db", default=None)

    bkp = sub.add_parser("backup")
    bkp.add_argument("--db", default=None)
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")
    rst.add_argument("--db", default=None)

    demo = sub.add_parser("demo")
    demo.add_argument("--db", default=None)

    serve = sub.add_parser("serve")
    serve.add_argument("--db", default=None)
    serve.add_argument("--yaml", default="settings.yaml")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper())

    if args.cmd == "status":
        print(gate_status(args.db))
    elif args.cmd == "export":
        export_days(args.db, args.fmt, args.out)
    elif args.cmd == "import":
        import_state(args.json, args.db)
    elif args.cmd == "backup":
        backup_db(args.db, args.out)
    elif args.cmd == "restore":
        restore_db(args.src, args.db)
    elif args.cmd == "demo":
        demo_data(args.db)
    elif args.cmd == "serve":
        import uvicorn
        from rest_api import create_app

        uvicorn.run(create_app(args.db, args.yaml), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
