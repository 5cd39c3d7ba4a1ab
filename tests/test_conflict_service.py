import os
import sys
import datetime
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from conflict_service import get_pass_conflict
from day_service import set_day_value
from models import AppState, DayField, PassKind, YesNo


class PassConflictTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.state = AppState.default(datetime.date(2024, 6, 1))

    def test_no_conflict_without_other_use(self) -> None:
        state = set_day_value(self.state, "2024-06-12", DayField.MEAL_PASS, YesNo.YES)
        self.assertIsNone(get_pass_conflict(state, "2024-06-12", PassKind.MEAL))

    def test_other_day_same_week_conflicts(self) -> None:
        state = set_day_value(self.state, "2024-06-10", DayField.DESSERT_PASS, YesNo.YES)
        self.assertEqual(
            get_pass_conflict(state, "2024-06-12", PassKind.DESSERT), "2024-06-10"
        )
        self.assertEqual(
            get_pass_conflict(state, "2024-06-15", PassKind.DESSERT), "2024-06-10"
        )
        self.assertIsNone(get_pass_conflict(state, "2024-06-10", PassKind.DESSERT))

    def test_kinds_are_independent(self) -> None:
        state = set_day_value(self.state, "2024-06-10", DayField.DESSERT_PASS, YesNo.YES)
        self.assertIsNone(get_pass_conflict(state, "2024-06-12", PassKind.MEAL))

    def test_other_weeks_never_conflict(self) -> None:
        state = set_day_value(self.state, "2024-06-08", DayField.MEAL_PASS, YesNo.YES)
        state = set_day_value(state, "2024-06-16", DayField.MEAL_PASS, YesNo.YES)
        self.assertIsNone(get_pass_conflict(state, "2024-06-12", PassKind.MEAL))
        self.assertIsNone(get_pass_conflict(state, "2024-06-09", PassKind.MEAL))

    def test_first_supported_week(self) -> None:
        state = set_day_value(self.state, "1900-01-01", DayField.MEAL_PASS, YesNo.YES)
        self.assertIsNone(get_pass_conflict(state, "1900-01-01", PassKind.MEAL))
        self.assertEqual(get_pass_conflict(state, "1900-01-02", PassKind.MEAL), "1900-01-01")

    def test_no_answer_does_not_conflict(self) -> None:
        state = set_day_value(self.state, "2024-06-10", DayField.MEAL_PASS, YesNo.NO)
        self.assertIsNone(get_pass_conflict(state, "2024-06-12", PassKind.MEAL))

    def test_both_days_report_each_other(self) -> None:
        state = set_day_value(self.state, "2024-06-10", DayField.MEAL_PASS, YesNo.YES)
        state = set_day_value(state, "2024-06-13", DayField.MEAL_PASS, YesNo.YES)
        self.assertEqual(get_pass_conflict(state, "2024-06-10", PassKind.MEAL), "2024-06-13")
        self.assertEqual(get_pass_conflict(state, "2024-06-13", PassKind.MEAL), "2024-06-10")


if __name__ == "__main__":
    unittest.main()
