import os
import sys
import datetime
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from day_service import (
    DayService,
    diet_requirement_satisfied,
    get_day,
    is_day_complete,
    is_fast_day,
    is_lifting_day,
    set_day_value,
    set_diet_value,
    set_weight_value,
    toggle_weight_missed,
    toggle_yes_no,
)
from db import RecordStore
from models import (
    AppState,
    DayField,
    DayRecord,
    DietChecks,
    DietRule,
    FastPlan,
    PassKind,
    WeekPlan,
    WeightSlot,
    YesNo,
)

DATE = "2024-06-12"


def answered_day(date: str = DATE, **overrides) -> DayRecord:
    values = dict(
        date=date,
        diet=DietChecks(**{rule.value: YesNo.NO for rule in DietRule}),
        diet_exception=YesNo.NO,
        dessert_pass=YesNo.NO,
        meal_pass=YesNo.NO,
        weight_morning=180.0,
        weight_night=181.0,
    )
    values.update(overrides)
    return DayRecord(**values)


def make_state(**updates) -> AppState:
    return AppState.default(datetime.date(2024, 6, 1)).model_copy(update=updates)


class CompletenessTestCase(unittest.TestCase):
    def test_empty_day_is_incomplete(self) -> None:
        state = make_state()
        self.assertFalse(is_day_complete(state, get_day(state, DATE), DATE))

    def test_fully_answered_day_is_complete(self) -> None:
        state = make_state()
        self.assertTrue(is_day_complete(state, answered_day(), DATE))

    def test_diet_exception_must_be_answered(self) -> None:
        state = make_state()
        self.assertFalse(is_day_complete(state, answered_day(diet_exception=None), DATE))

    def test_diet_exception_waives_rules_and_passes(self) -> None:
        state = make_state()
        day = answered_day(
            diet=DietChecks(),
            diet_exception=YesNo.YES,
            dessert_pass=None,
            meal_pass=None,
        )
        self.assertTrue(is_day_complete(state, day, DATE))

    def test_every_rule_required_without_exception(self) -> None:
        state = make_state()
        for rule in DietRule:
            answers = {r.value: YesNo.NO for r in DietRule}
            answers[rule.value] = None
            day = answered_day(diet=DietChecks(**answers))
            self.assertFalse(is_day_complete(state, day, DATE), rule)

    def test_both_passes_required_without_exception(self) -> None:
        state = make_state()
        self.assertFalse(is_day_complete(state, answered_day(dessert_pass=None), DATE))
        self.assertFalse(is_day_complete(state, answered_day(meal_pass=None), DATE))

    def test_missed_weight_counts_as_answered(self) -> None:
        state = make_state()
        day = answered_day(weight_night=None, weight_night_missed=True)
        self.assertTrue(is_day_complete(state, day, DATE))
        day = answered_day(weight_night=None)
        self.assertFalse(is_day_complete(state, day, DATE))
        day = answered_day(weight_morning=float("nan"))
        self.assertFalse(is_day_complete(state, day, DATE))

    def test_lifting_answer_required_only_on_lifting_day(self) -> None:
        state = make_state(week_plans={"2024-06-09": WeekPlan(dates=(DATE,))})
        self.assertTrue(is_lifting_day(state, DATE))
        self.assertFalse(is_lifting_day(state, "2024-06-13"))
        self.assertFalse(is_day_complete(state, answered_day(), DATE))
        day = answered_day(weight_lifting_done=YesNo.NO)
        self.assertTrue(is_day_complete(state, day, DATE))
        other = answered_day("2024-06-13")
        self.assertTrue(is_day_complete(state, other, "2024-06-13"))

    def test_fast_answer_required_only_on_fast_day(self) -> None:
        dates = ("2024-06-11", "2024-06-12", "2024-06-13")
        state = make_state(fast_plans={"2024-06": FastPlan(dates=dates)})
        self.assertTrue(is_fast_day(state, DATE))
        self.assertFalse(is_fast_day(state, "2024-06-14"))
        self.assertFalse(is_day_complete(state, answered_day(), DATE))
        day = answered_day(water_fast_done=YesNo.YES)
        self.assertTrue(is_day_complete(state, day, DATE))


class DietRequirementTestCase(unittest.TestCase):
    def test_all_rules_clear(self) -> None:
        for dessert in [None, YesNo.NO, YesNo.YES]:
            for meal in [None, YesNo.NO, YesNo.YES]:
                day = answered_day(dessert_pass=dessert, meal_pass=meal)
                self.assertTrue(diet_requirement_satisfied(day))

    def test_rule_broken_without_exception(self) -> None:
        diet = DietChecks(**{rule.value: YesNo.NO for rule in DietRule}).model_copy(
            update={"refined_carbs": YesNo.YES}
        )
        self.assertFalse(diet_requirement_satisfied(answered_day(diet=diet)))
        self.assertTrue(
            diet_requirement_satisfied(answered_day(diet=diet, meal_pass=YesNo.YES))
        )
        self.assertTrue(
            diet_requirement_satisfied(answered_day(diet=diet, dessert_pass=YesNo.YES))
        )
        self.assertTrue(
            diet_requirement_satisfied(answered_day(diet=diet, diet_exception=YesNo.YES))
        )

    def test_unanswered_rules_are_not_clear(self) -> None:
        self.assertFalse(diet_requirement_satisfied(DayRecord.empty(DATE)))


class DayMutationTestCase(unittest.TestCase):
    def test_mutations_return_new_snapshot(self) -> None:
        state = make_state()
        updated = set_diet_value(state, DATE, DietRule.HIGH_CARB_DAIRY, YesNo.NO)
        self.assertEqual(state.days, {})
        self.assertEqual(updated.days[DATE].diet.get(DietRule.HIGH_CARB_DAIRY), YesNo.NO)
        self.assertIsNone(updated.days[DATE].diet.get(DietRule.REFINED_CARBS))

    def test_set_day_value(self) -> None:
        state = set_day_value(make_state(), DATE, DayField.MEAL_PASS, YesNo.YES)
        self.assertEqual(state.days[DATE].meal_pass, YesNo.YES)
        state = set_day_value(state, DATE, DayField.MEAL_PASS, None)
        self.assertIsNone(state.days[DATE].meal_pass)

    def test_weight_value_clears_missed(self) -> None:
        state = toggle_weight_missed(make_state(), DATE, WeightSlot.MORNING)
        self.assertTrue(state.days[DATE].weight_morning_missed)
        state = set_weight_value(state, DATE, WeightSlot.MORNING, 182.5)
        self.assertEqual(state.days[DATE].weight_morning, 182.5)
        self.assertFalse(state.days[DATE].weight_morning_missed)

    def test_clearing_weight_keeps_missed_flag(self) -> None:
        state = toggle_weight_missed(make_state(), DATE, WeightSlot.NIGHT)
        state = set_weight_value(state, DATE, WeightSlot.NIGHT, "")
        self.assertIsNone(state.days[DATE].weight_night)
        self.assertTrue(state.days[DATE].weight_night_missed)

    def test_missed_clears_weight(self) -> None:
        state = set_weight_value(make_state(), DATE, WeightSlot.NIGHT, 181.0)
        state = toggle_weight_missed(state, DATE, WeightSlot.NIGHT)
        self.assertIsNone(state.days[DATE].weight_night)
        self.assertTrue(state.days[DATE].weight_night_missed)
        state = toggle_weight_missed(state, DATE, WeightSlot.NIGHT)
        self.assertFalse(state.days[DATE].weight_night_missed)
        self.assertIsNone(state.days[DATE].weight_night)

    def test_non_numeric_weight_is_absent(self) -> None:
        state = set_weight_value(make_state(), DATE, WeightSlot.MORNING, "heavy")
        self.assertIsNone(state.days[DATE].weight_morning)

    def test_toggle_yes_no(self) -> None:
        self.assertEqual(toggle_yes_no(None, YesNo.YES), YesNo.YES)
        self.assertIsNone(toggle_yes_no(YesNo.YES, YesNo.YES))
        self.assertEqual(toggle_yes_no(YesNo.YES, YesNo.NO), YesNo.NO)


class DayServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = "test_day_service.db"
        if os.path.exists(self.db):
            os.remove(self.db)
        self.store = RecordStore(self.db, today=lambda: datetime.date(2024, 6, 1))
        self.service = DayService(self.store)

    def tearDown(self) -> None:
        if os.path.exists(self.db):
            os.remove(self.db)

    def test_changes_are_persisted(self) -> None:
        self.service.set_day_value(DATE, DayField.DIET_EXCEPTION, YesNo.YES)
        self.service.set_weight_value(DATE, WeightSlot.MORNING, "180.4")
        self.service.toggle_weight_missed(DATE, WeightSlot.NIGHT)
        reloaded = RecordStore(self.db).get()
        day = reloaded.days[DATE]
        self.assertEqual(day.diet_exception, YesNo.YES)
        self.assertEqual(day.weight_morning, 180.4)
        self.assertTrue(day.weight_night_missed)
        self.assertTrue(self.service.is_complete(DATE))

    def test_press_day_value_toggles(self) -> None:
        self.service.press_day_value(DATE, DayField.DESSERT_PASS, YesNo.YES)
        self.assertEqual(self.service.get_day(DATE).dessert_pass, YesNo.YES)
        self.service.press_day_value(DATE, DayField.DESSERT_PASS, YesNo.YES)
        self.assertIsNone(self.service.get_day(DATE).dessert_pass)

    def test_checklist_reports_conflicts(self) -> None:
        self.service.set_day_value("2024-06-10", DayField.DESSERT_PASS, YesNo.YES)
        self.service.set_day_value(DATE, DayField.DESSERT_PASS, YesNo.YES)
        checklist = self.service.checklist(DATE)
        self.assertEqual(checklist["pass_conflicts"][PassKind.DESSERT.value], "2024-06-10")
        self.assertIsNone(checklist["pass_conflicts"][PassKind.MEAL.value])
        self.assertFalse(checklist["complete"])
        self.assertEqual(len(checklist["diet_rules"]), 5)

    def test_invalid_date_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.service.set_day_value("06/12/2024", DayField.MEAL_PASS, YesNo.NO)
        with self.assertRaises(ValueError):
            self.service.set_day_value("2024-W24-2", DayField.MEAL_PASS, YesNo.NO)
        self.assertEqual(self.store.get().days, {})


if __name__ == "__main__":
    unittest.main()
