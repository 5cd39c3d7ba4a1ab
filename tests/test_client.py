import unittest
import sys
import os
import datetime
from fastapi.testclient import TestClient
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from client import TrackerClient
from rest_api import TrackerAPI


class ClientTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_client.db"
        self.yaml_path = "test_client.yaml"
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)
        self.api = TrackerAPI(
            db_path=self.db_path,
            yaml_path=self.yaml_path,
            today=lambda: datetime.date(2024, 6, 12),
        )
        self.client = TrackerClient(
            base_url="http://testserver", session=TestClient(self.api.app)
        )

    def tearDown(self) -> None:
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def test_plan_and_check_in(self) -> None:
        self.assertEqual(self.client.gate()["kind"], "month_plan_required")
        self.assertFalse(self.client.plan_fast("2024-06", "2024-06-30"))
        self.assertTrue(self.client.plan_fast("2024-06", "2024-06-03"))
        self.client.confirm_month("2024-06")
        self.assertTrue(
            self.client.plan_week("2024-06-09", ["2024-06-10", "2024-06-11", "2024-06-13"])
        )
        self.client.confirm_week("2024-06-09")
        self.assertEqual(self.client.gate("2024-06-13")["key"], "2024-06-12")

        self.client.set_answer("2024-06-12", "diet_exception", "yes")
        self.client.set_weight("2024-06-12", "morning", 150.2)
        self.client.set_weight("2024-06-12", "night", 149.8)
        self.assertTrue(self.client.day("2024-06-12")["complete"])
        self.assertEqual(self.client.gate("2024-06-13")["kind"], "none")
        series = self.client.weight_series()
        self.assertEqual([p["date"] for p in series], ["2024-06-12"])
        self.assertAlmostEqual(series[0]["value"], 150.0)

    def test_rejected_week_plan(self) -> None:
        self.assertFalse(
            self.client.plan_week(
                "2024-06-09", ["2024-06-10", "2024-06-11", "2024-06-12", "2024-06-13"]
            )
        )


if __name__ == "__main__":
    unittest.main()
