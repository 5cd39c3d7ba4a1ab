import requests
from typing import List, Optional

class TrackerClient:
    """Simple REST client for the goal tracker API."""

    def __init__(self, base_url: str = "http://localhost:8000", session=None) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _get(self, path: str, **params):
        resp = self.session.get(f"{self.base_url}{path}", params=params)
        resp.raise_for_status()
        return resp.json()

    def gate(self, today: Optional[str] = None) -> dict:
        params = {"today": today} if today else {}
        return self._get("/gate", **params)

    def day(self, date: str) -> dict:
        return self._get(f"/days/{date}")

    def set_answer(self, date: str, field: str, value: Optional[str]) -> None:
        params = {"value": value} if value else {}
        resp = self.session.put(f"{self.base_url}/days/{date}/answers/{field}", params=params)
        resp.raise_for_status()

    def set_diet(self, date: str, rule: str, value: Optional[str]) -> None:
        params = {"value": value} if value else {}
        resp = self.session.put(f"{self.base_url}/days/{date}/diet/{rule}", params=params)
        resp.raise_for_status()

    def set_weight(self, date: str, slot: str, value: Optional[float]) -> None:
        params = {"value": value} if value is not None else {}
        resp = self.session.put(f"{self.base_url}/days/{date}/weights/{slot}", params=params)
        resp.raise_for_status()

    def plan_week(self, week_key: str, dates: List[str]) -> bool:
        resp = self.session.put(f"{self.base_url}/weeks/{week_key}", json={"dates": dates})
        resp.raise_for_status()
        return resp.json()["status"] == "updated"

    def confirm_week(self, week_key: str) -> None:
        resp = self.session.post(f"{self.base_url}/weeks/{week_key}/confirm")
        resp.raise_for_status()

    def plan_fast(self, month_key: str, start: Optional[str]) -> bool:
        params = {"start": start} if start else {}
        resp = self.session.put(f"{self.base_url}/months/{month_key}/start", params=params)
        resp.raise_for_status()
        return resp.json()["status"] == "updated"

    def confirm_month(self, month_key: str) -> None:
        resp = self.session.post(f"{self.base_url}/months/{month_key}/confirm")
        resp.raise_for_status()

    def weight_series(self) -> list:
        return self._get("/stats/weight_series")
