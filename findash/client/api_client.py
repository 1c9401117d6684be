import logging
from typing import Any, Dict, Optional

import requests

from findash import config

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class DashboardClient:
    """
    HTTP client for the dashboard API. Holds the bearer token it was given or
    obtained through login/register; nothing is stored process-wide.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        session=None,
        timeout: float = 10,
    ):
        self.base_url = (base_url or config.API_URL).rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        auth: bool = True,
    ) -> dict:
        headers = {}
        if auth and self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        response = self.session.request(
            method,
            f"{self.base_url}{path}",
            params=params,
            json=json,
            headers=headers,
            timeout=self.timeout,
        )
        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.status_code >= 400:
            message = body.get("message") or f"Request to {path} failed"
            logger.debug("API error %s on %s %s", response.status_code, method, path)
            raise ApiError(response.status_code, message)
        return body

    # --- auth ---

    def login(self, email: str, password: str) -> dict:
        body = self._request(
            "POST", "/auth/login", json={"email": email, "password": password}, auth=False
        )
        self.token = body.get("token")
        return body

    def register(self, name: str, email: str, password: str) -> dict:
        body = self._request(
            "POST",
            "/auth/register",
            json={"name": name, "email": email, "password": password},
            auth=False,
        )
        self.token = body.get("token")
        return body

    def verify_token(self) -> dict:
        return self._request("GET", "/auth/verify")

    def logout(self) -> None:
        try:
            self._request("POST", "/auth/logout")
        finally:
            self.token = None

    # --- transactions ---

    def get_transactions(
        self, page: int = 1, limit: int = 10, filters: Optional[Dict[str, Any]] = None
    ) -> dict:
        params = {"page": page, "limit": limit}
        params.update(filters or {})
        return self._request("GET", "/transactions", params=params)

    def get_transaction(self, transaction_id: int) -> dict:
        return self._request("GET", f"/transactions/{transaction_id}")

    def get_stats(self) -> dict:
        return self._request("GET", "/transactions/stats")

    def get_chart_data(self, period: str = "monthly", year: Optional[int] = None) -> dict:
        params = {"period": period}
        if year is not None:
            params["year"] = year
        return self._request("GET", "/transactions/chart-data", params=params)

    def get_recent_transactions(self, limit: int = 5) -> dict:
        return self._request("GET", "/transactions/recent", params={"limit": limit})

    def create_transaction(self, data: Dict[str, Any]) -> dict:
        return self._request("POST", "/transactions", json=data)

    def update_transaction(self, transaction_id: int, data: Dict[str, Any]) -> dict:
        return self._request("PUT", f"/transactions/{transaction_id}", json=data)

    def delete_transaction(self, transaction_id: int) -> dict:
        return self._request("DELETE", f"/transactions/{transaction_id}")
