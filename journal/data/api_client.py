from __future__ import annotations

from typing import Any

import requests
from requests.adapters import HTTPAdapter


class ApiError(Exception):
    def __init__(self, status_code: int, detail: str, code: str | None = None):
        super().__init__(f"API error {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail
        self.code = code


def _build_session():
    session = requests.Session()
    # Failed calls surface once; callers decide whether to retry.
    adapter = HTTPAdapter(max_retries=0, pool_connections=10, pool_maxsize=10)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def _error_from_response(response) -> ApiError:
    code = None
    try:
        payload = response.json()
    except ValueError:
        payload = response.text
    if isinstance(payload, dict):
        code = payload.get("code")
        detail = payload.get("detail") or payload.get("message") or payload.get("error") or payload
    else:
        detail = payload
    if not isinstance(detail, str):
        detail = str(detail)
    return ApiError(response.status_code, detail or response.reason or "", code=code)


class RestClient:
    def __init__(self, base_url: str, api_key: str, timeout: int = 10, session=None):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or _build_session()

    def request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: dict | None = None,
        access_token: str | None = None,
    ) -> Any:
        if not self.base_url:
            raise RuntimeError("JOURNAL_API_URL not configured")
        if not self.api_key:
            raise RuntimeError("JOURNAL_API_KEY not configured")
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {access_token or self.api_key}",
        }
        url = f"{self.base_url}{path}"
        response = self.session.request(method, url, params=params, json=json, headers=headers, timeout=self.timeout)
        if not response.ok:
            raise _error_from_response(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()
