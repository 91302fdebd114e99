"""Kenjo API（予定勤務時間・勤怠記録の検索・作成）のクライアント"""
import calendar
import json
import logging
from typing import Optional

import httpx

from services.credentials import Credentials
from services.errors import ParseError, RemoteError

log = logging.getLogger(__name__)


def month_range(month: int, year: int):
    """月初 00:00:00.000Z と月末 23:59:59.999Z の文字列を返す"""
    days_in_month = calendar.monthrange(year, month)[1]
    start = f"{year}-{month:02d}-01T00:00:00.000Z"
    end = f"{year}-{month:02d}-{days_in_month:02d}T23:59:59.999Z"
    return start, end


class KenjoClient:
    """Kenjo APIへのリクエストとレスポンスの対応付けのみを行う"""

    def __init__(self, config: dict, user_agent: str = "", client: Optional[httpx.AsyncClient] = None):
        self._config = config["kenjo"]
        self._urls = self._config["api_urls"]
        self._user_agent = user_agent
        self._client = client or httpx.AsyncClient()

    def _headers(self, token: str) -> dict:
        return {
            "accept": self._config["accept"],
            "accept-language": self._config["accept_language"],
            "authorization": f"Bearer {token}",
            "content-type": "application/json",
            "origin": self._config["origin"],
            "referer": self._config["referer"],
            "user-agent": self._user_agent,
        }

    async def _request(self, method: str, url: str, token: str, payload=None) -> httpx.Response:
        try:
            return await self._client.request(
                method,
                url,
                headers=self._headers(token),
                content=json.dumps(payload) if payload is not None else None,
            )
        except httpx.HTTPError as e:
            raise RemoteError(f"{method} {url} failed: {e}") from e

    @staticmethod
    def _decode(response: httpx.Response):
        try:
            return response.json()
        except ValueError as e:
            raise ParseError("Failed to parse response") from e

    async def get_expected_hours(self, credentials: Credentials, month: int, year: int) -> dict:
        """指定月の予定勤務時間を取得（APIの月は0始まり）"""
        url = f"{self._urls['expected_hours']}{credentials.user_id}/{month - 1}/{year}/true"
        response = await self._request("GET", url, credentials.token)
        if response.status_code != 200:
            raise RemoteError(
                f"API returned status {response.status_code}",
                status=response.status_code,
                body=response.text,
            )
        return self._decode(response)

    async def find_records(self, credentials: Credentials, month: int, year: int) -> list:
        """指定月の既存勤怠記録を取得（削除済みは除外）"""
        start, end = month_range(month, year)
        payload = {
            "_userId": credentials.user_id,
            "date": {"$gte": start, "$lte": end},
            "_deleted": False,
        }
        response = await self._request("POST", self._urls["attendance_find"], credentials.token, payload)
        if response.status_code != 200:
            raise RemoteError(
                f"API returned status {response.status_code}",
                status=response.status_code,
                body=response.text,
            )
        return self._decode(response)

    async def create_record(self, credentials: Credentials, date_str: str, start_time: int, end_time: int) -> None:
        """勤怠記録を1件作成"""
        payload = {
            "_userId": credentials.user_id,
            "ownerId": credentials.user_id,
            "date": date_str,
            "startTime": start_time,
            "endTime": end_time,
            "breaks": [],
            "_changesTracking": [],
            "_deleted": False,
            "_approved": False,
            "interface": "attendance-tab",
        }
        log.debug("Creating entry %s %d-%d", date_str, start_time, end_time)
        response = await self._request("POST", self._urls["attendance_create"], credentials.token, payload)
        if not 200 <= response.status_code < 300:
            raise RemoteError(
                f"API returned status {response.status_code}: {response.text}",
                status=response.status_code,
                body=response.text,
            )

    async def close(self) -> None:
        await self._client.aclose()
