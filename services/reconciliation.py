import logging
from datetime import datetime
from typing import Iterable, Optional

from services.credentials import Credentials
from services.errors import CredentialError, ParseError, ValidationError

log = logging.getLogger(__name__)


def _now() -> datetime:
    """テスト時にモック可能な現在時刻取得（ローカルタイムゾーン付き）"""
    return datetime.now().astimezone()


def day_timestamp(year: int, month: int, day: int) -> str:
    """APIの記録と同じ形式の日付文字列（その日の0時, UTC表記）"""
    return f"{year}-{month:02d}-{day:02d}T00:00:00.000Z"


def expected_dates(calendar_data, month: int, year: int) -> list:
    """予定勤務時間が0より大きい日の日付文字列を返す"""
    try:
        by_day = calendar_data["expectedHoursByDay"]
        candidates = [
            day_timestamp(year, month, int(day))
            for day, day_data in by_day.items()
            if ((day_data or {}).get("expectedTime") or 0) > 0
        ]
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        raise ParseError(f"Unexpected expected-hours response: {e}") from e
    return candidates


def existing_dates(records) -> set:
    """既存記録のdateフィールドの集合（タイムゾーン正規化はしない）"""
    if not isinstance(records, list):
        raise ParseError("Unexpected attendance records response")
    return {record.get("date") for record in records if isinstance(record, dict) and record.get("date")}


class ReconciliationEngine:
    """予定勤務時間と既存記録を突き合わせ、未入力日を算出する"""

    def __init__(self, client):
        self._client = client

    async def scan(self, credentials: Optional[Credentials], month: int, year: int) -> list:
        if credentials is None or not credentials.token or not credentials.user_id:
            raise CredentialError("ブラウザから認証情報を取得できませんでした")
        if not 1 <= month <= 12:
            raise ValidationError(f"月の値が不正です: {month}")

        calendar_data = await self._client.get_expected_hours(credentials, month, year)
        candidates = expected_dates(calendar_data, month, year)

        records = await self._client.find_records(credentials, month, year)
        existing = existing_dates(records)

        # 暦日で比較する（ローカルの今日以降は対象外）
        today = _now().date().isoformat()

        missing = sorted(
            date_str for date_str in candidates
            if date_str not in existing and date_str[:10] < today
        )
        log.info(
            "Scan %04d-%02d: %d expected, %d existing, %d missing",
            year, month, len(candidates), len(existing), len(missing),
        )
        return missing


def select_dates(missing: list, wanted: Optional[Iterable[str]] = None) -> list:
    """未入力日のうち指定日（YYYY-MM-DD）のみを残す。未指定なら全件"""
    if not wanted:
        return list(missing)

    wanted = set(wanted)
    selected = [date_str for date_str in missing if date_str[:10] in wanted]
    unknown = wanted - {date_str[:10] for date_str in selected}
    for day in sorted(unknown):
        log.warning("Date %s is not a missing date; ignored", day)
    return selected
