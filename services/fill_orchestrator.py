import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from services.credentials import Credentials
from services.entropy import DEFAULT_ENTROPY_RANGE, to_minutes_of_day
from services.errors import AutofillError, CredentialError, ValidationError

log = logging.getLogger(__name__)


@dataclass
class FillResult:
    completed: int
    failed: int
    total: int


class FillOrchestrator:
    """日付×時間帯ごとに勤怠記録を1件ずつ作成する

    同時に送信するリクエストは常に1件。各試行の後（成功・失敗とも）に delay_seconds 待機する。
    """

    def __init__(
        self,
        client,
        delay_seconds: float = 1.0,
        entropy_range: Tuple[int, int] = DEFAULT_ENTROPY_RANGE,
        rng: Optional[random.Random] = None,
        sleep: Callable = asyncio.sleep,
    ):
        self._client = client
        self._delay = delay_seconds
        self._entropy_range = entropy_range
        self._rng = rng
        self._sleep = sleep

    async def fill(
        self,
        credentials: Optional[Credentials],
        dates: list,
        intervals: list,
        on_progress: Optional[Callable[[int, int, int], None]] = None,
    ) -> FillResult:
        if not dates:
            raise ValidationError("日付が選択されていません")
        if not intervals:
            raise ValidationError("有効な時間帯が設定されていません")
        if credentials is None:
            raise CredentialError("ブラウザから認証情報を取得できませんでした")

        total = len(dates) * len(intervals)
        completed = 0
        failed = 0

        for date_str in dates:
            for interval in intervals:
                start = to_minutes_of_day(interval.start, True, self._entropy_range, self._rng)
                end = to_minutes_of_day(interval.end, True, self._entropy_range, self._rng)
                try:
                    await self._client.create_record(credentials, date_str, start, end)
                    completed += 1
                except AutofillError as e:
                    failed += 1
                    log.warning("Failed to create entry for %s (%s-%s): %s", date_str, interval.start, interval.end, e)

                log.info("Progress: %d successful, %d failed (%d/%d)", completed, failed, completed + failed, total)
                if on_progress is not None:
                    on_progress(completed, failed, total)
                await self._sleep(self._delay)

        return FillResult(completed=completed, failed=failed, total=total)
