"""HH:MM形式の時間帯を分単位に変換し、ランダムな揺らぎを加える"""
import logging
import random
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from services.errors import ValidationError

log = logging.getLogger(__name__)

DEFAULT_ENTROPY_RANGE = (1, 10)

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


@dataclass(frozen=True)
class TimeInterval:
    start: str  # HH:MM
    end: str    # HH:MM


def _parse_time(time_str: str) -> Tuple[int, int]:
    """HH:MM形式の文字列を (時, 分) に変換"""
    match = _TIME_PATTERN.match(time_str.strip()) if isinstance(time_str, str) else None
    if not match:
        raise ValidationError(f"時刻の形式が不正です（HH:MM）: {time_str!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValidationError(f"時刻の範囲が不正です: {time_str!r}")
    return hours, minutes


def to_minutes_of_day(
    time_str: str,
    jitter: bool = False,
    entropy_range: Tuple[int, int] = DEFAULT_ENTROPY_RANGE,
    rng: Optional[random.Random] = None,
) -> int:
    """0時からの経過分を返す。jitter=Trueなら±entropy_rangeの揺らぎを加える

    範囲外（負の値や1440以上）になっても補正しない。
    """
    hours, minutes = _parse_time(time_str)
    total = hours * 60 + minutes

    if jitter:
        rng = rng or random
        low, high = entropy_range
        magnitude = rng.randint(low, high)
        sign = 1 if rng.random() > 0.5 else -1
        total += sign * magnitude

    return total


def parse_intervals(raw_intervals) -> list:
    """設定値・CLI引数から TimeInterval のリストを生成する（空の行は無視）"""
    intervals = []
    for raw in raw_intervals or []:
        if isinstance(raw, TimeInterval):
            start, end = raw.start, raw.end
        elif isinstance(raw, str):
            start, _, end = raw.partition("-")
        else:
            start, end = raw.get("start") or "", raw.get("end") or ""

        start, end = start.strip(), end.strip()
        if not start or not end:
            continue

        start_minutes = to_minutes_of_day(start)
        end_minutes = to_minutes_of_day(end)
        if end_minutes <= start_minutes:
            log.warning("Interval %s-%s ends before it starts; submitting as configured", start, end)
        intervals.append(TimeInterval(start=start, end=end))
    return intervals
