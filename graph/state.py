from typing import TypedDict, Optional

from services.credentials import Credentials
from services.entropy import TimeInterval


class AutofillState(TypedDict):
    month: int                          # 1-12
    year: int
    intervals: list[TimeInterval]       # 入力する時間帯（順序を保持）
    wanted_dates: list[str]             # YYYY-MM-DD。空なら未入力日すべて
    scan_only: bool                     # 未入力日の確認のみ
    credentials: Optional[Credentials]
    missing_dates: list[str]            # 未入力日（昇順）
    completed: int
    failed: int
    total: int
    action_taken: Optional[str]         # "scanned" / "nothing_missing" / "filled" / "error"
    error_stage: Optional[str]          # "credential" / "scan" / "fill"
    error_message: Optional[str]        # エラー詳細
