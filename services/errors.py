from typing import Optional


class AutofillError(Exception):
    """自動入力処理の基底例外"""


class CredentialError(AutofillError):
    """トークンまたはユーザーIDが取得できない"""


class RemoteError(AutofillError):
    """APIが成功以外のステータスを返した、または通信に失敗した"""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class ParseError(AutofillError):
    """レスポンス本文をデコードできない"""


class ValidationError(AutofillError):
    """入力値（日付・時間帯・月）が不正"""
