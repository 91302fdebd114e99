import logging
from dataclasses import dataclass
from typing import Optional

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    token: str
    user_id: str


class CredentialStore:
    """トークンとユーザーIDの保持（各フィールドは最初の書き込みのみ有効）"""

    def __init__(self):
        self._token: Optional[str] = None
        self._user_id: Optional[str] = None

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    def offer_token(self, value: Optional[str], source: str = "") -> bool:
        """未設定の場合のみトークンを保存する。保存した場合True"""
        if self._token or not value:
            return False
        self._token = value
        log.info("Bearer token captured (%s)", source or "unknown")
        return True

    def offer_user_id(self, value: Optional[str], source: str = "") -> bool:
        """未設定の場合のみユーザーIDを保存する。保存した場合True"""
        if self._user_id or not value:
            return False
        self._user_id = value
        log.info("User ID captured (%s)", source or "unknown")
        return True

    def is_complete(self) -> bool:
        return bool(self._token and self._user_id)

    def snapshot(self) -> Optional[Credentials]:
        """両方揃っている場合のみCredentialsを返す"""
        if not self.is_complete():
            return None
        return Credentials(token=self._token, user_id=self._user_id)
