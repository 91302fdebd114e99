import inspect
import logging
from typing import Callable, Optional

from services.credentials import CredentialStore, Credentials
from services.storage_scanner import StorageScanner, StorageSnapshot

log = logging.getLogger(__name__)


class CredentialResolver:
    """キャッシュ → ストレージ探索 の順で認証情報を解決する

    TrafficObserverは別途常駐しており、同じCredentialStoreに書き込む。
    snapshot_loader はストレージのスナップショットを返す関数（同期/非同期どちらも可）。
    """

    def __init__(
        self,
        store: CredentialStore,
        snapshot_loader: Optional[Callable] = None,
        scanner: Optional[StorageScanner] = None,
    ):
        self._store = store
        self._snapshot_loader = snapshot_loader
        self._scanner = scanner or StorageScanner()

    @property
    def store(self) -> CredentialStore:
        return self._store

    async def resolve(self) -> Optional[Credentials]:
        """認証情報を返す。見つからない場合はNone"""
        cached = self._store.snapshot()
        if cached is not None:
            return cached

        if self._snapshot_loader is None:
            return None

        snapshot = self._snapshot_loader()
        if inspect.isawaitable(snapshot):
            snapshot = await snapshot
        self.scan(snapshot)

        credentials = self._store.snapshot()
        if credentials is None:
            log.warning(
                "Credentials not found in storage (token=%s, user_id=%s); waiting for network requests",
                "yes" if self._store.token else "no",
                "yes" if self._store.user_id else "no",
            )
        return credentials

    def scan(self, snapshot: StorageSnapshot) -> None:
        """スナップショットから未取得のフィールドのみ探索して保存する"""
        if not self._store.token:
            found = self._scanner.find_token(snapshot)
            if found:
                self._store.offer_token(*found)
        if not self._store.user_id:
            found = self._scanner.find_user_id(snapshot)
            if found:
                self._store.offer_user_id(*found)
