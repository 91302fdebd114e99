import pytest
from unittest.mock import AsyncMock, MagicMock

from services.credentials import CredentialStore, Credentials
from services.credential_resolver import CredentialResolver
from services.storage_scanner import StorageSnapshot

USER_ID = "5f1e2d3c4b5a697887766554"


@pytest.mark.asyncio
async def test_resolve_from_storage():
    """ストレージのaccessTokenとuserIdから解決できること"""
    store = CredentialStore()
    loader = MagicMock(return_value=StorageSnapshot(local={"accessToken": "a" * 30, "userId": USER_ID}))
    resolver = CredentialResolver(store, loader)

    credentials = await resolver.resolve()

    assert credentials == Credentials(token="a" * 30, user_id=USER_ID)
    # 見つかった値はストアに保存される
    assert store.snapshot() == credentials


@pytest.mark.asyncio
async def test_cached_value_skips_storage():
    """キャッシュ済みの場合ストレージを参照しないこと"""
    store = CredentialStore()
    store.offer_token("cached-token-value-xxxxxx")
    store.offer_user_id(USER_ID)
    loader = MagicMock()
    resolver = CredentialResolver(store, loader)

    credentials = await resolver.resolve()

    assert credentials.token == "cached-token-value-xxxxxx"
    loader.assert_not_called()


@pytest.mark.asyncio
async def test_async_loader():
    """非同期のスナップショット取得にも対応すること"""
    store = CredentialStore()
    loader = AsyncMock(return_value=StorageSnapshot(session={"token": "s" * 30, "uid": USER_ID}))
    credentials = await CredentialResolver(store, loader).resolve()
    assert credentials == Credentials(token="s" * 30, user_id=USER_ID)


@pytest.mark.asyncio
async def test_partial_cache_is_completed_from_storage():
    """通信監視で得たトークンを維持し、不足分のみストレージから補うこと"""
    store = CredentialStore()
    store.offer_token("observed-token-value-xxxx")
    loader = MagicMock(return_value=StorageSnapshot(local={"accessToken": "a" * 30, "userId": USER_ID}))

    credentials = await CredentialResolver(store, loader).resolve()

    assert credentials.token == "observed-token-value-xxxx"
    assert credentials.user_id == USER_ID


@pytest.mark.asyncio
async def test_not_found_returns_none():
    """見つからない場合Noneを返すこと"""
    store = CredentialStore()
    loader = MagicMock(return_value=StorageSnapshot(local={"accessToken": "a" * 30}))
    assert await CredentialResolver(store, loader).resolve() is None
    assert await CredentialResolver(CredentialStore()).resolve() is None


@pytest.mark.asyncio
async def test_later_observation_completes_resolution():
    """初回失敗後に通信監視がストアを埋めれば次回は解決できること"""
    store = CredentialStore()
    loader = MagicMock(return_value=StorageSnapshot())
    resolver = CredentialResolver(store, loader)
    assert await resolver.resolve() is None

    store.offer_token("observed-token-value-xxxx")
    store.offer_user_id(USER_ID)
    assert await resolver.resolve() == Credentials(token="observed-token-value-xxxx", user_id=USER_ID)
