"""ホストページ自身の通信を監視し、認証情報を受動的に取得する

通信内容は一切変更しない。観測で得た値はCredentialStoreに「最初の書き込みのみ有効」で渡す。
"""
import functools
import json
import logging
import re
from inspect import iscoroutinefunction
from typing import Optional

from services.credentials import CredentialStore

log = logging.getLogger(__name__)

# MongoDB ObjectId形式のパスセグメント
_OBJECT_ID_PATTERN = re.compile(r"/([a-f0-9]{24})/", re.IGNORECASE)

# Playwrightのresource_typeのうち、ページのスクリプトが発行するリクエスト
OBSERVED_RESOURCE_TYPES = ("fetch", "xhr")

_BODY_KWARGS = ("json", "content", "data", "body")


def _header_items(headers):
    if headers is None:
        return []
    if hasattr(headers, "items"):
        return list(headers.items())
    return list(headers)


def _decode_body(body) -> Optional[dict]:
    if isinstance(body, dict):
        return body
    if isinstance(body, (bytes, bytearray)):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if not isinstance(body, str) or not body:
        return None
    try:
        parsed = json.loads(body)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


class TrafficObserver:
    """fetch / XHR 相当のリクエストを検査するミドルウェア"""

    def __init__(self, store: CredentialStore):
        self._store = store

    def inspect(self, url, headers=None, body=None, mechanism: str = "fetch") -> None:
        """1件のリクエストを検査する（副作用はCredentialStoreへの書き込みのみ）"""
        self._capture_token(headers, mechanism)
        self._capture_user_id_from_body(body, mechanism)
        self._capture_user_id_from_url(url, mechanism)

    def _capture_token(self, headers, mechanism: str) -> None:
        if self._store.token:
            return
        for name, value in _header_items(headers):
            if str(name).lower() != "authorization":
                continue
            if isinstance(value, str) and value.startswith("Bearer "):
                self._store.offer_token(value[len("Bearer "):], f"{mechanism} header")
            return

    def _capture_user_id_from_body(self, body, mechanism: str) -> None:
        if self._store.user_id or body is None:
            return
        parsed = _decode_body(body)
        if parsed is None:
            return
        for key in ("_userId", "userId"):
            value = parsed.get(key)
            if isinstance(value, str) and value:
                self._store.offer_user_id(value, f"{mechanism} body")
                return

    def _capture_user_id_from_url(self, url, mechanism: str) -> None:
        if self._store.user_id or url is None:
            return
        url = str(url)
        if "/user" not in url:
            return
        match = _OBJECT_ID_PATTERN.search(url)
        if match:
            self._store.offer_user_id(match.group(1), f"{mechanism} url")

    def attach(self, page) -> None:
        """Playwrightのページにリクエスト監視を登録する"""
        page.on("request", self._on_request)
        log.info("Network request observer active")

    def _on_request(self, request) -> None:
        if request.resource_type not in OBSERVED_RESOURCE_TYPES:
            return
        self.inspect(
            request.url,
            headers=request.headers,
            body=request.post_data_buffer,
            mechanism=request.resource_type,
        )

    def _inspect_call(self, args, kwargs) -> None:
        url = args[0] if args else kwargs.get("url")
        body = None
        for key in _BODY_KWARGS:
            if kwargs.get(key) is not None:
                body = kwargs[key]
                break
        self.inspect(url, headers=kwargs.get("headers"), body=body)

    def wrap(self, send):
        """fetch形式の呼び出し send(url, **options) をラップする

        引数はそのまま転送し、元の戻り値（コルーチン関数の場合はawait結果）をそのまま返す。
        """
        if iscoroutinefunction(send):
            @functools.wraps(send)
            async def async_wrapper(*args, **kwargs):
                self._inspect_call(args, kwargs)
                return await send(*args, **kwargs)
            return async_wrapper

        @functools.wraps(send)
        def wrapper(*args, **kwargs):
            self._inspect_call(args, kwargs)
            return send(*args, **kwargs)
        return wrapper
