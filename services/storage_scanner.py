"""ブラウザのストレージ・Cookieからトークン/ユーザーIDを探索する

探索は (名前, プローブ関数) の順序付きリストで表現し、最初に値を返したプローブを採用する。
同じキー名が複数の場所に存在する場合の優先順位はこのリストの順序で決まる。
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Tuple
from urllib.parse import unquote, urlparse

log = logging.getLogger(__name__)

TOKEN_KEYS = (
    "token", "accessToken", "authToken", "bearerToken",
    "access_token", "auth_token", "bearer_token",
    "jwt", "jwtToken", "jwt_token", "idToken", "id_token",
)

USER_ID_KEYS = (
    "userId", "user_id", "userid", "uid", "id",
    "_id", "user", "currentUserId", "current_user_id",
)

_AREA_LABELS = {"local": "localStorage", "session": "sessionStorage"}

# (値, 取得元ラベル)
Found = Tuple[str, str]


@dataclass
class StorageSnapshot:
    """ある時点のlocalStorage / sessionStorage / Cookie文字列"""
    local: dict = field(default_factory=dict)
    session: dict = field(default_factory=dict)
    cookies: str = ""

    @classmethod
    def from_storage_state(cls, path: str, origin: str) -> "StorageSnapshot":
        """Playwrightのstorage_stateファイルからスナップショットを生成する

        sessionStorageはstorage_stateに含まれないため常に空になる。
        """
        with open(Path(path), "r", encoding="utf-8") as f:
            state = json.load(f)

        local = {}
        for entry in state.get("origins", []):
            if entry.get("origin", "").rstrip("/") == origin.rstrip("/"):
                local = {item["name"]: item["value"] for item in entry.get("localStorage", [])}
                break

        host = urlparse(origin).hostname or ""
        pairs = []
        for cookie in state.get("cookies", []):
            domain = cookie.get("domain", "").lstrip(".")
            if domain and (host == domain or host.endswith("." + domain)):
                pairs.append(f"{cookie['name']}={cookie['value']}")

        return cls(local=local, session={}, cookies="; ".join(pairs))


def _is_token(value) -> bool:
    return isinstance(value, str) and len(value) > 20


def _parse_object(raw) -> Optional[dict]:
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _is_user_id(value) -> bool:
    if not isinstance(value, str) or not 5 < len(value) < 100:
        return False
    # "user" キーにユーザーオブジェクト丸ごとが入っているケースを除外
    return _parse_object(value) is None


def _is_nested_user_id(value) -> bool:
    return isinstance(value, str) and 20 <= len(value) <= 30


def _direct_probe(area: str, keys, accept: Callable) -> Callable:
    """ストレージのキーを直接参照するプローブ"""
    label = _AREA_LABELS[area]

    def probe(snapshot: StorageSnapshot) -> Optional[Found]:
        storage = getattr(snapshot, area)
        for key in keys:
            value = storage.get(key)
            if accept(value):
                return value, f"{label}.{key}"
        return None

    return probe


def _nested_probe(area: str, keys, sub_object: str, accept: Callable) -> Callable:
    """JSONとして保存された値の中（直下、次に sub_object 配下）を探すプローブ"""
    label = _AREA_LABELS[area]

    def probe(snapshot: StorageSnapshot) -> Optional[Found]:
        storage = getattr(snapshot, area)
        for storage_key, raw in storage.items():
            parsed = _parse_object(raw)
            if parsed is None:
                continue
            for key in keys:
                if accept(parsed.get(key)):
                    return parsed[key], f"{label}.{storage_key}.{key}"
            nested = parsed.get(sub_object)
            if isinstance(nested, dict):
                for key in keys:
                    if accept(nested.get(key)):
                        return nested[key], f"{label}.{storage_key}.{sub_object}.{key}"
        return None

    return probe


def _cookie_token_probe(snapshot: StorageSnapshot) -> Optional[Found]:
    for part in snapshot.cookies.split(";"):
        name, _, value = part.strip().partition("=")
        lowered = name.lower()
        if ("token" in lowered or "auth" in lowered) and len(value) > 20:
            return unquote(value), f"cookie.{name}"
    return None


TOKEN_PROBES = [
    ("localStorage", _direct_probe("local", TOKEN_KEYS, _is_token)),
    ("sessionStorage", _direct_probe("session", TOKEN_KEYS, _is_token)),
    ("localStorage JSON", _nested_probe("local", TOKEN_KEYS, "data", _is_token)),
    ("sessionStorage JSON", _nested_probe("session", TOKEN_KEYS, "data", _is_token)),
    ("cookie", _cookie_token_probe),
]

USER_ID_PROBES = [
    ("localStorage", _direct_probe("local", USER_ID_KEYS, _is_user_id)),
    ("sessionStorage", _direct_probe("session", USER_ID_KEYS, _is_user_id)),
    ("localStorage JSON", _nested_probe("local", USER_ID_KEYS, "user", _is_nested_user_id)),
    ("sessionStorage JSON", _nested_probe("session", USER_ID_KEYS, "user", _is_nested_user_id)),
]


def run_probes(probes, snapshot: StorageSnapshot) -> Optional[Found]:
    """プローブを順に評価し、最初に見つかった値を返す"""
    for name, probe in probes:
        found = probe(snapshot)
        if found is not None:
            log.debug("Probe '%s' matched at %s", name, found[1])
            return found
    return None


class StorageScanner:
    """ストレージ探索（1回限り・呼び出し時のみ実行）"""

    def __init__(self, token_probes=None, user_id_probes=None):
        self._token_probes = token_probes if token_probes is not None else TOKEN_PROBES
        self._user_id_probes = user_id_probes if user_id_probes is not None else USER_ID_PROBES

    def find_token(self, snapshot: StorageSnapshot) -> Optional[Found]:
        return run_probes(self._token_probes, snapshot)

    def find_user_id(self, snapshot: StorageSnapshot) -> Optional[Found]:
        return run_probes(self._user_id_probes, snapshot)
