# graph/nodes/credential_node.py
from typing import Callable, Optional

from graph.state import AutofillState
from services.credential_resolver import CredentialResolver

CREDENTIAL_ERROR_MESSAGE = (
    "ブラウザから認証情報を取得できませんでした。"
    "Kenjoにログインし、勤怠ページを開いてから再実行してください"
)


async def credential_node(
    state: AutofillState,
    resolver: CredentialResolver = None,
    wait: Optional[Callable] = None,
    settings: dict = None,
) -> dict:
    """認証情報を解決するノード（見つからなければページの通信を待って再試行）"""
    if settings is None:
        settings = {"browser": {"credential_wait_seconds": 0, "poll_interval_seconds": 2}}

    wait_seconds = settings["browser"]["credential_wait_seconds"]
    poll_seconds = settings["browser"]["poll_interval_seconds"]

    credentials = await resolver.resolve()
    waited = 0
    while credentials is None and wait is not None and waited < wait_seconds:
        await wait(poll_seconds)
        waited += poll_seconds
        credentials = await resolver.resolve()

    if credentials is None:
        return {
            "action_taken": "error",
            "error_stage": "credential",
            "error_message": CREDENTIAL_ERROR_MESSAGE,
        }
    return {"credentials": credentials}
