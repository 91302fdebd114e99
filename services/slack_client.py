"""処理結果の通知（Slack / コンソール）

通知はレベル付き: success（全件成功・未入力なし）、info（確認結果）、
warning（一部失敗）、error（処理中断）。
"""
import logging
import sys

log = logging.getLogger(__name__)

LEVEL_ICONS = {
    "success": "✅",
    "info": "🔍",
    "warning": "⚠️",
    "error": "❌",
}


def format_notification(title: str, message: str, level: str) -> str:
    icon = LEVEL_ICONS.get(level, LEVEL_ICONS["info"])
    return f"{icon} {title}: {message}"


class ConsoleNotifier:
    """コンソール出力による通知（フォールバック用）。errorのみ標準エラーへ"""

    def notify(self, title: str, message: str, level: str = "info") -> bool:
        stream = sys.stderr if level == "error" else sys.stdout
        print(f"[Kenjo自動入力] {format_notification(title, message, level)}", file=stream)
        return True


class SlackNotifier:
    """Slack APIによる通知サービス（投稿に失敗した場合はFalse）"""

    def __init__(self, token: str, channel: str):
        self._channel = channel
        self._client = None
        self._fallback = ConsoleNotifier()

        if token:
            try:
                from slack_sdk import WebClient
                self._client = WebClient(token=token)
            except Exception as e:
                log.warning("Slack client unavailable, using console: %s", e)

    def notify(self, title: str, message: str, level: str = "info") -> bool:
        if self._client is None:
            return self._fallback.notify(title, message, level)

        text = format_notification(title, message, level)
        if level == "error":
            text += "\n手動で勤怠を確認してください"
        try:
            self._client.chat_postMessage(channel=self._channel, text=text)
            return True
        except Exception as e:
            log.warning("Slack notification failed (%s): %s", level, e)
            return False
