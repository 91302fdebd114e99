from graph.state import AutofillState


# 終了状態 → (タイトル, 本文テンプレート, レベル)
NOTIFICATIONS = {
    "nothing_missing": ("確認完了", "{period} に未入力の日はありません", "success"),
    "scanned": ("確認完了", "{period} の未入力日が{count}件見つかりました: {dates}", "info"),
    "filled": ("登録完了", "{completed}件の勤怠を登録しました", "success"),
    "filled_partial": (
        "登録完了（一部失敗）",
        "{completed}件の勤怠を登録しました。{failed}件は失敗しました",
        "warning",
    ),
}

ERROR_TITLES = {
    "credential": "認証情報エラー",
    "scan": "未入力日の確認に失敗",
    "fill": "勤怠の登録に失敗",
}


def notify_node(state: AutofillState, notifier=None) -> dict:
    """処理結果を通知するノード（終了状態ごとにタイトルとレベルが異なる）"""
    action = state["action_taken"]

    if action == "error":
        title = ERROR_TITLES.get(state.get("error_stage"), "エラー")
        notifier.notify(title, state["error_message"], "error")
        return {}

    if action == "filled" and state["failed"] > 0:
        action = "filled_partial"
    if action not in NOTIFICATIONS:
        return {}

    title, template, level = NOTIFICATIONS[action]
    message = template.format(
        period=f"{state['year']}-{state['month']:02d}",
        count=len(state["missing_dates"]),
        dates=", ".join(d[:10] for d in state["missing_dates"]),
        completed=state["completed"],
        failed=state["failed"],
    )
    notifier.notify(title, message, level)
    return {}
