from unittest.mock import MagicMock
from services.credentials import Credentials
from services.entropy import TimeInterval
from graph.nodes.notify_node import notify_node

CREDENTIALS = Credentials(token="t" * 30, user_id="5f1e2d3c4b5a697887766554")


def _make_state(**overrides):
    base = {
        "month": 3,
        "year": 2026,
        "intervals": [TimeInterval("09:00", "14:00"), TimeInterval("15:00", "18:00")],
        "wanted_dates": [],
        "scan_only": False,
        "credentials": CREDENTIALS,
        "missing_dates": [],
        "completed": 0,
        "failed": 0,
        "total": 0,
        "action_taken": None,
        "error_stage": None,
        "error_message": None,
    }
    base.update(overrides)
    return base


def test_notify_filled():
    """全件成功はsuccessで通知"""
    notifier = MagicMock()
    notify_node(_make_state(action_taken="filled", completed=4, failed=0, total=4), notifier=notifier)

    notifier.notify.assert_called_once()
    title, msg, level = notifier.notify.call_args[0]
    assert level == "success"
    assert title == "登録完了"
    assert "4件" in msg
    assert "失敗" not in msg


def test_notify_filled_partial():
    """一部失敗はwarningで通知"""
    notifier = MagicMock()
    notify_node(_make_state(action_taken="filled", completed=3, failed=1, total=4), notifier=notifier)

    title, msg, level = notifier.notify.call_args[0]
    assert level == "warning"
    assert "一部失敗" in title
    assert "3件" in msg
    assert "1件は失敗" in msg


def test_notify_nothing_missing():
    """未入力日なしはsuccessで通知"""
    notifier = MagicMock()
    notify_node(_make_state(action_taken="nothing_missing"), notifier=notifier)

    _, msg, level = notifier.notify.call_args[0]
    assert level == "success"
    assert "2026-03" in msg
    assert "ありません" in msg


def test_notify_scanned():
    """確認のみの場合は未入力日の一覧をinfoで通知"""
    notifier = MagicMock()
    state = _make_state(
        action_taken="scanned",
        missing_dates=["2026-03-02T00:00:00.000Z", "2026-03-03T00:00:00.000Z"],
    )
    notify_node(state, notifier=notifier)

    _, msg, level = notifier.notify.call_args[0]
    assert level == "info"
    assert "2件" in msg
    assert "2026-03-02, 2026-03-03" in msg


def test_notify_error_by_stage():
    """エラーは段階ごとに異なるタイトルでerror通知"""
    notifier = MagicMock()
    notify_node(
        _make_state(action_taken="error", error_stage="credential", error_message="not found"),
        notifier=notifier,
    )
    notify_node(
        _make_state(action_taken="error", error_stage="scan", error_message="status 500"),
        notifier=notifier,
    )

    first, second = [c[0] for c in notifier.notify.call_args_list]
    assert first[0] != second[0]
    assert first[1] == "not found"
    assert second[1] == "status 500"
    assert first[2] == second[2] == "error"


def test_notify_each_terminal_state_is_distinct():
    """終了状態ごとに通知内容が区別できること"""
    notifier = MagicMock()
    states = [
        _make_state(action_taken="nothing_missing"),
        _make_state(action_taken="scanned", missing_dates=["2026-03-02T00:00:00.000Z"]),
        _make_state(action_taken="filled", completed=1, total=1),
        _make_state(action_taken="filled", completed=0, failed=1, total=1),
        _make_state(action_taken="error", error_stage="fill", error_message="boom"),
    ]
    for state in states:
        notify_node(state, notifier=notifier)

    calls = [c[0] for c in notifier.notify.call_args_list]
    assert len(calls) == 5
    assert len({(title, level) for title, _, level in calls}) == 5
