import copy

import yaml
from pathlib import Path

DEFAULT_CONFIG = {
    "kenjo": {
        "app_url": "https://app.kenjo.io/",
        "origin": "https://app.kenjo.io",
        "referer": "https://app.kenjo.io/",
        "accept": "application/json, text/plain, */*",
        "accept_language": "en-US,en;q=0.9",
        # storage_stateモードではブラウザを起動しないため、このUAを送る
        "user_agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        "api_urls": {
            "expected_hours": "https://api.kenjo.io/controller/user-attendance/attendance-summary/expected-hours/",
            "attendance_find": "https://api.kenjo.io/user-attendance-db/find",
            "attendance_create": "https://api.kenjo.io/user-attendance-db",
        },
    },
    "fill": {
        "intervals": [
            {"start": "09:00", "end": "14:00"},
            {"start": "15:00", "end": "18:00"},
        ],
        "entropy_range": {"min": 1, "max": 10},
        "request_delay_ms": 1000,
    },
    "browser": {
        "headless": False,
        "session_storage_path": ".session",
        "credential_wait_seconds": 60,
        "poll_interval_seconds": 2,
    },
    "slack": {
        "enabled": False,
        "notify_channel": "",
    },
    "logging": {
        "level": "INFO",
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """ベース設定にオーバーライドをマージする"""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str = "config.yaml") -> dict:
    """YAML設定ファイルをロードし、デフォルト設定とマージして返す"""
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
        return _deep_merge(DEFAULT_CONFIG, user_config)
    return copy.deepcopy(DEFAULT_CONFIG)
