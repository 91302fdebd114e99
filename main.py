"""Kenjo勤怠自動入力 - エントリーポイント"""
import argparse
import asyncio
import logging
import os
import sys
from datetime import date

from dotenv import load_dotenv

from services.config_loader import load_config
from services.credentials import CredentialStore
from services.credential_resolver import CredentialResolver
from services.entropy import parse_intervals
from services.errors import ValidationError
from services.fill_orchestrator import FillOrchestrator
from services.kenjo_browser import KenjoBrowser
from services.kenjo_client import KenjoClient
from services.reconciliation import ReconciliationEngine
from services.slack_client import SlackNotifier, ConsoleNotifier
from services.storage_scanner import StorageSnapshot
from services.traffic_observer import TrafficObserver
from graph.graph import build_graph

log = logging.getLogger("kenjo_autofill")


def setup_logging(config: dict):
    logging.basicConfig(
        level=getattr(logging, str(config["logging"]["level"]).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv=None):
    today = date.today()
    parser = argparse.ArgumentParser(description="Kenjoの未入力勤怠を検出して一括登録する")
    parser.add_argument("--config", default="config.yaml")
    parser.add_argument("--month", type=int, default=today.month)
    parser.add_argument("--year", type=int, default=today.year)
    parser.add_argument(
        "--interval", action="append", default=[],
        help="HH:MM-HH:MM（複数指定可。省略時は設定ファイルの時間帯）",
    )
    parser.add_argument(
        "--date", action="append", default=[],
        help="登録する日 YYYY-MM-DD（複数指定可。省略時は未入力日すべて）",
    )
    parser.add_argument("--scan-only", action="store_true", help="未入力日の確認のみ行う")
    parser.add_argument(
        "--storage-state",
        help="Playwrightのstorage_stateファイルから認証情報を読む（ブラウザを起動しない）",
    )
    return parser.parse_args(argv)


def create_notifier(config: dict):
    """設定に基づいて通知サービスを生成"""
    slack_config = config["slack"]
    slack_token = os.getenv("SLACK_BOT_TOKEN", "")
    slack_channel = os.getenv("SLACK_NOTIFY_CHANNEL", slack_config.get("notify_channel", ""))
    if slack_config["enabled"] and slack_token:
        return SlackNotifier(token=slack_token, channel=slack_channel)
    return ConsoleNotifier()


def initial_state(args, intervals) -> dict:
    return {
        "month": args.month,
        "year": args.year,
        "intervals": intervals,
        "wanted_dates": args.date,
        "scan_only": args.scan_only,
        "credentials": None,
        "missing_dates": [],
        "completed": 0,
        "failed": 0,
        "total": 0,
        "action_taken": None,
        "error_stage": None,
        "error_message": None,
    }


async def run(args, config: dict, notifier, http_client=None) -> dict:
    """ブラウザ（またはstorage_state）から認証情報を得て、確認・登録を実行する"""
    fill_config = config["fill"]
    intervals = parse_intervals(args.interval or fill_config["intervals"])

    store = CredentialStore()
    store.offer_token(os.getenv("KENJO_BEARER_TOKEN"), "environment")
    store.offer_user_id(os.getenv("KENJO_USER_ID"), "environment")

    observer = TrafficObserver(store)
    browser = None
    wait = None

    if args.storage_state:
        origin = config["kenjo"]["origin"]
        resolver = CredentialResolver(
            store, lambda: StorageSnapshot.from_storage_state(args.storage_state, origin)
        )
        user_agent = config["kenjo"]["user_agent"]
    else:
        browser = KenjoBrowser(config, observer)
        await browser.open()
        resolver = CredentialResolver(store, browser.read_storage)
        user_agent = await browser.user_agent() or config["kenjo"]["user_agent"]
        wait = browser.wait

    client = KenjoClient(config, user_agent=user_agent, client=http_client)
    orchestrator = FillOrchestrator(
        client,
        delay_seconds=fill_config["request_delay_ms"] / 1000,
        entropy_range=(fill_config["entropy_range"]["min"], fill_config["entropy_range"]["max"]),
    )

    graph = build_graph(
        resolver=resolver,
        engine=ReconciliationEngine(client),
        orchestrator=orchestrator,
        notifier=notifier,
        wait=wait,
        config=config,
    )

    try:
        return await graph.ainvoke(initial_state(args, intervals))
    finally:
        await client.close()
        if browser is not None:
            await browser.save_session()
            await browser.close()


def main(argv=None):
    """メイン起動処理"""
    load_dotenv()
    args = parse_args(argv)
    config = load_config(args.config)
    setup_logging(config)
    notifier = create_notifier(config)

    try:
        result = asyncio.run(run(args, config, notifier))
    except ValidationError as e:
        notifier.notify("入力値エラー", str(e), "error")
        return 1
    except KeyboardInterrupt:
        log.info("Interrupted; entries created so far remain on the server")
        return 1

    if result["action_taken"] == "error" or result["failed"] > 0:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
