import logging
from pathlib import Path

from services.storage_scanner import StorageSnapshot
from services.traffic_observer import TrafficObserver

log = logging.getLogger(__name__)

_READ_STORAGE_JS = """() => {
    const dump = (storage) => {
        const result = {};
        for (let i = 0; i < storage.length; i++) {
            const key = storage.key(i);
            result[key] = storage.getItem(key);
        }
        return result;
    };
    return {local: dump(window.localStorage), session: dump(window.sessionStorage)};
}"""


class KenjoBrowser:
    """PlaywrightでKenjoを開き、ログイン済みセッションを保持する

    ログイン操作は自動化しない。headless=Falseで起動し、必要ならユーザーが手動でログインする。
    """

    def __init__(self, config: dict, observer: TrafficObserver):
        self._config = config["browser"]
        self._app_url = config["kenjo"]["app_url"]
        self._observer = observer
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    async def open(self):
        """ブラウザを起動してアプリを開く（セッション再利用）"""
        if self._page is not None:
            return self._page

        from playwright.async_api import async_playwright

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self._config["headless"]
        )

        storage_path = Path(self._config["session_storage_path"])
        if storage_path.exists():
            self._context = await self._browser.new_context(
                storage_state=str(storage_path)
            )
        else:
            self._context = await self._browser.new_context()

        self._page = await self._context.new_page()
        # ページ自身の通信を最初のリクエストから監視する
        self._observer.attach(self._page)
        await self._page.goto(self._app_url)
        await self._page.wait_for_load_state("networkidle")
        log.info("Opened %s", self._app_url)
        return self._page

    async def read_storage(self) -> StorageSnapshot:
        """現在のlocalStorage / sessionStorage / Cookieを取得"""
        page = await self.open()
        dumped = await page.evaluate(_READ_STORAGE_JS)
        cookies = await self._context.cookies(self._app_url)
        cookie_str = "; ".join(f"{c['name']}={c['value']}" for c in cookies)
        return StorageSnapshot(
            local=dumped.get("local") or {},
            session=dumped.get("session") or {},
            cookies=cookie_str,
        )

    async def user_agent(self) -> str:
        page = await self.open()
        return await page.evaluate("() => navigator.userAgent")

    async def wait(self, seconds: float) -> None:
        """ページを開いたまま待機（この間もページの通信は監視される）"""
        page = await self.open()
        await page.wait_for_timeout(seconds * 1000)

    async def save_session(self):
        """セッション状態を保存"""
        if self._context:
            storage_path = self._config["session_storage_path"]
            Path(storage_path).parent.mkdir(parents=True, exist_ok=True)
            await self._context.storage_state(path=storage_path)

    async def close(self):
        """ブラウザを閉じる"""
        if self._browser:
            await self._browser.close()
        if self._playwright:
            await self._playwright.stop()
