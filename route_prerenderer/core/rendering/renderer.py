"""
Playwright Renderer
===================

Owns the browser process and renders batches of routes served by a local
static server. One browser is launched per renderer and shared read-only by
every page session; each route gets its own page.
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence, Union
import asyncio
import sys

from playwright.async_api import async_playwright, Browser, Playwright

from route_prerenderer.config.logging import get_logger
from route_prerenderer.config.settings import get_settings
from route_prerenderer.core.rendering.errors import RendererNotInitializedError
from route_prerenderer.core.rendering.page_session import PageSessionDriver
from route_prerenderer.core.rendering.scheduler import ConcurrencyLimitedScheduler
from route_prerenderer.models.schemas import RenderOptions, RenderResult

logger = get_logger(__name__)

SANDBOX_ARGS = ("--no-sandbox", "--disable-setuid-sandbox")


class StaticServer(Protocol):
    """The local server the routes are rendered from."""

    port: int


def resolve_launch_options(
    options: RenderOptions, platform: Optional[str] = None
) -> Dict[str, Any]:
    """
    Launch options for ``chromium.launch``.

    On Linux the SUID sandbox is unavailable in most containers, so the
    sandbox is disabled unless the caller already passed ``--no-sandbox``.
    """
    platform = platform or sys.platform
    if platform.startswith("linux") and "--no-sandbox" not in options.launch_args:
        options = options.with_launch_args(*SANDBOX_ARGS)
    return dict(options.launch_options)


class PlaywrightRenderer:
    """Prerenders routes with a Playwright-managed Chromium instance."""

    def __init__(
        self,
        server: StaticServer,
        options: Optional[Union[RenderOptions, Dict[str, Any]]] = None,
    ):
        self.settings = get_settings()
        self.server = server
        if isinstance(options, RenderOptions):
            self.options = options.with_launch_defaults(self.settings.launch_defaults())
        else:
            self.options = RenderOptions.from_settings(self.settings, **(options or {}))

        self.logger: Any = logger.bind(renderer="playwright")
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._shutdown: Optional["asyncio.Task[None]"] = None

    @property
    def base_url(self) -> str:
        return f"http://localhost:{self.server.port}"

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser

    async def initialize(self) -> Browser:
        """
        Launch the browser.

        Returns:
            The launched browser handle

        Raises:
            The launch error, unchanged, after logging it
        """
        launch_options = resolve_launch_options(self.options)

        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(**launch_options)
        except Exception as e:
            self.logger.error(
                "Unable to start browser",
                error=str(e),
                error_type=type(e).__name__,
                launch_args=launch_options.get("args"),
            )
            if self._playwright:
                await self._playwright.stop()
                self._playwright = None
            raise

        self.logger.info(
            "Browser launched",
            version=self._browser.version,
            max_concurrent_pages=self.options.max_concurrent_pages,
        )
        return self._browser

    async def render_routes(self, routes: Sequence[str]) -> List[RenderResult]:
        """
        Render every route and return results in input order.

        Args:
            routes: Route paths on the local server

        Returns:
            One RenderResult per route, same order as ``routes``

        Raises:
            RendererNotInitializedError: If ``initialize()`` has not run
            The first route failure, after every route has settled
        """
        if self._browser is None:
            raise RendererNotInitializedError()

        driver = PageSessionDriver(self._browser, self.options, self.base_url)
        scheduler = ConcurrencyLimitedScheduler(self.options.max_concurrent_pages)

        results = await scheduler.run(list(routes), driver.render)

        self.logger.info(
            "Routes rendered", routes=len(results), peak_pages=scheduler.peak_in_flight
        )
        return results

    def destroy(self) -> None:
        """Schedule browser shutdown on the running loop without waiting for it."""
        if self._shutdown is not None or (self._browser is None and self._playwright is None):
            return
        self._shutdown = asyncio.get_running_loop().create_task(self._close_browser())
        self._shutdown.add_done_callback(self._log_shutdown)

    async def close(self) -> None:
        """Shut the browser down and wait for it. Safe to call more than once."""
        if self._shutdown is not None:
            await self._shutdown
            return
        await self._close_browser()

    async def _close_browser(self) -> None:
        browser, playwright = self._browser, self._playwright
        if browser is None and playwright is None:
            return
        self._browser = None
        self._playwright = None

        try:
            if browser:
                await browser.close()
        finally:
            if playwright:
                await playwright.stop()

        self.logger.info("Browser closed")

    def _log_shutdown(self, task: "asyncio.Task[None]") -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.logger.error("Browser shutdown failed", error=str(error))

    async def __aenter__(self) -> "PlaywrightRenderer":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
