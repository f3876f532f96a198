"""
Page Session Driver
===================

Renders one route in its own browser page:

open page -> inject globals -> set viewport -> install request filter ->
start CSS tracking -> navigate -> wait for render -> inline used CSS ->
read location and HTML -> close page

The page is closed on every exit path before ``render`` returns or raises.
"""

from typing import Any, AsyncGenerator, Dict, Optional
from contextlib import asynccontextmanager
from urllib.parse import unquote
import json

from playwright.async_api import Browser, Page

from route_prerenderer.config.logging import get_logger
from route_prerenderer.core.rendering.completion import wait_for_render
from route_prerenderer.core.rendering.css_usage import (
    CSSUsageCapturer,
    collect_used_css,
    inline_used_css,
)
from route_prerenderer.core.rendering.request_filter import RequestFilter
from route_prerenderer.models.schemas import RenderOptions, RenderResult, Viewport

logger = get_logger(__name__)


@asynccontextmanager
async def open_page(
    browser: Browser, viewport: Optional[Viewport] = None
) -> AsyncGenerator[Page, None]:
    """Open a page for a single session and always close it afterwards."""
    page_options: Dict[str, Any] = {}
    if viewport and viewport.device_scale_factor:
        page_options["device_scale_factor"] = viewport.device_scale_factor

    page = await browser.new_page(**page_options)
    try:
        yield page
    finally:
        try:
            await page.close()
        except Exception as e:
            # Never mask the error that ended the session.
            logger.warning("Page close failed", error=str(e), error_type=type(e).__name__)


def build_inject_script(property_name: str, value: Any) -> str:
    """Script assigning ``value`` to ``window[property_name]`` before any page script runs."""
    return (
        f"(function () {{ window[{json.dumps(property_name)}] = {json.dumps(value)}; }})();"
    )


class PageSessionDriver:
    """Runs the per-route render sequence against a shared browser."""

    def __init__(self, browser: Browser, options: RenderOptions, base_url: str):
        self.browser = browser
        self.options = options
        self.base_url = base_url
        self.logger: Any = logger.bind(component="page_session")

    async def render(self, route: str) -> RenderResult:
        """
        Render a single route.

        Args:
            route: Path on the local server, used verbatim in the URL

        Returns:
            RenderResult with the requested route, the decoded location path
            after navigation, and the serialized document

        Raises:
            Any navigation or evaluation error from the browser, unchanged
        """
        options = self.options
        log = self.logger.bind(route=route)
        log.debug("Rendering route")

        try:
            async with open_page(self.browser, options.viewport) as page:
                if options.inject is not None:
                    await page.add_init_script(
                        build_inject_script(options.inject_property, options.inject)
                    )

                if options.viewport:
                    await page.set_viewport_size(
                        {"width": options.viewport.width, "height": options.viewport.height}
                    )

                await RequestFilter(self.base_url, options.skip_third_party_requests).install(page)

                capturer: Optional[CSSUsageCapturer] = None
                if options.inline_used_css:
                    capturer = CSSUsageCapturer(page)
                    await capturer.start()

                try:
                    goto_options: Dict[str, Any] = {}
                    if options.navigation_timeout is not None:
                        goto_options["timeout"] = options.navigation_timeout
                    await page.goto(f"{self.base_url}{route}", **goto_options)

                    await wait_for_render(
                        page, options.completion_strategy, options.element_poll_interval
                    )

                    if capturer is not None:
                        coverage = await capturer.stop()
                        await inline_used_css(page, collect_used_css(coverage))
                finally:
                    if capturer is not None:
                        await capturer.detach()

                pathname = await page.evaluate("window.location.pathname")
                html = await page.content()

        except Exception as e:
            log.error("Route render failed", error=str(e), error_type=type(e).__name__)
            raise

        log.debug("Route rendered", html_length=len(html))
        return RenderResult(original_route=route, route=unquote(pathname), html=html)
