"""
Request Filter
==============

Per-page network interception that aborts requests leaving the local server's
origin. Aborted requests are not retried.
"""

from typing import Any, List

from playwright.async_api import Page

from route_prerenderer.config.logging import get_logger

logger = get_logger(__name__)


class RequestFilter:
    """Abort every request whose URL does not start with ``base_url``."""

    def __init__(self, base_url: str, skip_third_party_requests: bool = True):
        self.base_url = base_url
        self.skip_third_party_requests = skip_third_party_requests
        self.allowed = 0
        self.aborted: List[str] = []
        self.logger: Any = logger.bind(component="request_filter", base_url=base_url)

    @property
    def active(self) -> bool:
        return self.skip_third_party_requests

    def is_allowed(self, url: str) -> bool:
        """Whether a request to ``url`` may proceed."""
        return not self.active or url.startswith(self.base_url)

    async def install(self, page: Page) -> None:
        """Intercept the page's requests. Must run before navigation."""
        if not self.active:
            return
        await page.route("**/*", self._handle_route)  # type: ignore[arg-type]

    async def _handle_route(self, route: Any) -> None:
        url = route.request.url
        if self.is_allowed(url):
            self.allowed += 1
            await route.continue_()
            return

        self.aborted.append(url)
        self.logger.debug("Aborted third-party request", url=url)
        await route.abort()
