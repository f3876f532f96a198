"""
CSS Usage Capture
=================

Tracks which CSS rules a page applies while rendering, using the Chromium
DevTools ``CSS`` domain, and rewrites the page's inline styles to just that
subset.

Known limitation: used ranges are taken without their enclosing at-rules, so
rules inside ``@media`` blocks lose their condition.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from playwright.async_api import CDPSession, Error as PlaywrightError, Page

from route_prerenderer.config.logging import get_logger

logger = get_logger(__name__)

INLINE_USED_CSS_JS = """
(css) => {
  for (const style of Array.from(document.querySelectorAll('style'))) {
    style.parentElement.removeChild(style);
  }
  const used = document.createElement('style');
  used.setAttribute('type', 'text/css');
  used.textContent = css;
  document.head.appendChild(used);
}
"""


@dataclass
class StyleSheetCoverage:
    """Used ranges of one stylesheet, as UTF-16 code unit offsets."""

    url: str
    text: str
    ranges: List[Tuple[int, int]] = field(default_factory=list)

    def used_text(self) -> str:
        encoded = self.text.encode("utf-16-le")
        return "".join(
            encoded[2 * start : 2 * end].decode("utf-16-le") for start, end in self.ranges
        )


def merge_ranges(ranges: Iterable[Tuple[int, int]]) -> List[Tuple[int, int]]:
    """Sort ranges and join the ones that overlap or touch."""
    merged: List[Tuple[int, int]] = []
    for start, end in sorted(ranges):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def collect_used_css(coverage: Iterable[StyleSheetCoverage]) -> str:
    """Concatenate used CSS, stylesheet discovery order then range order."""
    return "".join(sheet.used_text() for sheet in coverage)


async def inline_used_css(page: Page, css: str) -> None:
    """Replace every ``<style>`` element with a single one holding ``css``."""
    await page.evaluate(INLINE_USED_CSS_JS, css)


class CSSUsageCapturer:
    """Records CSS rule usage for one page between ``start()`` and ``stop()``."""

    def __init__(self, page: Page):
        self.page = page
        self._session: Optional[CDPSession] = None
        self._headers: Dict[str, str] = {}
        self._texts: Dict[str, "asyncio.Future[Optional[str]]"] = {}
        self.logger: Any = logger.bind(component="css_usage")

    @property
    def tracking(self) -> bool:
        return self._session is not None

    async def start(self) -> None:
        """Begin tracking rule usage. Must run before navigation."""
        self._session = await self.page.context.new_cdp_session(self.page)
        self._session.on("CSS.styleSheetAdded", self._on_style_sheet_added)
        await self._session.send("DOM.enable")
        await self._session.send("CSS.enable")
        await self._session.send("CSS.startRuleUsageTracking")

    def _on_style_sheet_added(self, event: Dict[str, Any]) -> None:
        header = event["header"]
        # Constructed stylesheets have no source URL.
        if self._session is None or not header.get("sourceURL"):
            return
        sheet_id = header["styleSheetId"]
        self._headers[sheet_id] = header["sourceURL"]
        self._texts[sheet_id] = asyncio.ensure_future(self._fetch_text(self._session, sheet_id))

    async def _fetch_text(self, session: CDPSession, sheet_id: str) -> Optional[str]:
        try:
            response = await session.send(
                "CSS.getStyleSheetText", {"styleSheetId": sheet_id}
            )
        except PlaywrightError as e:
            self.logger.warning(
                "Stylesheet text unavailable", style_sheet_id=sheet_id, error=str(e)
            )
            return None
        return response["text"]

    async def detach(self) -> None:
        """Drop tracking without collecting results. No-op once stopped."""
        if self._session is None:
            return
        session, self._session = self._session, None
        for fetch in self._texts.values():
            fetch.cancel()
        try:
            await session.detach()
        except PlaywrightError as e:
            self.logger.warning("CDP session detach failed", error=str(e))

    async def stop(self) -> List[StyleSheetCoverage]:
        """Stop tracking and return used ranges per stylesheet, in discovery order."""
        if self._session is None:
            raise RuntimeError("CSS usage tracking was not started")

        session = self._session
        try:
            usage = await session.send("CSS.stopRuleUsageTracking")
            pending = dict(self._texts)
            texts = dict(zip(pending, await asyncio.gather(*pending.values())))
        finally:
            self._session = None
            await session.detach()

        ranges: Dict[str, List[Tuple[int, int]]] = {}
        for rule in usage.get("ruleUsage", []):
            if rule.get("used"):
                ranges.setdefault(rule["styleSheetId"], []).append(
                    (int(rule["startOffset"]), int(rule["endOffset"]))
                )

        coverage = [
            StyleSheetCoverage(
                url=url, text=texts[sheet_id], ranges=merge_ranges(ranges.get(sheet_id, []))
            )
            for sheet_id, url in list(self._headers.items())
            if texts.get(sheet_id) is not None
        ]
        self.logger.debug(
            "CSS usage collected",
            stylesheets=len(coverage),
            used_ranges=sum(len(sheet.ranges) for sheet in coverage),
        )
        return coverage
