"""
Render Completion
=================

Detects when a page has finished client-side rendering. The check runs inside
the page's own JavaScript context and resolves exactly once, according to the
configured completion strategy.

The wait has no upper bound: if the event never fires or the selector never
matches, the session waits forever. Callers that need a deadline should use
the ``after_delay`` strategy.
"""

from typing import Any, Dict

from playwright.async_api import Page

from route_prerenderer.config.logging import get_logger
from route_prerenderer.models.schemas import CompletionKind, CompletionStrategy

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 100

WAIT_FOR_RENDER_JS = """
(options) => new Promise((resolve) => {
  switch (options.kind) {
    case 'on_event':
      document.addEventListener(options.value, () => resolve(), { once: true });
      break;
    case 'on_element': {
      const timer = setInterval(() => {
        if (document.querySelector(options.value)) {
          clearInterval(timer);
          resolve();
        }
      }, options.pollInterval);
      break;
    }
    case 'after_delay':
      setTimeout(() => resolve(), options.value);
      break;
    default:
      resolve();
  }
})
"""


def build_wait_arguments(
    strategy: CompletionStrategy, poll_interval: int = DEFAULT_POLL_INTERVAL
) -> Dict[str, Any]:
    """Serialize a strategy into the argument passed to the in-page check."""
    value = None if strategy.kind is CompletionKind.IMMEDIATE else strategy.value
    return {"kind": strategy.kind.value, "value": value, "pollInterval": poll_interval}


async def wait_for_render(
    page: Page, strategy: CompletionStrategy, poll_interval: int = DEFAULT_POLL_INTERVAL
) -> None:
    """Suspend until the page reports that rendering is complete."""
    logger.debug("Waiting for render", kind=strategy.kind.value, value=strategy.value)
    await page.evaluate(WAIT_FOR_RENDER_JS, build_wait_arguments(strategy, poll_interval))
