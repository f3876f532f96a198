"""
Route Prerenderer
=================

Bounded-concurrency prerendering of single page application routes through
browser automation.

This package provides:
- Playwright-driven page sessions that wait for an application-defined
  "render complete" signal
- Per-page third-party request filtering
- Inlining of only the CSS rules used while rendering
- A concurrency-limited scheduler that returns results in route order
"""

from route_prerenderer.config.logging import setup_logging
from route_prerenderer.core.rendering.errors import PrerenderError, RendererNotInitializedError
from route_prerenderer.core.rendering.renderer import PlaywrightRenderer
from route_prerenderer.models.schemas import (
    CompletionKind,
    CompletionStrategy,
    RenderOptions,
    RenderResult,
    Viewport,
)

__version__ = "1.0.0"
__author__ = "Route Prerenderer Team"

__all__ = [
    "CompletionKind",
    "CompletionStrategy",
    "PlaywrightRenderer",
    "PrerenderError",
    "RenderOptions",
    "RenderResult",
    "RendererNotInitializedError",
    "Viewport",
    "setup_logging",
]
