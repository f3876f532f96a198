"""
Rendering Errors
================

Exceptions raised by the prerenderer itself. Failures coming from the browser
(launch, navigation, evaluation) are logged and propagated unchanged.
"""


class PrerenderError(Exception):
    """Base class for errors raised by the prerenderer."""

    pass


class RendererNotInitializedError(PrerenderError):
    """Raised when routes are rendered before the browser was launched."""

    def __init__(self, message: str = "Renderer not initialized, call initialize() first"):
        super().__init__(message)
