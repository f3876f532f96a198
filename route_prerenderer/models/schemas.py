"""
Pydantic Models and Schemas
===========================

Render options, completion strategies and render results.
Option models are frozen: defaults are resolved once during validation and
every derived configuration is a new instance.
"""

from typing import Optional, List, Dict, Any, Set, Union
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from route_prerenderer.config.settings import Settings, get_settings

DEFAULT_INJECT_PROPERTY = "__PRERENDER_INJECTED"


class CompletionKind(str, Enum):
    """How a page signals that rendering has finished."""
    ON_EVENT = "on_event"
    ON_ELEMENT = "on_element"
    AFTER_DELAY = "after_delay"
    IMMEDIATE = "immediate"


class CompletionStrategy(BaseModel):
    """Tagged completion strategy.

    ``value`` holds the document event name for ``ON_EVENT``, the CSS selector
    for ``ON_ELEMENT``, the delay in milliseconds for ``AFTER_DELAY`` and
    ``None`` for ``IMMEDIATE``.
    """
    model_config = ConfigDict(frozen=True)

    kind: CompletionKind = CompletionKind.IMMEDIATE
    value: Optional[Union[str, int]] = None

    @classmethod
    def on_event(cls, name: str) -> "CompletionStrategy":
        return cls(kind=CompletionKind.ON_EVENT, value=name)

    @classmethod
    def on_element(cls, selector: str) -> "CompletionStrategy":
        return cls(kind=CompletionKind.ON_ELEMENT, value=selector)

    @classmethod
    def after_delay(cls, ms: int) -> "CompletionStrategy":
        return cls(kind=CompletionKind.AFTER_DELAY, value=ms)

    @classmethod
    def immediate(cls) -> "CompletionStrategy":
        return cls()


class Viewport(BaseModel):
    """Page viewport dimensions."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    width: int = Field(..., gt=0, description="Viewport width in CSS pixels")
    height: int = Field(..., gt=0, description="Viewport height in CSS pixels")
    device_scale_factor: Optional[float] = Field(
        None, gt=0, alias="deviceScaleFactor", description="Device pixel ratio"
    )


class RenderOptions(BaseModel):
    """Options for prerendering a batch of routes."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    # Scheduling
    max_concurrent_pages: int = Field(
        0,
        ge=0,
        validation_alias=AliasChoices(
            "max_concurrent_pages", "maxConcurrentPages", "maxConcurrentRoutes"
        ),
        description="Maximum simultaneous pages, 0 for unbounded",
    )

    # Completion detection, first set option wins
    render_after_document_event: Optional[str] = Field(
        None, alias="renderAfterDocumentEvent", description="Document event name"
    )
    render_after_element_exists: Optional[str] = Field(
        None, alias="renderAfterElementExists", description="CSS selector to wait for"
    )
    render_after_time: Optional[int] = Field(
        None, ge=0, alias="renderAfterTime", description="Delay in milliseconds"
    )
    element_poll_interval: int = Field(
        100, gt=0, alias="elementPollInterval", description="Selector poll interval in ms"
    )

    # Page setup
    inject: Optional[Any] = Field(None, description="Value exposed on the page's window")
    inject_property: Optional[str] = Field(
        None, alias="injectProperty", description="Window property receiving the injected value"
    )
    viewport: Optional[Viewport] = None
    skip_third_party_requests: bool = Field(
        True, alias="skipThirdPartyRequests", description="Abort requests to other origins"
    )
    inline_used_css: bool = Field(
        True, alias="inlineUsedCSS", description="Replace inline styles with the used CSS"
    )
    navigation_timeout: Optional[int] = Field(
        None, ge=0, alias="navigationTimeout", description="page.goto timeout in ms"
    )

    # Browser
    launch_options: Dict[str, Any] = Field(
        default_factory=dict, alias="launchOptions", description="chromium.launch() keyword args"
    )

    @model_validator(mode="before")
    @classmethod
    def apply_defaults(cls, data: Any) -> Any:
        """
        Resolve defaults on a copy of the raw input.

        Keys that are not render options are treated as browser launch
        options, so a flat options mapping can be passed straight through.
        The injected global gets a default name when only a value was given.
        """
        if not isinstance(data, dict):
            return data

        known = set().union(*(cls.field_keys(name) for name in cls.model_fields))

        resolved = {key: value for key, value in data.items() if key in known}
        passthrough = {key: value for key, value in data.items() if key not in known}
        if passthrough:
            launch_key = "launchOptions" if "launchOptions" in resolved else "launch_options"
            resolved[launch_key] = {**passthrough, **(resolved.get(launch_key) or {})}

        if resolved.get("inject") is not None and not (
            resolved.get("injectProperty") or resolved.get("inject_property")
        ):
            resolved["inject_property"] = DEFAULT_INJECT_PROPERTY
        return resolved

    @classmethod
    def field_keys(cls, name: str) -> Set[str]:
        """Every input key that populates field ``name``."""
        field = cls.model_fields[name]
        keys = {name}
        if field.alias:
            keys.add(field.alias)
        if isinstance(field.validation_alias, AliasChoices):
            keys.update(str(choice) for choice in field.validation_alias.choices)
        return keys

    @property
    def completion_strategy(self) -> CompletionStrategy:
        """Resolve the single completion strategy honoured for this batch."""
        if self.render_after_document_event:
            return CompletionStrategy.on_event(self.render_after_document_event)
        if self.render_after_element_exists:
            return CompletionStrategy.on_element(self.render_after_element_exists)
        if self.render_after_time:
            return CompletionStrategy.after_delay(self.render_after_time)
        return CompletionStrategy.immediate()

    @property
    def launch_args(self) -> List[str]:
        return list(self.launch_options.get("args") or [])

    def with_launch_args(self, *args: str) -> "RenderOptions":
        """Return a copy whose launch args include ``args`` (existing ones are kept)."""
        merged = self.launch_args
        for arg in args:
            if arg not in merged:
                merged.append(arg)
        return self.model_copy(update={"launch_options": {**self.launch_options, "args": merged}})

    def with_launch_defaults(self, defaults: Dict[str, Any]) -> "RenderOptions":
        """Return a copy with ``defaults`` filled in under the caller's launch options."""
        return self.model_copy(update={"launch_options": {**defaults, **self.launch_options}})

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **values: Any) -> "RenderOptions":
        """Build options, taking unset scheduling/polling values from settings."""
        settings = settings or get_settings()
        data: Dict[str, Any] = dict(values)
        for name in ("max_concurrent_pages", "element_poll_interval"):
            if not cls.field_keys(name) & data.keys():
                data[name] = getattr(settings, name)
        options = cls.model_validate(data)
        return options.with_launch_defaults(settings.launch_defaults())


class RenderResult(BaseModel):
    """Rendered HTML for one route."""
    model_config = ConfigDict(populate_by_name=True)

    original_route: str = Field(..., alias="originalRoute", description="Route as requested")
    route: str = Field(..., description="Decoded location path after navigation")
    html: str = Field(..., description="Serialized document")
