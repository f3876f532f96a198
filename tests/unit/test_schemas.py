"""
Unit Tests for Render Schemas
=============================

Tests for option defaulting, aliasing, completion strategy precedence and
render results.
"""

import pytest
from pydantic import ValidationError

from route_prerenderer.config.settings import Settings
from route_prerenderer.models.schemas import (
    DEFAULT_INJECT_PROPERTY,
    CompletionKind,
    CompletionStrategy,
    RenderOptions,
    RenderResult,
    Viewport,
)


class TestRenderOptionsDefaults:
    """Test option defaults."""

    def test_defaults(self):
        options = RenderOptions()

        assert options.max_concurrent_pages == 0
        assert options.skip_third_party_requests is True
        assert options.inline_used_css is True
        assert options.element_poll_interval == 100
        assert options.inject is None
        assert options.inject_property is None
        assert options.viewport is None
        assert options.launch_options == {}

    def test_inject_property_defaulted_when_inject_set(self):
        options = RenderOptions(inject={"foo": "bar"})
        assert options.inject_property == DEFAULT_INJECT_PROPERTY

    def test_inject_property_kept_when_given(self):
        options = RenderOptions(inject=1, injectProperty="__APP_STATE")
        assert options.inject_property == "__APP_STATE"

    def test_falsy_inject_value_still_named(self):
        options = RenderOptions(inject=0)
        assert options.inject_property == DEFAULT_INJECT_PROPERTY

    def test_input_mapping_not_mutated(self):
        raw = {"inject": {"a": 1}, "maxConcurrentPages": 2}
        RenderOptions.model_validate(raw)
        assert raw == {"inject": {"a": 1}, "maxConcurrentPages": 2}

    def test_options_are_frozen(self):
        options = RenderOptions()
        with pytest.raises(ValidationError):
            options.max_concurrent_pages = 3


class TestRenderOptionsAliases:
    """Test camelCase and legacy names."""

    def test_camel_case_names(self):
        options = RenderOptions.model_validate(
            {
                "maxConcurrentPages": 4,
                "renderAfterDocumentEvent": "app-rendered",
                "skipThirdPartyRequests": False,
                "inlineUsedCSS": False,
                "viewport": {"width": 1280, "height": 720},
            }
        )

        assert options.max_concurrent_pages == 4
        assert options.render_after_document_event == "app-rendered"
        assert options.skip_third_party_requests is False
        assert options.inline_used_css is False
        assert options.viewport == Viewport(width=1280, height=720)

    def test_legacy_max_concurrent_routes(self):
        options = RenderOptions.model_validate({"maxConcurrentRoutes": 3})
        assert options.max_concurrent_pages == 3

    def test_snake_case_names(self):
        options = RenderOptions(max_concurrent_pages=2, render_after_time=500)
        assert options.max_concurrent_pages == 2
        assert options.render_after_time == 500

    def test_unknown_keys_become_launch_options(self):
        options = RenderOptions.model_validate(
            {"headless": False, "args": ["--lang=en"], "renderAfterTime": 10}
        )

        assert options.launch_options == {"headless": False, "args": ["--lang=en"]}
        assert options.render_after_time == 10

    def test_explicit_launch_options_win_over_flat_keys(self):
        options = RenderOptions.model_validate(
            {"headless": False, "launchOptions": {"headless": True}}
        )
        assert options.launch_options == {"headless": True}

    def test_negative_concurrency_rejected(self):
        with pytest.raises(ValidationError):
            RenderOptions(max_concurrent_pages=-1)

    def test_invalid_viewport_rejected(self):
        with pytest.raises(ValidationError):
            RenderOptions(viewport={"width": 0, "height": 600})


class TestCompletionStrategy:
    """Test completion strategy precedence."""

    def test_immediate_by_default(self):
        assert RenderOptions().completion_strategy == CompletionStrategy.immediate()

    def test_document_event_wins(self):
        options = RenderOptions(
            render_after_document_event="rendered",
            render_after_element_exists="#app",
            render_after_time=1000,
        )
        strategy = options.completion_strategy

        assert strategy.kind is CompletionKind.ON_EVENT
        assert strategy.value == "rendered"

    def test_element_before_time(self):
        options = RenderOptions(render_after_element_exists="#app", render_after_time=1000)
        assert options.completion_strategy == CompletionStrategy.on_element("#app")

    def test_time_delay(self):
        options = RenderOptions(render_after_time=250)
        assert options.completion_strategy == CompletionStrategy.after_delay(250)

    def test_zero_delay_is_immediate(self):
        options = RenderOptions(render_after_time=0)
        assert options.completion_strategy.kind is CompletionKind.IMMEDIATE


class TestLaunchOptions:
    """Test launch option derivation."""

    def test_with_launch_args_appends_missing(self):
        options = RenderOptions(launch_options={"args": ["--lang=en"]})
        updated = options.with_launch_args("--no-sandbox", "--lang=en")

        assert updated.launch_args == ["--lang=en", "--no-sandbox"]
        assert options.launch_args == ["--lang=en"]

    def test_with_launch_defaults_keeps_caller_values(self):
        options = RenderOptions(launch_options={"headless": False})
        updated = options.with_launch_defaults({"headless": True, "channel": "chrome"})

        assert updated.launch_options == {"headless": False, "channel": "chrome"}

    def test_from_settings(self):
        settings = Settings(max_concurrent_pages=5, element_poll_interval=50, headless=False)
        options = RenderOptions.from_settings(settings, renderAfterTime=20)

        assert options.max_concurrent_pages == 5
        assert options.element_poll_interval == 50
        assert options.render_after_time == 20
        assert options.launch_options == {"headless": False}

    def test_from_settings_caller_values_win(self):
        settings = Settings(max_concurrent_pages=5)
        options = RenderOptions.from_settings(settings, maxConcurrentPages=1)
        assert options.max_concurrent_pages == 1


class TestRenderResult:
    """Test render result model."""

    def test_aliases(self):
        result = RenderResult(originalRoute="/t%C3%A9st.html", route="/tést.html", html="<html/>")

        assert result.original_route == "/t%C3%A9st.html"
        assert result.model_dump(by_alias=True) == {
            "originalRoute": "/t%C3%A9st.html",
            "route": "/tést.html",
            "html": "<html/>",
        }
