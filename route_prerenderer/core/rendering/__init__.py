"""
Rendering Module
===============

Route prerendering with Playwright browser automation.

Components:
- completion: in-page "render complete" detection
- request_filter: third-party request blocking
- css_usage: used-CSS capture and inlining
- page_session: per-route page session driver
- scheduler: concurrency-limited route scheduling
- renderer: browser lifecycle and the caller-facing renderer
"""
