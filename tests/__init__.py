"""
Test Suite
==========

Test suite matching the route_prerenderer/ package structure.

Test Categories:
- unit: Unit tests for individual components, against mock pages
- integration: End-to-end rendering with a real Chromium instance
"""
