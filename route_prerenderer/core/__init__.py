"""
Core Business Logic
==================

Core modules for prerendering routes with browser automation.

Modules:
- rendering: page sessions, request filtering, CSS usage capture and scheduling
"""
