"""
Configuration Management
=======================

Environment-based configuration using Pydantic Settings.

Components:
- settings: Application settings and browser launch defaults
- logging: Structured logging configuration
"""
