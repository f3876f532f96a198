"""
Data Models
===========

Pydantic models for render options, completion strategies and render results.
"""
