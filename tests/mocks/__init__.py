"""
Centralized mock objects for testing.

This package provides reusable fakes for channels, WebSocket connections
and timers, reducing code duplication across test files.
"""
