"""Adapters implementing the core ports (display, input, audio, notifications)."""
