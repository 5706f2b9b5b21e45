"""Shared helpers: logging setup and quaternion utilities."""
