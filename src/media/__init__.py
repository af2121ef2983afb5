# src/media/__init__.py — v1
"""Image payload helpers."""
