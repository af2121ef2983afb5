# src/tracking/__init__.py — v1
"""Usage tracking and cost estimation."""
