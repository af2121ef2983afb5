# src/llm/__init__.py — v1
"""Provider routing, adapters and shared types."""
