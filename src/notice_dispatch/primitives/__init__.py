"""Low-level concurrency primitives."""

from __future__ import annotations

from .once import OnceGuard

__all__ = ["OnceGuard"]
