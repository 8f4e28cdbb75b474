"""Terminal, headless and entry-point surfaces."""

from .headless import HeadlessRunner, run_headless

__all__ = ["HeadlessRunner", "run_headless"]
