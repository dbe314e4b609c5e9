"""Terminal interface components for supervising PRD agent loops."""

__version__ = "0.1.0"

__all__ = ["help", "log", "picker", "picker_view", "settings", "states", "styles", "tabbar"]