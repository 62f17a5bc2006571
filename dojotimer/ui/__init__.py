"""UI package."""

from .timer_widget import TimerWidget, format_clock
from .config_panel import ConfigPanel

__all__ = ["TimerWidget", "ConfigPanel", "format_clock"]
