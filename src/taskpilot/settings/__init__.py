"""Settings module - persisted provider config and system prompt."""

from taskpilot.settings.store import SettingsStore

__all__ = ["SettingsStore"]
