from .settings import PanelSettings, settings, get_settings

__all__ = ["PanelSettings", "settings", "get_settings"]
