from ..config import SettingsManager

# Shared by every route module; tests monkeypatch this attribute.
settings_mgr = SettingsManager()
