import os

_MODULES = {
    "production": "config.production",
    "prod": "config.production",
    "testing": "config.testing",
    "test": "config.testing",
}


def get_settings_module() -> str:
    """Settings module for APP_ENV; anything unrecognised runs as development."""
    return _MODULES.get(os.getenv("APP_ENV", "development").strip().lower(), "config.development")
