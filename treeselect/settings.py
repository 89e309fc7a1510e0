import json
import logging
import os

CONFIG_ENV_VAR = "TREESELECT_CONFIG"
TRACE_ENV_VAR = "TREESELECT_TRACE"

DEFAULT_CONFIG_PATH = os.path.expanduser("~/.treeselect_config.json")

DEFAULT_SETTINGS = {
    "trace": False,
}

# Cached value (computed once on first use)
_TRACE_ENABLED: bool | None = None


def config_path() -> str:
    return os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH


def load_settings() -> dict:
    """Load settings from the config file layered over DEFAULT_SETTINGS."""
    settings = DEFAULT_SETTINGS.copy()
    path = config_path()
    try:
        if os.path.exists(path):
            with open(path) as f:
                settings.update(json.load(f))
    except (OSError, ValueError) as e:
        logging.warning(f"[settings] Could not load settings from {path}: {e}")
    return settings


def get_setting(key, default=None):
    """Utility function to get a single setting value"""
    settings = load_settings()
    if key in settings:
        return settings[key]
    return default


def set_setting(key, value):
    """Utility function to set a single setting value"""
    path = config_path()
    try:
        settings = {}
        if os.path.exists(path):
            with open(path) as f:
                settings = json.load(f)

        settings[key] = value

        with open(path, "w") as f:
            json.dump(settings, f, indent=2)
    except (OSError, ValueError) as e:
        logging.error(f"[settings] Could not save setting {key}: {e}")


def is_trace_enabled() -> bool:
    """Check whether select/deselect calls should be traced to the debug log.

    True if TREESELECT_TRACE is set to a truthy value or the ``trace`` setting
    is on. Result is cached after first call.
    """
    global _TRACE_ENABLED
    if _TRACE_ENABLED is None:
        env_value = os.environ.get(TRACE_ENV_VAR, "").lower()
        _TRACE_ENABLED = env_value in ("1", "true", "yes", "on") or bool(get_setting("trace", False))
        if _TRACE_ENABLED:
            logging.info("[settings] Selection call tracing enabled")
    return _TRACE_ENABLED


def reset_trace_cache():
    global _TRACE_ENABLED
    _TRACE_ENABLED = None
