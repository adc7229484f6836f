from .settings import ConverseSettings, get_settings, DEFAULT_MAX_STEPS, CALLBACK_TIMEOUT_SECONDS

__all__ = ["ConverseSettings", "get_settings", "DEFAULT_MAX_STEPS", "CALLBACK_TIMEOUT_SECONDS"]
