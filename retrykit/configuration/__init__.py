from retrykit.configuration.config import RetrySettings, get_settings

__all__ = ["RetrySettings", "get_settings"]
