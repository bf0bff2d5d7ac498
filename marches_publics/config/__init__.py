from marches_publics.config.settings import AppConfig, Config, LoggingConfig, StorageConfig

__all__ = ["AppConfig", "Config", "LoggingConfig", "StorageConfig"]
