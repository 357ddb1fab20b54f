from .config import Config, LazyConfig, settings

__all__ = ["Config", "LazyConfig", "settings"]
