from . import connections, health, publish

__all__ = ["connections", "health", "publish"]
