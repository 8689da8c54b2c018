from .http_connector import HttpSearchConnector, DEFAULT_TIMEOUT

__all__ = ["HttpSearchConnector", "DEFAULT_TIMEOUT"]
