"""Game library service core: domain entities, caching facade, request handlers and router."""

__version__ = "0.3.0"

__all__ = [
    "entities",
    "cache_keys",
    "api_model",
    "facade",
    "api_mapping",
    "handlers",
    "health",
    "service",
]