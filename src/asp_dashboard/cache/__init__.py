"""Local, non-authoritative storage for one-time-revealed API keys."""
from .api_key_cache import ApiKeyCache

__all__ = ["ApiKeyCache"]
