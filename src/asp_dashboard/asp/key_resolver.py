"""Pick the API key used for public API calls made on a tenant's behalf."""
import logging
from datetime import datetime, timezone
from typing import Optional

from ..cache.api_key_cache import ApiKeyCache
from ..config import get_env_api_key
from ..schemas.api_keys import InternalApiKey, LatestApiKey
from .exceptions import AspClientError, MissingApiKeyError
from .internal_client import InternalApiClient
from .server_client import mask_key


logger = logging.getLogger(__name__)


def _utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so mixed listings stay comparable."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def select_latest_key(keys: list[InternalApiKey]) -> Optional[InternalApiKey]:
    """Most recently created key, or None for an empty list."""
    if not keys:
        return None
    return max(keys, key=lambda k: _utc(k.created_at))


async def find_latest_api_key(
    internal_client: InternalApiClient,
    cache: ApiKeyCache,
) -> Optional[LatestApiKey]:
    """Look up the tenant's newest key and its cached secret.

    Returns:
        LatestApiKey (api_key is None when the secret is not cached), or
        None when the tenant has no keys at all

    Raises:
        AspClientError: If the key list cannot be fetched
    """
    keys = await internal_client.list_api_keys()
    latest = select_latest_key(keys)
    if latest is None:
        return None

    full_key = await cache.get_by_prefix(latest.prefix)
    if full_key is None:
        logger.warning(
            "API key with prefix '%s' exists upstream but is not cached. "
            "The full key is only available when a key is created; "
            "create a new key or set ASP_API_KEY.",
            latest.prefix,
        )

    return LatestApiKey(
        id=latest.id,
        prefix=latest.prefix,
        api_key=full_key,
        display_name=latest.display_name,
        created_at=latest.created_at,
    )


async def resolve_api_key(
    internal_client: Optional[InternalApiClient],
    cache: ApiKeyCache,
) -> str:
    """Resolve the key for public API calls.

    Priority:
    1. Cached full key of the tenant's latest key (needs a session)
    2. ASP_API_KEY environment variable

    Raises:
        MissingApiKeyError: If neither source yields a key
    """
    if internal_client is not None:
        try:
            latest = await find_latest_api_key(internal_client, cache)
            if latest is not None and latest.api_key:
                logger.info("Using API key from cache: %s", mask_key(latest.api_key))
                return latest.api_key
        except AspClientError as e:
            logger.warning("Failed to look up latest API key: %s", e)

    env_key = get_env_api_key()
    if env_key:
        logger.info("Using API key from environment: %s", mask_key(env_key))
        return env_key

    raise MissingApiKeyError(
        "No API key available. Create an API key in the dashboard "
        "or set the ASP_API_KEY environment variable."
    )
