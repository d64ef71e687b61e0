"""File-backed cache of full API keys.

The backend reveals a full key exactly once, at creation. This cache keeps
that secret so the dashboard can keep using it after the reveal dialog is
closed. It is a convenience layer: losing the file only means the key is
"not available" again, and the tenant has to create a new one.

File format:
    {"keys": [{"id": "...", "prefix": "...", "fullKey": "..."}]}

No locking: one process, rare writes, last writer wins.
"""
import json
import logging
import uuid
from pathlib import Path
from typing import Optional, Union

import aiofiles
import aiofiles.os
from pydantic import ValidationError

from ..asp.server_client import mask_key
from ..schemas.api_keys import CachedApiKey


logger = logging.getLogger(__name__)


class ApiKeyCache:
    """Maps API key id and prefix to the one-time-revealed full secret."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._entries: dict[str, CachedApiKey] = {}
        self._prefix_index: dict[str, str] = {}
        self._loaded = False

    async def store(self, key_id: str, prefix: str, full_key: str) -> None:
        """Persist a key; visible to lookups as soon as this returns.

        A prefix belongs to one key: an older entry holding the same prefix
        under a different id is dropped.
        """
        await self._ensure_loaded()

        previous = self._entries.get(key_id)
        if previous is not None and previous.prefix != prefix:
            self._unindex(previous.prefix, key_id)

        other_id = self._prefix_index.get(prefix)
        if other_id is not None and other_id != key_id:
            self._entries.pop(other_id, None)
            logger.info("Replaced cached key %s holding prefix '%s'", other_id, prefix)

        self._entries[key_id] = CachedApiKey(id=key_id, prefix=prefix, full_key=full_key)
        self._prefix_index[prefix] = key_id

        await self._save()
        logger.info("Stored API key: id=%s, prefix=%s", key_id, prefix)

    async def get_by_id(self, key_id: str) -> Optional[str]:
        await self._ensure_loaded()
        entry = self._entries.get(key_id)
        return entry.full_key if entry else None

    async def get_by_prefix(self, prefix: str) -> Optional[str]:
        await self._ensure_loaded()
        key_id = self._prefix_index.get(prefix)
        entry = self._entries.get(key_id) if key_id else None

        if entry is None:
            logger.info(
                "Key not found for prefix '%s'. Cached prefixes: %s",
                prefix,
                sorted(self._prefix_index),
            )
            return None

        logger.debug("Found key for prefix '%s': %s", prefix, mask_key(entry.full_key))
        return entry.full_key

    async def remove(self, key_id: str, prefix: Optional[str] = None) -> None:
        """Drop a revoked key; lookups by its id or prefix return None afterwards.

        A prefix that now points at another key is left alone.
        """
        await self._ensure_loaded()

        entry = self._entries.pop(key_id, None)
        if entry is not None:
            self._unindex(entry.prefix, key_id)
        if prefix:
            self._unindex(prefix, key_id)

        await self._save()
        logger.info("Removed API key: id=%s, prefix=%s", key_id, prefix)

    def _unindex(self, prefix: str, key_id: str) -> None:
        if self._prefix_index.get(prefix) == key_id:
            del self._prefix_index[prefix]

    async def list_cached(self) -> list[tuple[str, str]]:
        """Cached (id, prefix) pairs; full keys are never listed."""
        await self._ensure_loaded()
        return [(entry.id, entry.prefix) for entry in self._entries.values()]

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return

        try:
            async with aiofiles.open(self.path, mode="r", encoding="utf-8") as f:
                raw = await f.read()
            data = json.loads(raw)
            for item in data.get("keys", []):
                entry = CachedApiKey.model_validate(item)
                self._entries[entry.id] = entry
                self._prefix_index[entry.prefix] = entry.id
            logger.info("Loaded %s API key(s) from %s", len(self._entries), self.path)
        except FileNotFoundError:
            logger.info("Cache file %s not found, starting with empty cache", self.path)
        except (OSError, ValueError, AttributeError, ValidationError) as e:
            logger.warning("Failed to load cache from %s: %s", self.path, e)
            self._entries.clear()
            self._prefix_index.clear()

        self._loaded = True

    async def _save(self) -> None:
        """Write the whole cache via temp file + replace; failures are logged only."""
        payload = {
            "keys": [
                entry.model_dump(by_alias=True) for entry in self._entries.values()
            ]
        }
        temp_path = self.path.with_name(f".{self.path.name}.{uuid.uuid4().hex}.tmp")

        try:
            if self.path.parent and not self.path.parent.exists():
                await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
            async with aiofiles.open(temp_path, mode="w", encoding="utf-8") as f:
                await f.write(json.dumps(payload, indent=2))
            await aiofiles.os.replace(temp_path, self.path)
            logger.debug("Saved %s API key(s) to %s", len(payload["keys"]), self.path)
        except OSError as e:
            logger.error("Failed to save cache to %s: %s", self.path, e)
            await self._remove_file_best_effort(temp_path)

    async def _remove_file_best_effort(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.error("Failed to remove temp cache file: %s", exc)
