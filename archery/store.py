"""Key-value stores that hold the shared tournament documents.

The engine needs three operations: ``read(key)``, ``write(key, value)`` and
``subscribe(key, on_change)``. Values are plain JSON data. Writes replace
the whole value; the last write wins.

Implementations:
- MemoryStore: process-local, used by tests and one-off CLI runs
- JsonFileStore: one ``<key>.json`` file per key in a data directory
- HttpStore: Firebase Realtime Database style REST (``{base_url}/{key}.json``)
"""

import copy
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Optional

import requests

from .exceptions import StoreLoadError, StoreWriteError
from .schemas import TournamentConfig
from .utils import load_json, save_json

logger = logging.getLogger('archery.store')

Listener = Callable[[Any], None]


class KeyValueStore(ABC):
    """
    Base class for tournament stores.

    Subclasses implement ``_read`` and ``_write``; subscription and change
    notification are shared.
    """

    def __init__(self):
        self._listeners: dict[str, list[Listener]] = {}

    @abstractmethod
    def _read(self, key: str) -> Any:
        """Return the stored value or None."""

    @abstractmethod
    def _write(self, key: str, value: Any) -> None:
        """Replace the stored value."""

    def read(self, key: str) -> Any:
        """
        Read a value.

        Returns:
            The stored JSON value, or None if the key is empty

        Raises:
            StoreLoadError: If the store cannot be reached or the payload is malformed
        """
        return self._read(key)

    def write(self, key: str, value: Any) -> None:
        """
        Replace a value and notify subscribers of the key.

        Raises:
            StoreWriteError: If the store rejects the write
        """
        self._write(key, value)
        self._notify(key, value)

    def subscribe(self, key: str, on_change: Listener) -> Callable[[], None]:
        """
        Call ``on_change`` with the current value now and after every write.

        Returns:
            A function that removes the subscription
        """
        self._listeners.setdefault(key, []).append(on_change)
        on_change(self.read(key))

        def unsubscribe() -> None:
            listeners = self._listeners.get(key, [])
            if on_change in listeners:
                listeners.remove(on_change)

        return unsubscribe

    def _notify(self, key: str, value: Any) -> None:
        for listener in list(self._listeners.get(key, [])):
            listener(copy.deepcopy(value))


class MemoryStore(KeyValueStore):
    """In-process store."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        super().__init__()
        self._data: dict[str, Any] = copy.deepcopy(initial or {})

    def _read(self, key: str) -> Any:
        return copy.deepcopy(self._data.get(key))

    def _write(self, key: str, value: Any) -> None:
        if value is None:
            self._data.pop(key, None)
        else:
            self._data[key] = copy.deepcopy(value)


class JsonFileStore(KeyValueStore):
    """Store keeping each key in ``<data_dir>/<key>.json``."""

    def __init__(self, data_dir: str | Path):
        super().__init__()
        self.data_dir = Path(data_dir)

    def _path(self, key: str) -> Path:
        return self.data_dir / f'{key}.json'

    def _read(self, key: str) -> Any:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return load_json(path)
        except (OSError, ValueError) as e:
            raise StoreLoadError(f'Could not load {key} from {path}: {e}') from e

    def _write(self, key: str, value: Any) -> None:
        path = self._path(key)
        try:
            if value is None:
                path.unlink(missing_ok=True)
                logger.debug(f'Cleared {path}')
            else:
                save_json(path, value)
        except (OSError, TypeError) as e:
            raise StoreWriteError(f'Could not save {key} to {path}: {e}') from e


class HttpStore(KeyValueStore):
    """
    REST store compatible with the Firebase Realtime Database API.

    ``GET {base_url}/{key}.json`` reads a value and ``PUT`` replaces it. The
    REST API has no push channel here, so ``refresh`` polls a key and
    notifies subscribers when the value changed since the last read.
    """

    def __init__(
        self,
        base_url: str,
        auth_token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        super().__init__()
        self.base_url = base_url.rstrip('/')
        self.auth_token = auth_token
        self.timeout = timeout
        self.session = session or requests.Session()
        self._last_seen: dict[str, Any] = {}

    def _url(self, key: str) -> str:
        return f'{self.base_url}/{key}.json'

    def _params(self) -> dict[str, str]:
        return {'auth': self.auth_token} if self.auth_token else {}

    def _read(self, key: str) -> Any:
        url = self._url(key)
        logger.debug(f'GET {url}')
        try:
            response = self.session.get(url, params=self._params(), timeout=self.timeout)
            response.raise_for_status()
            value = response.json()
        except requests.RequestException as e:
            raise StoreLoadError(f'Could not load {key} from {url}: {e}') from e
        except json.JSONDecodeError as e:
            raise StoreLoadError(f'Malformed payload for {key} from {url}: {e}') from e

        self._last_seen[key] = value
        return value

    def _write(self, key: str, value: Any) -> None:
        url = self._url(key)
        logger.debug(f'PUT {url}')
        try:
            response = self.session.put(
                url, params=self._params(), json=value, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise StoreWriteError(f'Could not save {key} to {url}: {e}') from e
        self._last_seen[key] = copy.deepcopy(value)

    def refresh(self, key: str) -> bool:
        """
        Poll a key and notify subscribers if it changed remotely.

        Returns:
            True if the value changed since it was last seen
        """
        previous = self._last_seen.get(key)
        value = self._read(key)
        if value == previous:
            return False
        logger.info(f'Remote change detected for {key}')
        self._notify(key, value)
        return True


def create_store(config: TournamentConfig) -> KeyValueStore:
    """
    Build the store selected by the configuration.

    Raises:
        ValueError: If the http backend is selected without a store URL
    """
    if config.store_backend == 'memory':
        return MemoryStore()
    if config.store_backend == 'http':
        if not config.store_url:
            raise ValueError('store_url is required for the http store backend')
        return HttpStore(config.store_url, timeout=config.store_timeout)
    return JsonFileStore(config.data_dir)
