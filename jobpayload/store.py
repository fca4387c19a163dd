import threading
from typing import Dict, Tuple, Union

import redis

from .config import PayloadConfig
from .errors import StoreUnavailableError
from .log import get_logger

logger = get_logger(__name__)

Selector = Union[str, int]


class ListStoreHandle:
    """A Redis connection narrowed down to what fairness signals need."""

    def __init__(self, client: redis.Redis, selector: Selector):
        self._client = client
        self.selector = selector

    def push_head(self, key: str, value: str) -> None:
        try:
            self._client.lpush(key, value)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            raise StoreUnavailableError(
                f"Signal store {self.selector!r} unavailable while pushing to {key}: {e}"
            ) from e


class RedisSignalStore:
    """
    Hands out list-store handles by database selector.

    An int (or digit string) selects a database index on `redis_url`;
    any other string names an entry of `config.connections`.
    Clients are created once per selector and reused.
    """

    def __init__(self, config: PayloadConfig):
        self._config = config
        self._clients: Dict[Selector, redis.Redis] = {}
        self._lock = threading.Lock()

    def _client_for(self, selector: Selector) -> redis.Redis:
        if isinstance(selector, str) and selector.isdigit():
            selector = int(selector)

        if selector in self._clients:
            return self._clients[selector]

        options = {
            "socket_timeout": self._config.socket_timeout,
            "socket_connect_timeout": self._config.socket_timeout,
        }
        try:
            if isinstance(selector, int):
                client = redis.Redis.from_url(self._config.redis_url, db=selector, **options)
            else:
                url = self._config.connections.get(selector)
                if url is None:
                    raise StoreUnavailableError(f"No Redis connection named {selector!r} is configured")
                client = redis.Redis.from_url(url, **options)
        except ValueError as e:
            raise StoreUnavailableError(f"Invalid Redis URL for {selector!r}: {e}") from e

        logger.debug("signal_store_client_created", selector=selector)
        self._clients[selector] = client
        return client

    def connection(self, selector: Selector) -> ListStoreHandle:
        with self._lock:
            client = self._client_for(selector)
        return ListStoreHandle(client, selector)

    def close(self) -> None:
        with self._lock:
            for client in self._clients.values():
                client.close()
            self._clients.clear()


# ---------- Process-wide stores ----------
_SHARED_STORES: Dict[Tuple, RedisSignalStore] = {}
_SHARED_LOCK = threading.Lock()


def _store_key(config: PayloadConfig) -> Tuple:
    return (config.redis_url, config.socket_timeout, tuple(sorted(config.connections.items())))


def shared_store(config: PayloadConfig) -> RedisSignalStore:
    """One store per distinct connection setup, reused by every payload in the process."""
    key = _store_key(config)
    with _SHARED_LOCK:
        store = _SHARED_STORES.get(key)
        if store is None:
            store = RedisSignalStore(config)
            _SHARED_STORES[key] = store
        return store


def close_shared_stores() -> None:
    with _SHARED_LOCK:
        for store in _SHARED_STORES.values():
            store.close()
        _SHARED_STORES.clear()
