"""dexcache - offline-capable local cache for a creature-database REST API.

This library keeps JSON resources, sprites and audio clips from PokéAPI on
local disk, serves them from memory or disk before touching the network,
and keeps working in degraded form when the API is unreachable.

Example:
    >>> from dexcache import Dex, load_config
    >>> dex = Dex.from_config(load_config())
    >>> records = dex.get_all_records(max_count=151)  # network on first run only
    >>> dex.get_stats().to_dict()["data"]
    {'files': 304, 'size': 9123456}
"""

from dexcache.adapters.executor import SynchronousExecutor, ThreadPoolExecutorAdapter
from dexcache.adapters.http import RequestsGateway
from dexcache.adapters.store import FileBlobStore, NullBlobStore
from dexcache.config import DexConfig, default_data_root, load_config
from dexcache.core.aggregator import BulkAggregator
from dexcache.core.data_cache import DataCache
from dexcache.core.exceptions import (
    AggregationError,
    CacheCorruptError,
    CacheError,
    ConfigurationError,
    DexcacheError,
    InvalidDomainError,
    NoCachedDataError,
    RemoteFetchError,
)
from dexcache.core.failures import FailureLog
from dexcache.core.keys import sanitize
from dexcache.core.media import MediaCache, SpriteOptions
from dexcache.core.models import (
    CacheCounters,
    CacheDomain,
    CacheStats,
    DomainStats,
    FailureRecord,
    FetchResult,
    StoreResult,
)
from dexcache.core.ports import (
    BlobStorePort,
    ExecutorPort,
    GatewayPort,
    NullProgressReporter,
    ProgressCallback,
    ProgressReporter,
)
from dexcache.core.services import Dex
from dexcache.progress import RichProgressReporter


__version__ = "0.1.0"

__all__ = [
    "AggregationError",
    "BlobStorePort",
    "BulkAggregator",
    "CacheCorruptError",
    "CacheCounters",
    "CacheDomain",
    "CacheError",
    "CacheStats",
    "ConfigurationError",
    "DataCache",
    "Dex",
    "DexConfig",
    "DexcacheError",
    "DomainStats",
    "ExecutorPort",
    "FailureLog",
    "FailureRecord",
    "FetchResult",
    "FileBlobStore",
    "GatewayPort",
    "InvalidDomainError",
    "MediaCache",
    "NoCachedDataError",
    "NullBlobStore",
    "NullProgressReporter",
    "ProgressCallback",
    "ProgressReporter",
    "RemoteFetchError",
    "RequestsGateway",
    "RichProgressReporter",
    "SpriteOptions",
    "StoreResult",
    "SynchronousExecutor",
    "ThreadPoolExecutorAdapter",
    "__version__",
    "default_data_root",
    "load_config",
    "sanitize",
]
