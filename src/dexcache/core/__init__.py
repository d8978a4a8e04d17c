"""Core domain module for dexcache.

This module contains the domain models, port definitions and the cache
services. It depends on adapters only through the ports.
"""

from dexcache.core.models import CacheDomain, CacheStats, FailureRecord
from dexcache.core.ports import BlobStorePort, GatewayPort, ProgressCallback


__all__ = [
    "BlobStorePort",
    "CacheDomain",
    "CacheStats",
    "FailureRecord",
    "GatewayPort",
    "ProgressCallback",
]
