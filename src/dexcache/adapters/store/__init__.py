"""Blob store adapters."""

from dexcache.adapters.store.filesystem import FileBlobStore
from dexcache.adapters.store.null import NullBlobStore


__all__ = ["FileBlobStore", "NullBlobStore"]
