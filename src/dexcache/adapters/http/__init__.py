"""HTTP gateway adapter."""

from dexcache.adapters.http.gateway import RequestsGateway


__all__ = ["RequestsGateway"]
