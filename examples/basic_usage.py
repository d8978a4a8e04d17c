"""Basic single-resource fetch example.

This example shows the simplest usage pattern: build the service from
the default configuration and fetch resources. The first fetch goes to
the API; later fetches (in this run or the next) come from the cache.
"""

from dexcache import Dex, load_config


# Option 1: Factory method (recommended for most cases)
# Reads DEXCACHE_* environment variables, uses the per-user data directory,
# wires FileBlobStore, RequestsGateway and a thread pool, and probes connectivity
dex = Dex.from_config(load_config())

# Option 2: Manual wiring (full control over adapters)
# from pathlib import Path
# from dexcache import DataCache, FileBlobStore, RequestsGateway
# store = FileBlobStore(Path("./dex-data"))
# gateway = RequestsGateway(timeout=10.0)
# dex = Dex(store, gateway, data_cache=DataCache(store, gateway))

# Any API URL can be fetched through the cache; the URL is the default key
electric = dex.fetch_resource("https://pokeapi.co/api/v2/type/electric")
print(f"Electric type has {len(electric['pokemon'])} members")

# Complete records merge details, species, encounters and evolution chain
pikachu = dex.get_complete_record("pikachu")
print(f"#{pikachu['id']} {pikachu['name']}: {pikachu['description']}")

# Sprites and cries are downloaded once and then served from disk
print(f"Sprite: {dex.load_sprite(pikachu)}")
print(f"Cry: {dex.load_cry(pikachu['id'])}")

dex.close()
