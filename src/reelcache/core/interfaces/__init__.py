"""Core interfaces (Protocol classes) for reelcache."""

from reelcache.core.interfaces.cache_backend import IStore
from reelcache.core.interfaces.credential_store import ICredentialStore
from reelcache.core.interfaces.invalidator import IInvalidator
from reelcache.core.interfaces.key_builder import IKeyBuilder
from reelcache.core.interfaces.upstream import IFilmClient, IUpstreamAuth

__all__ = [
    "IStore",
    "IKeyBuilder",
    "IInvalidator",
    "ICredentialStore",
    "IUpstreamAuth",
    "IFilmClient",
]
