"""
Engine state: provider cache plus the two durable stores.

Modules
=======

``provider_cache``
    :class:`~loa_board.memory.provider_cache.ProviderCache`, the TTL memo in
    front of Lost Ark API reads (ephemeral, rebuilt empty on restart).
``links``
    :class:`~loa_board.memory.links.LinkStore`, user -> linked character and
    pinned personal view.
``registry``
    :class:`~loa_board.memory.registry.TargetRegistry`, the de-duplicated set
    of shared board messages.
``persist``
    Best-effort JSON snapshot helpers used by both stores.
"""

from .links import LinkStore
from .provider_cache import ProviderCache
from .registry import TargetRegistry

__all__ = ["LinkStore", "ProviderCache", "TargetRegistry"]
