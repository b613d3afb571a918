from .formats import (
    REGISTRY,
    ROLE_TOKENS,
    ColumnRole,
    FormatDescriptor,
    FormatTag,
    get_infos,
    lookup,
)
from .records import ChannelLocations, ChannelRecord

__all__ = [
    "REGISTRY",
    "ROLE_TOKENS",
    "ColumnRole",
    "FormatDescriptor",
    "FormatTag",
    "get_infos",
    "lookup",
    "ChannelLocations",
    "ChannelRecord",
]
