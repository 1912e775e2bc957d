from .repos import ConnectionsRepoPort

__all__ = [
    "ConnectionsRepoPort",
]
