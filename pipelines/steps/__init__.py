from .validate_connections import ValidateConnections
from .persist_connections import PersistConnections

__all__ = ["ValidateConnections", "PersistConnections"]
