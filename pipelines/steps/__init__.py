# Namespace for pipeline steps
from .validate_connections import ValidateConnections  # noqa: F401
from .persist_connections import PersistConnections  # noqa: F401
