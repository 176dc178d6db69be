# autoexit/models/__init__.py
from autoexit.database import Base
from .api_configuration import ApiConfiguration
from .position import Position, PositionStatus, ExitReason

__all__ = ["Base", "Position", "PositionStatus", "ExitReason", "ApiConfiguration"]
