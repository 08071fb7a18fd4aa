# API endpoints
from . import export, health

__all__ = ["export", "health"]
