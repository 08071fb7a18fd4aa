# Re-export all models for convenient imports
from app.models.diagram import Diagram

__all__ = [
    "Diagram",
]
