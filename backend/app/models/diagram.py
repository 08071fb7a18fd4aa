from sqlalchemy import Column, String, DateTime, Text, JSON, Boolean, Index
from datetime import datetime
import uuid

from app.core.database import Base


def generate_uuid() -> str:
    """Generate a UUID string"""
    return str(uuid.uuid4())


class Diagram(Base):
    """
    Persisted class diagram.

    Owned by the diagram CRUD layer; the generator only reads `model`,
    the editor graph ({nodes, edges, metadata}) saved by the collaborative canvas.
    """
    __tablename__ = "diagrams"

    __table_args__ = (
        Index('ix_diagrams_is_active', 'is_active'),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Editor graph
    model = Column(JSON, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Diagram {self.id} {self.name!r}>"
