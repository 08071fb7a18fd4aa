"""
DiagramForge - Test Configuration and Fixtures
"""
import os
import tempfile
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SCRATCH_DIR'] = tempfile.mkdtemp(prefix='diagramforge-tests-')
os.environ['LOG_LEVEL'] = 'INFO'

from app.main import app
from app.core.config import settings
from app.core.database import Base, get_db
from app.models.diagram import Diagram

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
TestSessionLocal = sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


class DiagramBuilder:
    """
    Builds editor-shaped diagram payloads.

        b = DiagramBuilder()
        user = b.node("User", ("id", "int"), ("name", "string"))
        order = b.node("Order")
        b.edge(user, order, target_card="*")
        model = b.build()
    """

    def __init__(self):
        self.nodes: List[Dict[str, Any]] = []
        self.edges: List[Dict[str, Any]] = []

    def node(self, label: str, *attributes: Tuple[str, Optional[str]],
             node_id: Optional[str] = None, association_class: bool = False) -> str:
        node_id = node_id or f"n{len(self.nodes) + 1}"
        self.nodes.append({
            "id": node_id,
            "type": "classNode",
            "position": {"x": 0, "y": 0},
            "data": {
                "label": label,
                "attributes": [
                    {"id": f"{node_id}-a{i}", "name": name, "type": attr_type}
                    for i, (name, attr_type) in enumerate(attributes)
                ],
                "isAssociationClass": association_class,
            },
        })
        return node_id

    def edge(self, source: str, target: str, kind: str = "association",
             source_card: Optional[str] = None, target_card: Optional[str] = None,
             association_class: Optional[str] = None) -> "DiagramBuilder":
        data: Dict[str, Any] = {"type": kind}
        if source_card is not None:
            data["sourceCardinality"] = source_card
        if target_card is not None:
            data["targetCardinality"] = target_card
        if association_class is not None:
            data["associationClass"] = association_class
        self.edges.append({
            "id": f"e{len(self.edges) + 1}",
            "source": source,
            "target": target,
            "type": "smoothstep",
            "data": data,
        })
        return self

    def build(self) -> Dict[str, Any]:
        return {"nodes": list(self.nodes), "edges": list(self.edges), "metadata": {"version": 1}}


@pytest.fixture
def builder() -> DiagramBuilder:
    return DiagramBuilder()


@pytest.fixture
def shop_model() -> Dict[str, Any]:
    """User 1-* Order, Order ◆ LineItem, User *-* Product via Purchase"""
    b = DiagramBuilder()
    user = b.node("User", ("id", "int"), ("name", "string"), ("age", "int"))
    order = b.node("Order", ("total", "long"))
    item = b.node("Line Item", ("id", "int"), ("quantity", "int"))
    product = b.node("Product", ("title", "string"))
    purchase = b.node("Purchase", ("date", "Date"), association_class=True)
    b.edge(user, order, source_card="1", target_card="*")
    b.edge(order, item, kind="composition")
    b.edge(user, product, source_card="*", target_card="*", association_class=purchase)
    return b.build()


@pytest.fixture
def scratch_dir(tmp_path, monkeypatch):
    """Isolated scratch root for one test"""
    root = tmp_path / "scratch"
    root.mkdir()
    monkeypatch.setattr(settings, "SCRATCH_DIR", str(root))
    return root


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def stored_diagram(db_session: AsyncSession, shop_model: Dict[str, Any]) -> Diagram:
    """Persisted diagram holding the shop model"""
    diagram = Diagram(
        name=fake.catch_phrase(),
        description=fake.sentence(),
        model=shop_model,
    )
    db_session.add(diagram)
    await db_session.commit()
    await db_session.refresh(diagram)
    return diagram
