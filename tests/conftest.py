import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import sushi_orders.db as db
from sushi_orders.main import app
from sushi_orders.models import Base
from sushi_orders.pricing import DEFAULT_VOCABULARY, MenuPriceList, PricingEngine, StaticCatalog
from sushi_orders.routes.pricing import limiter
from sushi_orders.seed_menu import sample_products
from sushi_orders.services.catalog import product_to_record
from sushi_orders.services.preview import reset_preview_service


@pytest.fixture
def catalog():
    """In-memory catalog of the sample menu, ids as in the database."""
    products = sample_products()
    for product_id, product in enumerate(products, start=1):
        product.id = product_id
    return StaticCatalog(product_to_record(p) for p in products)


@pytest.fixture
def vocab():
    return DEFAULT_VOCABULARY


@pytest.fixture
def engine(catalog):
    """Pricing engine over the sample menu with default prices."""
    return PricingEngine(MenuPriceList(products=catalog), catalog)


@pytest.fixture
def session_factory():
    """Sessions bound to a seeded in-memory SQLite database.

    Uses StaticPool so all connections share the same in-memory database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Patch the db module used by the app
    db.engine = engine
    db.SessionLocal = TestingSessionLocal

    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    session.add_all(sample_products())
    session.commit()
    session.close()

    yield TestingSessionLocal

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    """Shared FastAPI TestClient using the seeded in-memory database."""
    def override_get_db():
        db_sess = session_factory()
        try:
            yield db_sess
        finally:
            db_sess.close()

    app.dependency_overrides[db.get_db] = override_get_db

    # Preview snapshots the menu of whichever database it saw first
    reset_preview_service()
    limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    reset_preview_service()
