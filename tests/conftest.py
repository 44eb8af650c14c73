import os

os.environ.setdefault("ENV", "testing")

import pytest
from decimal import Decimal
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator

from main import app
from core.database import Base, enable_sqlite_foreign_keys
from models.users import User
from models.catalogs import Catalog
from models.categories import Category
from models.sub_categories import SubCategory
from models.brands import Brand
from models.vehicle_types import VehicleType
from models.websites import Website
from models.vendors import Vendor
from schemas.products import ProductCreate
from services.product_service import ProductService
from services.token_service import TokenService
from utils.deps import get_db
from utils.slug import slug_base

# File based SQLite so tests can open a second, independent session
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
enable_sqlite_foreign_keys(engine)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    Creates a fresh, empty database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(session):
    """Opens extra sessions on the same database, closed after the test."""
    opened = []

    def factory() -> Session:
        db = TestingSessionLocal()
        opened.append(db)
        return db

    yield factory

    for db in opened:
        db.close()


@pytest.fixture
async def client(session: Session):
    """
    Yields an HTTP client that talks to the app using the test database.
    """
    def override_get_db():
        try:
            yield session
        finally:
            pass  # Session cleanup handled by session fixture

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


def make_user(session: Session, email: str, role: str) -> User:
    user = User(email=email, first_name="Test", last_name="User", role=role, is_active=True)
    session.add(user)
    session.commit()
    return user


def auth_headers_for(user: User) -> dict:
    token = TokenService.create_access_token(user.email, user.id, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(session) -> User:
    return make_user(session, "admin@example.com", "admin")


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return auth_headers_for(admin_user)


@pytest.fixture
def viewer_headers(session) -> dict:
    return auth_headers_for(make_user(session, "viewer@example.com", "viewer"))


@pytest.fixture
def role_headers(session):
    """Builds auth headers for a fresh user with the given role."""
    def build(role: str) -> dict:
        return auth_headers_for(make_user(session, f"{role}@example.com", role))

    return build


def _named(model, name: str, **extra):
    return model(name=name, name_key=slug_base(name), slug=slug_base(name), **extra)


@pytest.fixture
def parents(session):
    """One of every parent kind, plus three websites."""
    category = _named(Category, "Engine Parts")
    rows = {
        "catalog": _named(Catalog, "Spring Catalog"),
        "other_catalog": _named(Catalog, "Autumn Catalog"),
        "category": category,
        "other_category": _named(Category, "Body Parts"),
        "brand": _named(Brand, "Bosch"),
        "other_brand": _named(Brand, "Denso"),
        "vehicle_type": _named(VehicleType, "Sedan"),
        "w1": _named(Website, "Main Store", url="https://main.example.com"),
        "w2": _named(Website, "Outlet", url="https://outlet.example.com"),
        "w3": _named(Website, "Wholesale", url="https://wholesale.example.com"),
    }
    session.add_all(rows.values())
    session.flush()
    rows["sub_category"] = _named(SubCategory, "Filters", category_id=category.id)
    session.add(rows["sub_category"])
    session.commit()
    return rows


@pytest.fixture
def vendor(session) -> Vendor:
    vendor = Vendor(email="supplier@example.com", first_name="Sam", last_name="Supplier",
                    phone="+971 50 123 4567", company_name="Parts Co")
    session.add(vendor)
    session.commit()
    return vendor


@pytest.fixture
def make_product(session, admin_user):
    counter = {"n": 0}

    def factory(**fields):
        counter["n"] += 1
        payload = {"sku": f"SKU-{counter['n']:04d}", "name": f"Product {counter['n']}"}
        payload.update(fields)
        return ProductService.create_product(session, ProductCreate(**payload), admin_user.id)

    return factory


@pytest.fixture
def purchase_payload(vendor):
    def build(product_id: int, **fields):
        payload = {
            "currency": "USD",
            "quantity": 10,
            "cost_price": Decimal("12.50"),
            "status": "pending",
            "vendor_id": vendor.id,
            "product_id": product_id,
        }
        payload.update(fields)
        return payload

    return build
