import os
from decimal import Decimal

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ALLOCATION_ORDER", "price_desc")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from coupon_qty.db import Base, get_db
from coupon_qty.hooks import Hooks
from coupon_qty.main import app
from coupon_qty.models.coupon import Coupon
from coupon_qty.quantity_usage import install_quantity_usage


@pytest.fixture
def engine():
    """SQLite en memoria compartida por todas las sesiones del test."""
    _engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(_engine)
    yield _engine
    Base.metadata.drop_all(_engine)


@pytest.fixture
def db_session(engine):
    TestSession = sessionmaker(bind=engine, autoflush=False)
    s = TestSession()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client(engine):
    TestSession = sessionmaker(bind=engine, autoflush=False)

    def _get_db():
        s = TestSession()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def plugin_hooks():
    h = Hooks()
    install_quantity_usage(h)
    return h


@pytest.fixture
def add_coupon(db_session):
    def _add(code, usage_limit=None, usage_count=0, count_by_quantity=True, discount_type="percent", amount="50"):
        c = Coupon(
            code=code,
            discount_type=discount_type,
            amount=Decimal(amount),
            usage_limit=usage_limit,
            usage_count=usage_count,
            count_by_quantity=count_by_quantity,
            individual_use=count_by_quantity,
            is_active=True,
        )
        db_session.add(c)
        db_session.commit()
        return c

    return _add
