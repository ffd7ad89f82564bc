"""Pytest configuration and fixtures."""

import os

# Settings are read once at import time
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ALLOWED_HOSTS", '["*"]')
os.environ.setdefault("NOTIFICATION_BACKEND", "mock")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from src.main import app
from src.core.database import get_db_session, Base
from src.middleware.auth import create_access_token, get_password_hash
from src.models import (
    Order,
    Plan,
    Product,
    ProductVariant,
    ShippingClass,
    StoreSettings,
    Tenant,
    User,
)

# Test database URL (using SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Create test engine
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@pytest_asyncio.fixture
async def db_session():
    """Create a test database session on a fresh schema."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client(db_session):
    """Create a test client with database dependency override."""

    async def get_test_db():
        yield db_session

    app.dependency_overrides[get_db_session] = get_test_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def bearer(user: User) -> dict:
    """Authorization header for a user."""
    token = create_access_token({
        "sub": str(user.id),
        "tenant_id": str(user.tenant_id) if user.tenant_id else None,
        "role": user.role,
    })
    return {"Authorization": f"Bearer {token}"}


class StoreFactory:
    """Builds tenants with their owner, settings and catalog directly in the database."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def plan(self, **overrides) -> Plan:
        values = {
            "name": "Free",
            "product_limit": 5,
            "allow_custom_domain": False,
            "allow_tracking": True,
            "price": Decimal("0.00"),
            "is_active": True,
        }
        values.update(overrides)
        plan = Plan(**values)
        self.session.add(plan)
        await self.session.commit()
        return plan

    async def tenant(self, slug: str, plan: Plan = None, status: str = "active", contact_email: str = None):
        plan = plan or await self.plan()
        tenant = Tenant(id=uuid.uuid4(), name=slug.title(), slug=slug, plan_id=plan.id, status=status)
        self.session.add(tenant)
        await self.session.flush()
        user = User(
            email=f"owner@{slug}.example.com",
            password_hash=get_password_hash("password123"),
            role="tenant",
            tenant_id=tenant.id,
        )
        self.session.add(user)
        self.session.add(StoreSettings(tenant_id=tenant.id, contact_email=contact_email))
        await self.session.commit()
        await self.session.refresh(tenant)
        return tenant, user

    async def product(self, tenant: Tenant, slug: str = "t-shirt", price: str = "500.00", status: str = "active"):
        product = Product(
            tenant_id=tenant.id,
            name=slug.replace("-", " ").title(),
            slug=slug,
            price=Decimal(price),
            status=status,
            images=[],
        )
        self.session.add(product)
        await self.session.commit()
        await self.session.refresh(product)
        return product

    async def variant(self, product: Product, name: str = "Large", price: str = "550.00"):
        variant = ProductVariant(name=name, price=Decimal(price), stock=10, attributes={"size": "L"})
        product.variants.append(variant)
        product.has_variants = True
        await self.session.commit()
        await self.session.refresh(variant)
        return variant

    async def shipping_class(self, tenant: Tenant, fee: str = "60.00", name: str = "Inside Dhaka"):
        shipping_class = ShippingClass(
            tenant_id=tenant.id,
            name=name,
            fee=Decimal(fee),
            location="Dhaka City",
            is_default=True,
        )
        self.session.add(shipping_class)
        await self.session.commit()
        return shipping_class

    async def order(
        self,
        tenant: Tenant,
        product: Product,
        total: str,
        status: str = "new",
        created_at: datetime = None,
        shipping_class: ShippingClass = None,
    ) -> Order:
        if shipping_class is None:
            result = await self.session.execute(
                select(ShippingClass).where(ShippingClass.tenant_id == tenant.id).limit(1)
            )
            shipping_class = result.scalar_one_or_none() or await self.shipping_class(tenant)
        order = Order(
            tenant_id=tenant.id,
            product_id=product.id,
            shipping_class_id=shipping_class.id,
            customer_name="Rahim Uddin",
            phone="+8801712345678",
            address="House 12, Road 5, Dhanmondi, Dhaka",
            quantity=1,
            subtotal=Decimal(total),
            shipping_fee=Decimal("0.00"),
            total=Decimal(total),
            status=status,
            created_at=created_at or datetime.now(timezone.utc),
        )
        self.session.add(order)
        await self.session.commit()
        return order


@pytest_asyncio.fixture
async def factory(db_session):
    return StoreFactory(db_session)


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user."""
    return bearer


@pytest.fixture
def checkout_data():
    """Build a storefront checkout document."""

    def build(product_id, shipping_class_id, **overrides):
        attributes = {
            "product_id": str(product_id),
            "shipping_class_id": str(shipping_class_id),
            "customer_name": "Rahim Uddin",
            "phone": "01712345678",
            "address": "House 12, Road 5, Dhanmondi, Dhaka",
            "quantity": 1,
        }
        attributes.update(overrides)
        return {"data": {"type": "order", "attributes": attributes}}

    return build
