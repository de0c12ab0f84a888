"""SQLAlchemy models for the catalog.

Defines the categories, products and tags tables plus the two
association tables that back a category's product set and a product's
tag set. Identifiers are stored as UUID strings.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
)
from sqlalchemy.orm import Mapped, mapped_column

from catalog_api.infrastructure.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Association Tables
# ============================================================================


category_products = Table(
    "category_products",
    Base.metadata,
    Column("category_id", String(36), ForeignKey("categories.id"), primary_key=True),
    Column("product_id", String(36), ForeignKey("products.id"), primary_key=True),
)

product_tags = Table(
    "product_tags",
    Base.metadata,
    Column("product_id", String(36), ForeignKey("products.id"), primary_key=True),
    Column("tag_id", String(36), ForeignKey("tags.id"), primary_key=True),
)


# ============================================================================
# Aggregate Tables
# ============================================================================


class SoftDeleteColumns:
    """Lifecycle columns shared by every catalog table."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )


class CategoryModel(SoftDeleteColumns, Base):
    """Category row.

    Attributes:
        id: Category identifier.
        name: Category name, unique among non-deleted rows.
        version: Aggregate version, checked on every UPDATE.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version, "version_id_generator": False}


class ProductModel(SoftDeleteColumns, Base):
    """Product row.

    Attributes:
        id: Product identifier.
        name: Product name.
        description: Product description.
        price: Non-negative price.
        active: Whether the product is offered.
        category_id: Owning category.
        version: Aggregate version, checked on every UPDATE.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(String(1000), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version, "version_id_generator": False}


class TagModel(SoftDeleteColumns, Base):
    """Tag row.

    Attributes:
        id: Tag identifier.
        name: Tag name.
        product_id: Product the tag is assigned to, if any.
        version: Aggregate version, checked on every UPDATE.
    """

    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    product_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("products.id"),
        nullable=True,
        index=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version, "version_id_generator": False}
