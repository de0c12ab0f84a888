"""Create categories, products, tags and their association tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _lifecycle_columns() -> list[sa.Column]:
    return [
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True, index=True),
    ]


def upgrade() -> None:
    """Create catalog tables."""
    op.create_table(
        'categories',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, index=True),
        *_lifecycle_columns(),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.String(1000), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true', index=True),
        sa.Column('category_id', sa.String(36),
                  sa.ForeignKey('categories.id'), nullable=False, index=True),
        *_lifecycle_columns(),
    )

    op.create_table(
        'tags',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, index=True),
        sa.Column('product_id', sa.String(36),
                  sa.ForeignKey('products.id'), nullable=True, index=True),
        *_lifecycle_columns(),
    )

    # Category product sets
    op.create_table(
        'category_products',
        sa.Column('category_id', sa.String(36), sa.ForeignKey('categories.id'), primary_key=True),
        sa.Column('product_id', sa.String(36), sa.ForeignKey('products.id'), primary_key=True),
    )

    # Product tag sets
    op.create_table(
        'product_tags',
        sa.Column('product_id', sa.String(36), sa.ForeignKey('products.id'), primary_key=True),
        sa.Column('tag_id', sa.String(36), sa.ForeignKey('tags.id'), primary_key=True),
    )


def downgrade() -> None:
    """Drop catalog tables."""
    op.drop_table('product_tags')
    op.drop_table('category_products')
    op.drop_table('tags')
    op.drop_table('products')
    op.drop_table('categories')
