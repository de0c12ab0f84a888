#!/usr/bin/env python3
"""Seed demo catalog script.

Creates a small demo catalog (categories, products and tags) in the
configured database through the regular command services, so every
relationship rule applies to the seeded data too.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --create-tables
"""

import argparse
import asyncio
from decimal import Decimal

from catalog_api.application.category_service import CategoryService
from catalog_api.application.product_service import ProductService
from catalog_api.application.results import ServiceResult
from catalog_api.application.tag_service import TagService
from catalog_api.catalog.sql_repository import SqlAlchemyCatalogRepository
from catalog_api.infrastructure.database import async_session_factory, create_schema

# Category name -> [(name, description, price, tag names)]
DEMO_CATALOG: dict[str, list[tuple[str, str, str, list[str]]]] = {
    "Electronics": [
        ("Laptop Pro 14", "14-inch laptop with 16 GB RAM", "1299.00", ["portable", "premium"]),
        ("Wireless Mouse", "Bluetooth mouse with silent clicks", "24.99", ["portable"]),
        ("4K Monitor", "27-inch IPS monitor", "349.50", []),
    ],
    "Books": [
        ("Python Cookbook", "Recipes for mastering Python", "39.90", ["bestseller"]),
        ("Domain-Driven Design", "Tackling complexity in software", "54.00", []),
    ],
    "Home": [
        ("Desk Lamp", "LED lamp, warm white", "19.99", []),
        ("Espresso Machine", "15 bar pump espresso maker", "229.00", ["premium"]),
    ],
}


def _value(result: ServiceResult, what: str):
    if not result.success:
        raise RuntimeError(f"Failed to seed {what}: {result.error_code} {result.error}")
    return result.value


async def seed_catalog() -> dict[str, int]:
    """Seed the demo catalog.

    Returns:
        Counts of created categories, products and tags.
    """
    counts = {"categories": 0, "products": 0, "tags": 0}

    async with async_session_factory() as session:
        repository = SqlAlchemyCatalogRepository(session)
        categories = CategoryService(repository, actor_id="seed")
        products = ProductService(repository, actor_id="seed")
        tags = TagService(repository, actor_id="seed")

        for category_name, items in DEMO_CATALOG.items():
            category = _value(await categories.create_category(category_name), category_name)
            counts["categories"] += 1

            for name, description, price, tag_names in items:
                product = _value(
                    await products.create_product(
                        name=name,
                        description=description,
                        price=Decimal(price),
                        category_id=category.id,
                    ),
                    name,
                )
                counts["products"] += 1

                # A tag belongs to at most one product, so each product gets its own
                for tag_name in tag_names:
                    tag = _value(await tags.create_tag(tag_name), tag_name)
                    _value(await products.add_tag_to_product(product.id, tag.id), tag_name)
                    counts["tags"] += 1

    return counts


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed the demo product catalog")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create catalog tables first (for databases not managed by Alembic)",
    )
    args = parser.parse_args()

    print("=" * 60)
    print("Catalog Seeder")
    print("=" * 60)

    if args.create_tables:
        print("Creating database tables...")
        await create_schema()
        print("Tables ready.")
        print()

    counts = await seed_catalog()

    print(f"  Categories: {counts['categories']}")
    print(f"  Products: {counts['products']}")
    print(f"  Tags: {counts['tags']}")
    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
