"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Self
from uuid import UUID, uuid4

from catalog_api.domain.base import ValueObject
from catalog_api.domain.exceptions import InvalidArgumentError

NIL_UUID = UUID(int=0)


# ============================================================================
# Typed Identifiers
# ============================================================================


@dataclass(frozen=True)
class UuidIdentifier(ValueObject):
    """Base for strongly-typed UUID identifiers.

    Using typed IDs prevents accidentally mixing up a category id with a
    product id. The all-zero UUID is treated as the nil identifier and is
    rejected wherever a reference is required.
    """

    value: UUID

    @classmethod
    def generate(cls) -> Self:
        """Generate a new identifier.

        Returns:
            New identifier with random UUID.
        """
        return cls(value=uuid4())

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Create identifier from string representation.

        Args:
            value: String UUID representation.

        Returns:
            Identifier instance.

        Raises:
            InvalidArgumentError: If the value is not a valid UUID.
        """
        try:
            return cls(value=UUID(value))
        except (TypeError, ValueError, AttributeError) as e:
            raise InvalidArgumentError(
                f"{cls.__name__}", "must be a valid UUID", value
            ) from e

    @classmethod
    def nil(cls) -> Self:
        """Return the nil identifier."""
        return cls(value=NIL_UUID)

    def is_nil(self) -> bool:
        """Check whether this is the all-zero identifier.

        Returns:
            True if the wrapped UUID is nil.
        """
        return self.value == NIL_UUID

    def __str__(self) -> str:
        """Return string representation.

        Returns:
            UUID as string.
        """
        return str(self.value)


@dataclass(frozen=True)
class CategoryId(UuidIdentifier):
    """Strongly-typed category identifier."""


@dataclass(frozen=True)
class ProductId(UuidIdentifier):
    """Strongly-typed product identifier."""


@dataclass(frozen=True)
class TagId(UuidIdentifier):
    """Strongly-typed tag identifier."""


# ============================================================================
# Field Rules
# ============================================================================


CATEGORY_NAME_MAX_LENGTH = 100
TAG_NAME_MAX_LENGTH = 100
PRODUCT_NAME_MAX_LENGTH = 200
PRODUCT_DESCRIPTION_MAX_LENGTH = 1000


def validate_text(field: str, value: str | None, max_length: int) -> str:
    """Validate a required text field.

    Args:
        field: Field name used in the error.
        value: Candidate value.
        max_length: Maximum allowed length.

    Returns:
        The value, unchanged.

    Raises:
        InvalidArgumentError: If empty, whitespace-only or too long.
    """
    if value is None or not value.strip():
        raise InvalidArgumentError(field, "must not be empty", value)
    if len(value) > max_length:
        raise InvalidArgumentError(
            field, f"must be at most {max_length} characters", len(value)
        )
    return value


def validate_price(value: Decimal | int | float | str | None) -> Decimal:
    """Validate and normalize a product price.

    Args:
        value: Candidate price. Floats are converted through ``str``.

    Returns:
        Price as Decimal.

    Raises:
        InvalidArgumentError: If missing, not a number or negative.
    """
    if value is None or isinstance(value, bool):
        raise InvalidArgumentError("price", "must be a number", value)
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidArgumentError("price", "must be a number", value) from e
    if not price.is_finite():
        raise InvalidArgumentError("price", "must be a finite number", value)
    if price < 0:
        raise InvalidArgumentError("price", "must not be negative", value)
    return price
