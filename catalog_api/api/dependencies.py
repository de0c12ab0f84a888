"""Shared router dependencies.

Repository selection per request, service construction, identifier
parsing and the mapping from domain error kinds to HTTP status codes.
"""

from collections.abc import AsyncGenerator
from typing import Annotated, TypeVar

from fastapi import Depends, HTTPException, Request, status

from catalog_api.application.category_service import CategoryService
from catalog_api.application.product_service import ProductService
from catalog_api.application.results import ServiceResult
from catalog_api.application.tag_service import TagService
from catalog_api.catalog.repository import (
    CatalogRepository,
    InMemoryCatalogRepository,
    get_catalog_store,
)
from catalog_api.catalog.service import CatalogService
from catalog_api.catalog.sql_repository import SqlAlchemyCatalogRepository
from catalog_api.domain.exceptions import DomainError
from catalog_api.domain.value_objects import UuidIdentifier
from catalog_api.infrastructure.config import settings
from catalog_api.infrastructure.database import async_session_factory

T = TypeVar("T")
IdT = TypeVar("IdT", bound=UuidIdentifier)

ACTOR_HEADER = "X-Actor-ID"

# Domain error kind -> HTTP status
ERROR_STATUS_CODES: dict[str, int] = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_ARGUMENT": status.HTTP_400_BAD_REQUEST,
    "NULL_ARGUMENT": status.HTTP_400_BAD_REQUEST,
    "NAME_CONFLICT": status.HTTP_409_CONFLICT,
    "ENTITY_DELETED": status.HTTP_409_CONFLICT,
    "ALREADY_DELETED": status.HTTP_409_CONFLICT,
    "NOT_DELETED": status.HTTP_409_CONFLICT,
    "HAS_ACTIVE_DEPENDENTS": status.HTTP_409_CONFLICT,
    "CONCURRENCY_CONFLICT": status.HTTP_409_CONFLICT,
}


# ============================================================================
# Repository and Services
# ============================================================================


async def get_repository() -> AsyncGenerator[CatalogRepository, None]:
    """Open a unit of work on the configured storage backend.

    Yields:
        Repository scoped to the current request.
    """
    if settings.storage_backend == "database":
        async with async_session_factory() as session:
            yield SqlAlchemyCatalogRepository(session)
    else:
        yield InMemoryCatalogRepository(get_catalog_store())


Repository = Annotated[CatalogRepository, Depends(get_repository)]


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def get_catalog_service(request: Request, repository: Repository) -> CatalogService:
    """Get catalog read service with request ID."""
    return CatalogService(repository, request_id=_request_id(request))


def get_category_service(request: Request, repository: Repository) -> CategoryService:
    """Get category command service with request ID and actor."""
    return CategoryService(
        repository,
        request_id=_request_id(request),
        actor_id=request.headers.get(ACTOR_HEADER),
    )


def get_product_service(request: Request, repository: Repository) -> ProductService:
    """Get product command service with request ID and actor."""
    return ProductService(
        repository,
        request_id=_request_id(request),
        actor_id=request.headers.get(ACTOR_HEADER),
    )


def get_tag_service(request: Request, repository: Repository) -> TagService:
    """Get tag command service with request ID and actor."""
    return TagService(
        repository,
        request_id=_request_id(request),
        actor_id=request.headers.get(ACTOR_HEADER),
    )


# ============================================================================
# Errors
# ============================================================================


def error_to_http(error_code: str | None, message: str | None, details: dict | None = None) -> HTTPException:
    """Build the HTTPException for a domain error kind.

    Args:
        error_code: Domain error code, e.g. "NOT_FOUND".
        message: Human-readable message.
        details: Structured error context.

    Returns:
        HTTPException with the standard error detail.
    """
    return HTTPException(
        status_code=ERROR_STATUS_CODES.get(error_code or "", status.HTTP_400_BAD_REQUEST),
        detail={
            "error_code": error_code or "ERROR",
            "message": message or "Request failed",
            "details": details or {},
        },
    )


def unwrap(result: ServiceResult[T]) -> T:
    """Return a successful result's value or raise the mapped HTTPException.

    Raises:
        HTTPException: When the result is a failure.
    """
    if not result.success:
        raise error_to_http(result.error_code, result.error, result.details)
    return result.value  # type: ignore[return-value]


def parse_id(id_type: type[IdT], value: str) -> IdT:
    """Parse a path identifier.

    Raises:
        HTTPException: 400 INVALID_ARGUMENT when the value is not a UUID.
    """
    try:
        return id_type.from_string(value)
    except DomainError as e:
        raise error_to_http(e.error_code, e.message, e.details) from e
