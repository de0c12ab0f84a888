"""Tag API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from catalog_api.api.dependencies import (
    get_catalog_service,
    get_tag_service,
    parse_id,
    unwrap,
)
from catalog_api.api.schemas import ErrorResponse, NameRequest, TagResponse, TagsListResponse
from catalog_api.application.tag_service import TagService
from catalog_api.catalog.service import CatalogService
from catalog_api.domain.entities import Tag
from catalog_api.domain.value_objects import ProductId, TagId

router = APIRouter(prefix="/tags", tags=["Tags"])

CommandService = Annotated[TagService, Depends(get_tag_service)]
ReadService = Annotated[CatalogService, Depends(get_catalog_service)]

_COMMAND_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def tag_to_response(tag: Tag) -> TagResponse:
    """Convert Tag entity to response schema."""
    return TagResponse(
        id=str(tag.id),
        name=tag.name,
        product_id=str(tag.product_id) if tag.product_id is not None else None,
        is_deleted=tag.is_deleted,
        deleted_at=tag.deleted_at,
        version=tag.version,
        created_at=tag.created_at,
        updated_at=tag.updated_at,
    )


@router.post(
    "",
    response_model=TagResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_COMMAND_ERRORS,
    summary="Create tag",
)
async def create_tag(request: NameRequest, service: CommandService) -> TagResponse:
    """Create an unassigned tag."""
    return tag_to_response(unwrap(await service.create_tag(request.name)))


@router.get("", response_model=TagsListResponse, summary="List tags")
async def list_tags(
    service: ReadService,
    include_deleted: Annotated[bool, Query()] = False,
) -> TagsListResponse:
    """List tags ordered by name."""
    tags = await service.list_tags(include_deleted)
    return TagsListResponse(items=[tag_to_response(t) for t in tags], total=len(tags))


@router.get(
    "/{tag_id}",
    response_model=TagResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Get tag",
)
async def get_tag(
    tag_id: str,
    service: ReadService,
    include_deleted: Annotated[bool, Query()] = False,
) -> TagResponse:
    """Get a tag by ID."""
    return tag_to_response(unwrap(await service.get_tag(parse_id(TagId, tag_id), include_deleted)))


@router.patch("/{tag_id}/name", response_model=TagResponse, responses=_COMMAND_ERRORS)
async def rename_tag(tag_id: str, request: NameRequest, service: CommandService) -> TagResponse:
    """Rename a tag."""
    result = await service.rename_tag(parse_id(TagId, tag_id), request.name)
    return tag_to_response(unwrap(result))


@router.patch(
    "/{tag_id}/product/{product_id}",
    response_model=TagResponse,
    responses=_COMMAND_ERRORS,
    summary="Assign tag to product",
)
async def assign_tag_to_product(tag_id: str, product_id: str, service: CommandService) -> TagResponse:
    """Assign a tag to a live product, moving it off any other product."""
    result = await service.assign_tag_to_product(
        parse_id(TagId, tag_id), parse_id(ProductId, product_id)
    )
    return tag_to_response(unwrap(result))


@router.delete("/{tag_id}", response_model=TagResponse, responses=_COMMAND_ERRORS)
async def delete_tag(tag_id: str, service: CommandService) -> TagResponse:
    """Soft-delete a tag."""
    return tag_to_response(unwrap(await service.delete_tag(parse_id(TagId, tag_id))))


@router.patch("/{tag_id}/restore", response_model=TagResponse, responses=_COMMAND_ERRORS)
async def restore_tag(tag_id: str, service: CommandService) -> TagResponse:
    """Restore a soft-deleted tag."""
    return tag_to_response(unwrap(await service.restore_tag(parse_id(TagId, tag_id))))
