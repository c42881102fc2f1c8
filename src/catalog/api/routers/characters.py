"""Character listing and creation endpoints.

- GET  /characters?location=&pageNumber=&pageSize=
- POST /characters
"""

from __future__ import annotations

import math
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from catalog.api.deps import get_create_handler, get_query_handler
from catalog.characters.commands import CharacterCreateCommand, CharacterCreateCommandHandler
from catalog.characters.queries import (
    DEFAULT_PAGE_SIZE,
    CharacterGetAllQuery,
    CharacterGetAllQueryHandler,
)
from catalog.core.model import CharacterCreateRequest, CharacterResponse

router = APIRouter(prefix="/characters", tags=["characters"])

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100


class CharacterListResponse(BaseModel):
    """One page of characters with paging metadata."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[CharacterResponse]
    page_number: int
    page_size: int
    total_count: int
    total_pages: int
    from_cache: bool


def clamp_paging(page_number: int, page_size: int) -> tuple[int, int]:
    """Page number is at least 1; page size stays within [1, 100]."""
    return max(1, page_number), min(max(page_size, MIN_PAGE_SIZE), MAX_PAGE_SIZE)


@router.get("", response_model=CharacterListResponse, response_model_by_alias=True)
async def list_characters(
    handler: Annotated[CharacterGetAllQueryHandler, Depends(get_query_handler)],
    location: Annotated[str | None, Query()] = None,
    page_number: Annotated[int, Query(alias="pageNumber")] = 1,
    page_size: Annotated[int, Query(alias="pageSize")] = DEFAULT_PAGE_SIZE,
) -> CharacterListResponse:
    page_number, page_size = clamp_paging(page_number, page_size)
    page = await handler.handle(
        CharacterGetAllQuery(location=location, page_number=page_number, page_size=page_size)
    )
    return CharacterListResponse(
        items=page.characters,
        page_number=page_number,
        page_size=page_size,
        total_count=page.total_count,
        total_pages=math.ceil(page.total_count / page_size),
        from_cache=page.served_from_cache,
    )


@router.post("", status_code=201, response_model=CharacterResponse)
async def create_character(
    request: CharacterCreateRequest,
    handler: Annotated[CharacterCreateCommandHandler, Depends(get_create_handler)],
) -> CharacterResponse:
    return await handler.handle(CharacterCreateCommand(request=request))
