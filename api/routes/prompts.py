"""Published prompt API routes."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from data_models.prompt import PromptSummary
from services.prompt_catalog import PromptCatalog, PromptNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


class PromptListResponse(BaseModel):
    """Response model for a paginated prompt list."""

    prompts: list[PromptSummary]
    total: int
    page: int
    total_pages: int


@router.get("/prompts", response_model=PromptListResponse)
async def list_prompts(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    type: Optional[str] = Query(None, pattern="^(image|video|all)$", description="Filter by media type"),
    sort: str = Query("viral", pattern="^(viral|recent)$"),
):
    """Get a paginated list of published prompts."""
    return PromptCatalog().list_prompts(
        media_type=None if type in (None, "all") else type,
        sort=sort,
        page=page,
        limit=limit,
    )


@router.get("/prompts/trending", response_model=list[PromptSummary])
async def trending_prompts(limit: int = Query(10, ge=1, le=20)):
    """Approved prompts with the highest trend scores."""
    return PromptCatalog().trending(limit=limit)


@router.get("/prompts/{prompt_id}", response_model=PromptSummary)
async def get_prompt(prompt_id: str):
    """Get a single published prompt."""
    try:
        return PromptCatalog().get_prompt(prompt_id)
    except PromptNotFoundError:
        raise HTTPException(status_code=404, detail="Prompt not found")
