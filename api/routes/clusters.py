"""Cluster API routes."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from data_models.cluster import ClusterStatus, ClusterSummary
from services.cluster_admin import ClusterAdminService, ClusterNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


class ClusterListResponse(BaseModel):
    """Response model for a paginated cluster list."""

    clusters: list[ClusterSummary]
    total: int
    page: int
    total_pages: int


class PromptVariationsResponse(BaseModel):
    """Response model for prompt variations."""

    cluster_id: str
    prompts: list[str]
    negative_prompt: str


@router.get("/clusters", response_model=ClusterListResponse)
async def list_clusters(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    status: Optional[ClusterStatus] = Query(None, description="Filter by lifecycle status"),
    media_type: Optional[str] = Query(None, pattern="^(image|video)$"),
    sort: str = Query("trend_score", pattern="^(trend_score|recent)$"),
    approved: Optional[bool] = Query(None, description="Filter by approval"),
):
    """Get a paginated list of clusters."""
    service = ClusterAdminService()
    return service.list_clusters(
        status=status.value if status else None,
        media_type=media_type,
        approved=approved,
        sort=sort,
        page=page,
        limit=limit,
    )


@router.get("/clusters/trending", response_model=list[ClusterSummary])
async def trending_clusters(
    media_type: Optional[str] = Query(None, pattern="^(image|video)$"),
    limit: int = Query(10, ge=1, le=20),
):
    """Approved trending and viral clusters."""
    return ClusterAdminService().list_by_status(
        [ClusterStatus.TRENDING.value, ClusterStatus.VIRAL.value], media_type, limit
    )


@router.get("/clusters/viral", response_model=list[ClusterSummary])
async def viral_clusters(
    media_type: Optional[str] = Query(None, pattern="^(image|video)$"),
    limit: int = Query(10, ge=1, le=20),
):
    """Approved viral clusters."""
    return ClusterAdminService().list_by_status([ClusterStatus.VIRAL.value], media_type, limit)


@router.get("/clusters/emerging", response_model=list[ClusterSummary])
async def emerging_clusters(
    media_type: Optional[str] = Query(None, pattern="^(image|video)$"),
    limit: int = Query(10, ge=1, le=20),
):
    """Approved emerging clusters."""
    return ClusterAdminService().list_by_status([ClusterStatus.EMERGING.value], media_type, limit)


@router.get("/clusters/stats/overview")
async def cluster_stats():
    """Cluster counts by status, media type and platform."""
    return ClusterAdminService().get_stats()


@router.get("/clusters/{cluster_id}")
async def get_cluster(cluster_id: str):
    """Get a single cluster with its posts."""
    try:
        return ClusterAdminService().get_cluster(cluster_id)
    except ClusterNotFoundError:
        raise HTTPException(status_code=404, detail="Cluster not found")


@router.get("/clusters/{cluster_id}/posts")
async def get_cluster_posts(
    cluster_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
):
    """Posts in a cluster, fastest-moving first."""
    try:
        return ClusterAdminService().get_cluster_posts(cluster_id, page=page, limit=limit)
    except ClusterNotFoundError:
        raise HTTPException(status_code=404, detail="Cluster not found")


@router.get("/clusters/{cluster_id}/prompts", response_model=PromptVariationsResponse)
async def get_prompt_variations(
    cluster_id: str,
    count: int = Query(3, ge=1, le=10),
    tool: Optional[str] = Query(None, description="midjourney, stable-diffusion, dalle, runway, pika"),
):
    """Alternative prompt texts for a cluster."""
    try:
        return ClusterAdminService().prompt_variations(cluster_id, count=count, tool=tool)
    except ClusterNotFoundError:
        raise HTTPException(status_code=404, detail="Cluster not found")
