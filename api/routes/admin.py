"""Admin API routes for cluster moderation and manual job runs."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from data_models.cluster import ClusterStatus, ClusterSummary
from services.cluster_admin import ClusterAdminService, ClusterNotFoundError, PublishError
from services.trend_pipeline import TrendPipeline

logger = logging.getLogger(__name__)

router = APIRouter()


class RejectRequest(BaseModel):
    """Request model for rejecting a cluster."""

    reason: Optional[str] = None


class UpdateClusterRequest(BaseModel):
    """Request model for editing a cluster."""

    name: Optional[str] = None
    generated_prompt: Optional[str] = None
    status: Optional[ClusterStatus] = None


class PipelineRunResponse(BaseModel):
    """Response model for a trend pipeline run."""

    posts_processed: int
    clusters_created: int
    errors: list[str]


class WeeklyJobResponse(PipelineRunResponse):
    """Response model for the weekly job, with publish and notify counts."""

    published: int
    sent: int


@router.get("/admin/clusters/pending", response_model=list[ClusterSummary])
async def pending_clusters(limit: int = Query(50, ge=1, le=100)):
    """Clusters waiting for review."""
    return ClusterAdminService().list_pending(limit=limit)


@router.put("/admin/clusters/{cluster_id}/approve", response_model=ClusterSummary)
async def approve_cluster(cluster_id: str):
    """Approve a cluster."""
    try:
        return ClusterAdminService().approve(cluster_id)
    except ClusterNotFoundError:
        raise HTTPException(status_code=404, detail="Cluster not found")


@router.put("/admin/clusters/{cluster_id}/reject", response_model=ClusterSummary)
async def reject_cluster(cluster_id: str, request: RejectRequest):
    """Reject a cluster."""
    try:
        return ClusterAdminService().reject(cluster_id, reason=request.reason)
    except ClusterNotFoundError:
        raise HTTPException(status_code=404, detail="Cluster not found")


@router.put("/admin/clusters/{cluster_id}", response_model=ClusterSummary)
async def update_cluster(cluster_id: str, request: UpdateClusterRequest):
    """Edit cluster name, prompt text or status (e.g. mark as declining)."""
    try:
        return ClusterAdminService().update(
            cluster_id,
            name=request.name,
            generated_prompt=request.generated_prompt,
            status=request.status.value if request.status else None,
        )
    except ClusterNotFoundError:
        raise HTTPException(status_code=404, detail="Cluster not found")


@router.delete("/admin/clusters/{cluster_id}")
async def delete_cluster(cluster_id: str):
    """Delete a cluster and release its posts."""
    try:
        ClusterAdminService().delete(cluster_id)
    except ClusterNotFoundError:
        raise HTTPException(status_code=404, detail="Cluster not found")
    return {"success": True, "message": "Cluster deleted"}


@router.post("/admin/clusters/{cluster_id}/publish")
async def publish_cluster(cluster_id: str):
    """Publish an approved cluster as a prompt."""
    try:
        result = ClusterAdminService().publish(cluster_id)
    except ClusterNotFoundError:
        raise HTTPException(status_code=404, detail="Cluster not found")
    except PublishError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "message": "Cluster published as prompt", **result}


@router.post("/admin/jobs/run", response_model=PipelineRunResponse)
def run_pipeline_job():
    """Run one trend pipeline batch now."""
    return TrendPipeline().run()


@router.post("/admin/jobs/weekly", response_model=WeeklyJobResponse)
def run_weekly_job():
    """Run the weekly job now: batch run, then publish, then notify."""
    return TrendPipeline().run_weekly()


@router.post("/admin/jobs/publish")
def run_publish_job():
    """Publish all approved clusters."""
    result = TrendPipeline(sources=[]).publish_approved_clusters()
    return {**result, "message": f"{result['published']} clusters published"}


@router.post("/admin/jobs/notify")
def run_notify_job():
    """Send pending viral notifications."""
    result = TrendPipeline(sources=[]).send_viral_notifications()
    return {**result, "message": f"{result['sent']} notifications sent"}
