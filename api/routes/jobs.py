"""
Job endpoints.

Read-only view of the orchestrator's audit trail.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from api.dependencies import get_record_store
from core.domain.entities import Job
from core.domain.repositories import RecordStore


router = APIRouter()


def job_to_dict(job: Job) -> dict:
    return {
        "id": job.id,
        "kind": job.kind.value,
        "key": job.key,
        "status": job.status.value,
        "payload": job.payload,
        "eventId": job.event_id,
        "retryCount": job.retry_count,
        "error": job.error,
        "createdAt": job.created_at.isoformat(),
        "updatedAt": job.updated_at.isoformat(),
        "completedAt": job.completed_at.isoformat() if job.completed_at else None,
    }


@router.get(
    "/{job_id}",
    status_code=status.HTTP_200_OK,
    summary="Get job by ID",
)
async def get_job(job_id: str, store: RecordStore = Depends(get_record_store)):
    job = await store.jobs.get(job_id)
    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job not found: {job_id}"
        )
    return job_to_dict(job)
