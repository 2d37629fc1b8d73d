"""Job Feed API Routes"""

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
import structlog

from jobfeed.core.exceptions import InvalidFilterError
from jobfeed.discovery.listing import ApplicationStatus
from jobfeed.discovery.pipeline import ScrapeRequest, ScrapeService
from jobfeed.feed.query import FeedQuery
from jobfeed.feed.service import FeedResult, FeedService
from jobfeed.feed.store import JobStore
from ..dependencies import get_feed_service, get_job_store, get_owner_id, get_scrape_service

logger = structlog.get_logger(__name__)

router = APIRouter()


class StatusUpdateRequest(BaseModel):
    """Request to move a stored job to a new application status"""
    status: ApplicationStatus


def build_query(params: dict[str, Any], owner_id: Optional[str]) -> FeedQuery:
    """Validate raw feed parameters, mapping failures to InvalidFilterError"""
    data = {k: v for k, v in params.items() if v is not None}
    if owner_id and not data.get("owner_id"):
        data["owner_id"] = owner_id
    try:
        return FeedQuery(**data)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error.get("loc", ())) or "query"
        raise InvalidFilterError(field, error.get("input"), error.get("msg", "invalid value")) from e


def render_feed(result: FeedResult) -> Response:
    if result.not_modified:
        return Response(status_code=304, headers=result.headers)
    return JSONResponse(content=result.body, headers=result.headers)


async def _read_json(request: Request) -> dict[str, Any]:
    """JSON object body, or {} when the body is empty or not an object"""
    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


@router.get("/feed")
async def get_feed(
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    since: Optional[str] = None,
    search: Optional[str] = None,
    location: Optional[str] = None,
    company: Optional[str] = None,
    status: Optional[str] = None,
    tier: Optional[str] = None,
    owner_id: Optional[str] = None,
    if_none_match: Optional[str] = Header(default=None),
    if_modified_since: Optional[str] = Header(default=None),
    header_owner: Optional[str] = Depends(get_owner_id),
    service: FeedService = Depends(get_feed_service),
):
    """Filtered, paginated feed with conditional fetch"""
    query = build_query(
        {
            "limit": limit,
            "offset": offset,
            "since": since,
            "search": search,
            "location": location,
            "company": company,
            "status": status,
            "tier": tier,
            "owner_id": owner_id,
        },
        header_owner,
    )
    result = await service.fetch(
        query,
        if_none_match=if_none_match,
        if_modified_since=if_modified_since,
    )
    return render_feed(result)


@router.post("/feed")
async def post_feed(
    request: Request,
    if_none_match: Optional[str] = Header(default=None),
    if_modified_since: Optional[str] = Header(default=None),
    header_owner: Optional[str] = Depends(get_owner_id),
    service: FeedService = Depends(get_feed_service),
):
    """Feed query with parameters in a JSON body"""
    query = build_query(await _read_json(request), header_owner)
    result = await service.fetch(
        query,
        if_none_match=if_none_match,
        if_modified_since=if_modified_since,
    )
    return render_feed(result)


@router.post("/scrape")
async def trigger_scrape(
    request: Request,
    owner_id: Optional[str] = Depends(get_owner_id),
    service: ScrapeService = Depends(get_scrape_service),
):
    """Run one aggregation pass; persists the page when an owner is given"""
    payload = await _read_json(request)
    scrape_request = ScrapeRequest(
        keywords=payload.get("keywords"),
        locations=payload.get("locations"),
        limit=payload.get("limit"),
        offset=payload.get("offset"),
        owner_id=owner_id,
    )
    result = await service.run(scrape_request)
    return result.to_dict()


@router.patch("/{job_id}/status")
async def update_status(
    job_id: UUID,
    body: StatusUpdateRequest,
    owner_id: Optional[str] = Depends(get_owner_id),
    store: JobStore = Depends(get_job_store),
):
    """Update the application status of one stored job"""
    if not owner_id:
        raise HTTPException(status_code=400, detail="X-Owner-Id header is required")

    job = await store.set_status(job_id, body.status, owner_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")

    logger.info("Job status updated", job_id=str(job_id), status=body.status.value)
    return {"job_id": str(job.id), "status": job.status.value}
