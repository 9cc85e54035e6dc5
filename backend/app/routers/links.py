"""Link capture and enrichment routes."""

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.schemas.common import ApiResponse
from app.schemas.link import EnrichmentAccepted, LinkCreate, LinkRead
from app.services.background_jobs import schedule_enrichment
from app.services.links import LinkAlreadyExistsError, create_link, delete_link, get_link, list_links


router = APIRouter(prefix="/links")


@router.post("", response_model=ApiResponse[LinkRead], status_code=201)
def save_link(
    payload: LinkCreate,
    db: Session = Depends(get_db),
) -> ApiResponse[LinkRead]:
    """Store a link and queue its enrichment without waiting for it."""

    try:
        link = create_link(db, str(payload.url), title=payload.title, summary=payload.summary, tags=payload.tags)
    except LinkAlreadyExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    schedule_enrichment(link.url)
    return ApiResponse(data=LinkRead.model_validate(link))


@router.get("", response_model=ApiResponse[list[LinkRead]])
def get_links(
    limit: int | None = Query(default=None, ge=1, le=500),
    db: Session = Depends(get_db),
) -> ApiResponse[list[LinkRead]]:
    """List saved links, newest first."""

    return ApiResponse(data=[LinkRead.model_validate(link) for link in list_links(db, limit=limit)])


@router.get("/{link_id}", response_model=ApiResponse[LinkRead])
def get_single_link(
    link_id: str = Path(..., min_length=1),
    db: Session = Depends(get_db),
) -> ApiResponse[LinkRead]:
    link = get_link(db, link_id)
    if link is None:
        raise HTTPException(status_code=404, detail="Link not found")
    return ApiResponse(data=LinkRead.model_validate(link))


@router.delete("/{link_id}", status_code=204)
def remove_link(
    link_id: str = Path(..., min_length=1),
    db: Session = Depends(get_db),
) -> Response:
    if not delete_link(db, link_id):
        raise HTTPException(status_code=404, detail="Link not found")
    return Response(status_code=204)


@router.post("/{link_id}/enrich", response_model=ApiResponse[EnrichmentAccepted], status_code=202)
def reenrich_link(
    link_id: str = Path(..., min_length=1),
    db: Session = Depends(get_db),
) -> ApiResponse[EnrichmentAccepted]:
    """Queue a fresh enrichment run; previously enriched fields are overwritten."""

    link = get_link(db, link_id)
    if link is None:
        raise HTTPException(status_code=404, detail="Link not found")
    schedule_enrichment(link.url)
    return ApiResponse(data=EnrichmentAccepted(link_id=link.id, url=link.url))
