"""
Destination Catalog & Review Endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from typing import List, Optional
import logging

from app.models import User
from app.routers.auth import get_current_user
from app.schemas.destination import DestinationResponse
from app.schemas.review import ReviewCreate, ReviewResponse, ReviewStats, ReviewWithUserResponse
from app.services.activity import log_activity
from app.services.catalog import ALL, BrowseParams, browse_destinations
from app.storage import Storage, get_storage

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[DestinationResponse])
async def list_destinations(
    search: Optional[str] = Query(None, description="Free-text search over name, country and description"),
    region: str = Query(ALL, description="asia, europe, americas, africa"),
    budget: str = Query(ALL, description="under-1000, 1000-2000, 2000-3000, 3000-plus"),
    duration: str = Query(ALL, description="3-5, 6-7, 8-14, 15-plus"),
    deals: str = Query(ALL, description="flash-sales, seasonal, group-discounts, current-deals"),
    sort: Optional[str] = Query(None, description="name, price-low, price-high, rating, duration, popularity"),
    storage: Storage = Depends(get_storage),
):
    """
    List active destinations.

    Without query parameters this is the catalog ordered by rating. Any browse
    parameter runs the storefront pipeline: search, then filters, then sort
    (name order unless `sort` says otherwise).
    """
    destinations = await storage.destinations.get_all_destinations()

    browsing = search or sort or any(value != ALL for value in (region, budget, duration, deals))
    if not browsing:
        return destinations

    params = BrowseParams(
        search=search or "",
        region=region,
        budget=budget,
        duration=duration,
        deals=deals,
        sort=sort or "name",
    )
    return browse_destinations(destinations, params)


@router.get("/{destination_id}", response_model=DestinationResponse)
async def get_destination(
    destination_id: int,
    storage: Storage = Depends(get_storage),
):
    """
    Get a single destination
    """
    destination = await storage.destinations.get_destination(destination_id)
    if not destination:
        raise HTTPException(status_code=404, detail="Destination not found")
    return destination


@router.get("/{destination_id}/reviews", response_model=List[ReviewWithUserResponse])
async def list_reviews(
    destination_id: int,
    storage: Storage = Depends(get_storage),
):
    """
    Reviews for a destination, newest first
    """
    return await storage.reviews.get_destination_reviews(destination_id)


@router.get("/{destination_id}/reviews/stats", response_model=ReviewStats)
async def review_stats(
    destination_id: int,
    storage: Storage = Depends(get_storage),
):
    return await storage.reviews.get_review_stats(destination_id)


@router.post(
    "/{destination_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_review(
    destination_id: int,
    review_data: ReviewCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Review a destination
    """
    destination = await storage.destinations.get_destination(destination_id)
    if not destination:
        raise HTTPException(status_code=404, detail="Destination not found")

    review = await storage.reviews.create_review({
        **review_data.model_dump(exclude_unset=True),
        "destination_id": destination_id,
        "user_id": current_user.id,
    })
    await log_activity(
        storage, "create_review",
        user_id=current_user.id, entity_type="review", entity_id=review.id,
        details={"destination_id": destination_id, "rating": review.rating},
        request=request,
    )
    return review
