# salon/routers/services_routes.py

import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from salon.auth import get_current_user
from salon.data import SERVICE_CATEGORIES
from salon.deps import require_admin, raise_for_violations
from salon.models import Service
from salon.repository import ServiceRepository, get_service_repo
from salon.schemas import ServiceIn, ServicePublic, ServiceStats
from salon.validation import validate_service

logger = logging.getLogger("salon.services")

router = APIRouter(
    prefix="/services",
    tags=["services"],
)

SORT_FIELDS = ("name", "price", "duration")


def _get_or_404(repo: ServiceRepository, service_id: int) -> Service:
    service = repo.get(service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


@router.get("", response_model=List[ServicePublic])
def list_services(
    category: Optional[List[str]] = Query(None),
    search: Optional[str] = None,
    sort: str = "name",
    direction: str = "asc",
    repo: ServiceRepository = Depends(get_service_repo),
    current_user: dict = Depends(get_current_user),
):
    if sort not in SORT_FIELDS:
        raise HTTPException(status_code=422, detail="sort must be 'name', 'price', or 'duration'")
    if direction not in ("asc", "desc"):
        raise HTTPException(status_code=422, detail="direction must be 'asc' or 'desc'")

    services = repo.list()

    if category:
        services = [s for s in services if s.category in category]
    if search:
        needle = search.lower()
        services = [
            s for s in services
            if needle in s.name.lower() or needle in s.description.lower()
        ]

    if sort == "name":
        key = lambda s: s.name.lower()  # noqa: E731
    else:
        key = lambda s: getattr(s, sort)  # noqa: E731
    return sorted(services, key=key, reverse=(direction == "desc"))


@router.get("/stats", response_model=ServiceStats)
def service_stats(
    repo: ServiceRepository = Depends(get_service_repo),
    current_user: dict = Depends(get_current_user),
):
    services = repo.list()
    if not services:
        return {"total_services": 0, "active_services": 0}

    total = len(services)
    average = sum((Decimal(s.price) for s in services), Decimal("0")) / total

    category_count = {}
    for s in services:
        category_count[s.category] = category_count.get(s.category, 0) + 1
    # ties go to the category seen last
    popular, best = None, -1
    for category, count in category_count.items():
        if count >= best:
            popular, best = category, count

    return {
        "total_services": total,
        "active_services": sum(1 for s in services if s.active),
        "average_price": average.quantize(Decimal("0.01")),
        "most_popular_category": SERVICE_CATEGORIES.get(popular, popular),
    }


@router.get("/{service_id}", response_model=ServicePublic)
def get_service(
    service_id: int,
    repo: ServiceRepository = Depends(get_service_repo),
    current_user: dict = Depends(get_current_user),
):
    return _get_or_404(repo, service_id)


@router.post("", response_model=ServicePublic, status_code=201)
def create_service(
    payload: ServiceIn,
    repo: ServiceRepository = Depends(get_service_repo),
    current_user: dict = Depends(require_admin),
):
    raise_for_violations(validate_service(payload))

    service = repo.add(Service(**payload.model_dump()))
    logger.info("created service %s (%s)", service.id, service.name)
    return service


@router.put("/{service_id}", response_model=ServicePublic)
def update_service(
    service_id: int,
    payload: ServiceIn,
    repo: ServiceRepository = Depends(get_service_repo),
    current_user: dict = Depends(require_admin),
):
    service = _get_or_404(repo, service_id)
    raise_for_violations(validate_service(payload))

    service = repo.update(service, payload.model_dump())
    logger.info("updated service %s", service.id)
    return service


@router.patch("/{service_id}/toggle-active", response_model=ServicePublic)
def toggle_service_active(
    service_id: int,
    repo: ServiceRepository = Depends(get_service_repo),
    current_user: dict = Depends(require_admin),
):
    service = _get_or_404(repo, service_id)
    service = repo.update(service, {"active": not service.active})
    logger.info("service %s active=%s", service.id, service.active)
    return service


@router.delete("/{service_id}", status_code=204)
def delete_service(
    service_id: int,
    repo: ServiceRepository = Depends(get_service_repo),
    current_user: dict = Depends(require_admin),
):
    service = _get_or_404(repo, service_id)
    if repo.in_use(service_id):
        raise HTTPException(status_code=409, detail="Service has appointments; deactivate it instead")

    repo.delete(service)
    logger.info("deleted service %s", service_id)
