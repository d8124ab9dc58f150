"""Family Routes — HTTP surface over the family service.

Invariants:
    - One endpoint per service operation; routes only translate schemas <-> DTOs
    - The service stack is built per request: logging decorator → domain service →
      SQLAlchemy repository on the request's session
    - Errors are not caught here: global handlers in api/error_handlers.py render them

Design Decisions:
    - get_family_service is a FastAPI dependency so tests can override it
      (ADR: app.dependency_overrides over monkeypatching)
    - Divorce returns both families as a list: [original, new]
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from family_service.config import Settings, get_settings
from family_service.core.repository_protocols import FamilyOperations
from family_service.core.validation_rules import ComplexRuleValidator
from family_service.infrastructure.database import get_db
from family_service.infrastructure.family_repository import SqlAlchemyFamilyRepository
from family_service.schemas.family import (
    AddParentRequest, DivorceRequest, FamilyCreate, FamilyResponse,
    MarkDeceasedRequest, PersonPayload, StatusChangeRequest,
)
from family_service.services.family_domain_service import FamilyDomainService
from family_service.services.logging_family_service import LoggingFamilyService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/families", tags=["families"])


def get_family_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> FamilyOperations:
    validator = ComplexRuleValidator(
        minimum_parent_age=settings.minimum_parent_age,
        minimum_age_gap=settings.minimum_parent_child_age_gap,
    )
    return LoggingFamilyService(
        FamilyDomainService(SqlAlchemyFamilyRepository(db), validator),
    )


@router.post(
    "", response_model=FamilyResponse, status_code=status.HTTP_201_CREATED,
)
async def create_family(
    body: FamilyCreate, service: FamilyOperations = Depends(get_family_service),
):
    """Create a family with its initial parents and children."""
    return FamilyResponse.from_dto(await service.create_family(body.to_dto()))


@router.get("", response_model=list[FamilyResponse])
async def list_families(service: FamilyOperations = Depends(get_family_service)):
    return [FamilyResponse.from_dto(f) for f in await service.get_all_families()]


@router.get("/by-parent/{parent_id}", response_model=list[FamilyResponse])
async def find_families_by_parent(
    parent_id: str, service: FamilyOperations = Depends(get_family_service),
):
    """Every family the parent belongs to, current or historical."""
    families = await service.find_families_by_parent(parent_id)
    return [FamilyResponse.from_dto(f) for f in families]


@router.get("/by-child/{child_id}", response_model=FamilyResponse)
async def find_family_by_child(
    child_id: str, service: FamilyOperations = Depends(get_family_service),
):
    return FamilyResponse.from_dto(await service.find_family_by_child(child_id))


@router.get("/{family_id}", response_model=FamilyResponse)
async def get_family(
    family_id: str, service: FamilyOperations = Depends(get_family_service),
):
    return FamilyResponse.from_dto(await service.get_family(family_id))


@router.post("/{family_id}/parents", response_model=FamilyResponse)
async def add_parent(
    family_id: str,
    body: AddParentRequest,
    service: FamilyOperations = Depends(get_family_service),
):
    """Attach a parent; `status` applies a transition in the same save (e.g. MARRIED)."""
    family = await service.add_parent(
        family_id, body.parent.to_parent_dto(), body.status,
    )
    return FamilyResponse.from_dto(family)


@router.post("/{family_id}/children", response_model=FamilyResponse)
async def add_child(
    family_id: str,
    body: PersonPayload,
    service: FamilyOperations = Depends(get_family_service),
):
    family = await service.add_child(family_id, body.to_child_dto())
    return FamilyResponse.from_dto(family)


@router.delete("/{family_id}/children/{child_id}", response_model=FamilyResponse)
async def remove_child(
    family_id: str,
    child_id: str,
    service: FamilyOperations = Depends(get_family_service),
):
    return FamilyResponse.from_dto(await service.remove_child(family_id, child_id))


@router.post(
    "/{family_id}/parents/{parent_id}/death", response_model=FamilyResponse,
)
async def mark_parent_deceased(
    family_id: str,
    parent_id: str,
    body: MarkDeceasedRequest,
    service: FamilyOperations = Depends(get_family_service),
):
    family = await service.mark_parent_deceased(
        family_id, parent_id, body.death_date,
    )
    return FamilyResponse.from_dto(family)


@router.post("/{family_id}/divorce", response_model=list[FamilyResponse])
async def divorce(
    family_id: str,
    body: DivorceRequest,
    service: FamilyOperations = Depends(get_family_service),
):
    """Split a married family; returns [original, new]."""
    original, created = await service.divorce(
        family_id, body.custodial_parent_id, body.child_ids, body.new_family_id,
    )
    return [FamilyResponse.from_dto(original), FamilyResponse.from_dto(created)]


@router.put("/{family_id}/status", response_model=FamilyResponse)
async def change_status(
    family_id: str,
    body: StatusChangeRequest,
    service: FamilyOperations = Depends(get_family_service),
):
    return FamilyResponse.from_dto(await service.change_status(family_id, body.status))


@router.delete("/{family_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_family(
    family_id: str, service: FamilyOperations = Depends(get_family_service),
):
    """Delete a family with all of its members."""
    await service.delete_family(family_id)
