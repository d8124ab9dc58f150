"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Repository implementations raise DatabaseError for infrastructure failures and
      return None (never raise) for a missing family
    - save_all is all-or-nothing: either every family in the batch is stored or none is
    - delete returns False (never raises) for a missing family

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but the aggregate and rules that the service feeds are never async themselves —
      the shell orchestrates the async calls around the pure logic
    - FamilyOperations lives here too: decorators (logging) wrap any implementation
      without importing the concrete service
"""

from datetime import datetime
from typing import Protocol

from family_service.core.family import Family
from family_service.core.family_dto import ChildDTO, FamilyDTO, ParentDTO


class FamilyRepository(Protocol):
    """Contract for family persistence — implemented by shell."""
    async def get_by_id(self, family_id: str) -> Family | None: ...
    async def save(self, family: Family) -> None: ...
    async def save_all(self, *families: Family) -> None: ...
    async def delete(self, family_id: str) -> bool: ...
    async def get_all(self) -> list[Family]: ...
    async def find_by_parent_id(self, parent_id: str) -> list[Family]: ...
    async def find_by_child_id(self, child_id: str) -> Family | None: ...


class FamilyOperations(Protocol):
    """Application-facing use cases — one method per family operation."""
    async def create_family(self, dto: FamilyDTO) -> FamilyDTO: ...
    async def get_family(self, family_id: str) -> FamilyDTO: ...
    async def get_all_families(self) -> list[FamilyDTO]: ...
    async def add_parent(
        self, family_id: str, parent: ParentDTO, status: str | None = None,
    ) -> FamilyDTO: ...
    async def add_child(self, family_id: str, child: ChildDTO) -> FamilyDTO: ...
    async def remove_child(self, family_id: str, child_id: str) -> FamilyDTO: ...
    async def mark_parent_deceased(
        self, family_id: str, parent_id: str, death_date: datetime,
    ) -> FamilyDTO: ...
    async def divorce(
        self,
        family_id: str,
        custodial_parent_id: str,
        child_ids: list[str] | None = None,
        new_family_id: str | None = None,
    ) -> tuple[FamilyDTO, FamilyDTO]: ...
    async def change_status(self, family_id: str, status: str) -> FamilyDTO: ...
    async def delete_family(self, family_id: str) -> None: ...
    async def find_families_by_parent(self, parent_id: str) -> list[FamilyDTO]: ...
    async def find_family_by_child(self, child_id: str) -> FamilyDTO: ...
