"""Family Domain Service — load/mutate/validate/save orchestration.

Invariants:
    - Nothing is saved when a mutation or the rule pipeline fails
    - A divorce whose second write fails stores neither family
    - Blank ids fail before the repository is touched
    - Errors carry the failing use case in context.operation
    - A task cancelled while loading never reaches the save
"""

import asyncio

import pytest

from family_service.core.domain_types import FamilyStatus
from family_service.core.errors import (
    DatabaseError, FamilyNotMarriedError, FamilyTooManyParentsError,
    ResourceNotFoundError, ValidationError,
)
from family_service.core.family_dto import FamilyDTO
from family_service.core.validation_rules import ComplexRuleValidator
from family_service.services.family_domain_service import FamilyDomainService

from tests.factories import (
    TODAY, at, child, child_dto, married_family, parent_dto, single_family,
)


# ─── create / read ──────────────────────────────────────────────

async def test_create_family_persists_and_returns_dto(service, repo):
    dto = FamilyDTO.from_parts("f1", "SINGLE", [parent_dto()])
    created = await service.create_family(dto)
    assert created.id == "f1"
    assert created.status == "SINGLE"
    assert repo.saved == ["f1"]


async def test_create_family_generates_id(service, repo):
    created = await service.create_family(
        FamilyDTO.from_parts("", "SINGLE", [parent_dto()]),
    )
    assert created.id in repo.rows


async def test_create_existing_family_rejected(service, repo):
    repo.seed(single_family("f1"))
    with pytest.raises(ValidationError) as exc:
        await service.create_family(FamilyDTO.from_parts("f1", "SINGLE", [parent_dto()]))
    assert exc.value.context.operation == "create_family"
    assert repo.saved == []


async def test_create_invalid_family_not_saved(service, repo):
    dto = FamilyDTO.from_parts("f1", "MARRIED", [parent_dto()])
    with pytest.raises(ValidationError):
        await service.create_family(dto)
    assert repo.rows == {}


async def test_get_missing_family(service):
    with pytest.raises(ResourceNotFoundError) as exc:
        await service.get_family("nope")
    assert exc.value.context.family_id == "nope"
    assert exc.value.context.operation == "get_family"


@pytest.mark.parametrize("blank", ["", "   ", None])
async def test_blank_family_id_rejected(service, repo, blank):
    repo.gate = asyncio.Event()  # would hang if the repository were touched
    with pytest.raises(ValidationError) as exc:
        await service.get_family(blank)
    assert exc.value.field == "family_id"


async def test_get_all_families(service, repo):
    repo.seed(single_family("f1"), married_family("f2"))
    families = await service.get_all_families()
    assert {f.id for f in families} == {"f1", "f2"}


# ─── mutations ──────────────────────────────────────────────────

async def test_add_parent_without_status_rejected_by_pipeline(service, repo):
    repo.seed(single_family("f2"))
    with pytest.raises(ValidationError) as exc:
        await service.add_parent("f2", parent_dto("p2", "Jane", born=at(1982, 3, 3)))
    causes = [m for v in exc.value.violations for m in v.flatten()]
    assert "single family must have exactly 1 living parent" in causes
    assert exc.value.context.family_id == "f2"
    assert repo.saved == []
    assert repo.rows["f2"].parent_count == 1


async def test_add_parent_with_status_transition(service, repo):
    repo.seed(single_family("f2"))
    result = await service.add_parent(
        "f2", parent_dto("p2", "Jane", born=at(1982, 3, 3)), "married",
    )
    assert result.status == "MARRIED"
    assert result.parent_count == 2
    assert repo.saved == ["f2"]


async def test_add_parent_to_full_family(service, repo):
    repo.seed(married_family("f1"))
    with pytest.raises(FamilyTooManyParentsError) as exc:
        await service.add_parent("f1", parent_dto("p3", "Jim", born=at(1975)))
    assert exc.value.context.operation == "add_parent"
    assert repo.saved == []


async def test_add_child(service, repo):
    repo.seed(married_family("f1"))
    result = await service.add_child("f1", child_dto())
    assert result.children_count == 1
    assert repo.rows["f1"].children_count == 1


async def test_add_child_to_missing_family(service, repo):
    with pytest.raises(ResourceNotFoundError):
        await service.add_child("nope", child_dto())
    assert repo.saved == []


async def test_remove_child_requires_child_id(service, repo):
    repo.seed(married_family("f1", [child()]))
    with pytest.raises(ValidationError) as exc:
        await service.remove_child("f1", " ")
    assert exc.value.field == "child_id"


async def test_remove_child(service, repo):
    repo.seed(married_family("f1", [child()]))
    result = await service.remove_child("f1", "c1")
    assert result.children_count == 0


async def test_mark_parent_deceased_widows_family(service, repo):
    repo.seed(married_family("f1", [child()]))
    result = await service.mark_parent_deceased("f1", "p1", at(2023, 1, 1))
    assert result.status == "WIDOWED"
    assert result.parents[0].death_date == at(2023, 1, 1)


async def test_only_parent_dies_family_widowed(service, repo):
    repo.seed(single_family("f2", [child()]))
    result = await service.mark_parent_deceased("f2", "p1", at(2023, 4, 15))
    assert result.status == "WIDOWED"
    assert repo.rows["f2"].status == "WIDOWED"


async def test_scenario_widowed_family_cannot_divorce(service, repo):
    repo.seed(married_family("f1"))
    await service.add_child("f1", child_dto())
    await service.mark_parent_deceased("f1", "p1", at(2023, 1, 1))
    with pytest.raises(FamilyNotMarriedError) as exc:
        await service.divorce("f1", "p2")
    assert exc.value.context.operation == "divorce"
    assert repo.rows["f1"].status == "WIDOWED"


async def test_divorce_saves_both_families(service, repo):
    repo.seed(married_family("f1", [child("c1"), child("c2", "Bob")]))
    original, created = await service.divorce("f1", "p2", ["c2"], "f9")
    assert original.status == created.status == FamilyStatus.DIVORCED.value
    assert repo.saved == ["f1", "f9"]
    assert [c.id for c in repo.rows["f9"].children] == ["c2"]


async def test_divorce_second_write_failure_keeps_original(service, repo):
    repo.seed(married_family("f1", [child("c1"), child("c2", "Bob")]))
    repo.fail_on_write = 2

    with pytest.raises(DatabaseError) as exc:
        await service.divorce("f1", "p2", ["c2"], "f9")

    assert exc.value.context.operation == "divorce"
    assert repo.saved == []
    assert "f9" not in repo.rows
    stored = repo.rows["f1"]
    assert stored.status == "MARRIED"
    assert [p.id for p in stored.parents] == ["p1", "p2"]
    assert [c.id for c in stored.children] == ["c1", "c2"]


async def test_divorce_into_existing_family_rejected(service, repo):
    repo.seed(married_family("f1"), single_family("f9"))
    with pytest.raises(ValidationError) as exc:
        await service.divorce("f1", "p2", new_family_id="f9")
    assert exc.value.field == "new_family_id"
    assert repo.saved == []


async def test_change_status(service, repo):
    repo.seed(single_family("f2"))
    result = await service.change_status("f2", "divorced")
    assert result.status == "DIVORCED"


async def test_delete_family(service, repo):
    repo.seed(married_family("f1", [child()]))
    await service.delete_family("f1")
    assert "f1" not in repo.rows
    with pytest.raises(ResourceNotFoundError):
        await service.get_family("f1")


async def test_delete_missing_family(service):
    with pytest.raises(ResourceNotFoundError) as exc:
        await service.delete_family("nope")
    assert exc.value.context.family_id == "nope"
    assert exc.value.context.operation == "delete_family"


async def test_delete_family_requires_id(service, repo):
    repo.gate = asyncio.Event()
    with pytest.raises(ValidationError) as exc:
        await service.delete_family(" ")
    assert exc.value.field == "family_id"


async def test_pipeline_thresholds_come_from_validator(repo):
    repo.seed(single_family("f2"))
    strict = FamilyDomainService(
        repo, ComplexRuleValidator(minimum_age_gap=40), clock=lambda: TODAY,
    )
    with pytest.raises(ValidationError):
        await strict.add_child("f2", child_dto())
    assert repo.saved == []


# ─── lookups ────────────────────────────────────────────────────

async def test_find_families_by_parent(service, repo):
    repo.seed(single_family("f1"), married_family("f2"))
    found = await service.find_families_by_parent("p2")
    assert [f.id for f in found] == ["f2"]


async def test_find_family_by_child(service, repo):
    repo.seed(married_family("f1", [child()]))
    assert (await service.find_family_by_child("c1")).id == "f1"


async def test_find_family_by_unknown_child(service):
    with pytest.raises(ResourceNotFoundError) as exc:
        await service.find_family_by_child("c9")
    assert exc.value.message == "Family for child 'c9' not found"


# ─── failures & cancellation ────────────────────────────────────

async def test_database_error_propagates_unchanged(service, repo):
    repo.seed(married_family("f1"))
    repo.fail_on_save = True
    with pytest.raises(DatabaseError) as exc:
        await service.add_child("f1", child_dto())
    assert exc.value.context.operation == "add_child"


async def test_cancelled_while_loading_never_saves(service, repo):
    repo.seed(married_family("f1"))
    repo.gate = asyncio.Event()
    task = asyncio.create_task(service.add_child("f1", child_dto()))
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert repo.saved == []
