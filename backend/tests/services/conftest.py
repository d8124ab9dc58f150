"""Service test fixtures — in-memory repository and a domain service on a fixed clock.

Invariants:
    - Every test gets an empty repository
    - The service clock is pinned to tests.factories.TODAY
"""

import pytest

from family_service.services.family_domain_service import FamilyDomainService

from tests.factories import TODAY
from tests.services.fake_repository import InMemoryFamilyRepository


@pytest.fixture
def repo():
    return InMemoryFamilyRepository()


@pytest.fixture
def service(repo):
    return FamilyDomainService(repo, clock=lambda: TODAY)
