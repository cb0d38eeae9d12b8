"""Shared fixtures for domain service tests."""

import pytest
import pytest_asyncio

from ballotbox.domain.services.candidate_registry import CandidateRegistry
from ballotbox.domain.services.delegation_resolver import DelegationResolver
from ballotbox.domain.services.tally_service import TallyService
from ballotbox.domain.services.voter_registry import VoterRegistry
from ballotbox.infrastructure.persistence.in_memory_repository_impl import (
    InMemoryCandidateRepositoryImpl,
    InMemoryElectionRepositoryImpl,
    InMemoryVoterRepositoryImpl,
)


@pytest.fixture
def candidate_repository():
    return InMemoryCandidateRepositoryImpl()


@pytest.fixture
def election_repository():
    return InMemoryElectionRepositoryImpl()


@pytest.fixture
def candidate_registry(candidate_repository):
    return CandidateRegistry(candidate_repository)


@pytest.fixture
def voter_registry():
    return VoterRegistry(InMemoryVoterRepositoryImpl())


@pytest.fixture
def tally_service(
    candidate_registry, voter_registry, candidate_repository, election_repository
):
    return TallyService(
        candidate_registry=candidate_registry,
        voter_registry=voter_registry,
        candidate_repository=candidate_repository,
        election_repository=election_repository,
    )


@pytest.fixture
def delegation_resolver(voter_registry, tally_service):
    return DelegationResolver(voter_registry=voter_registry, tally_service=tally_service)


@pytest_asyncio.fixture
async def seeded(candidate_registry, voter_registry):
    """候補者 Alice(1), Bob(2) と有権者 v1〜v4 を登録する."""
    await candidate_registry.add_candidate("Alice")
    await candidate_registry.add_candidate("Bob")
    for voter_id in ["v1", "v2", "v3", "v4"]:
        await voter_registry.register_voter(voter_id)
