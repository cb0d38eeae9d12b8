"""In-memory repository implementations.

Entities are deep-copied on the way in and on the way out, so an entity
mutated by a caller never changes stored state until it is saved again.
This gives the same detached-entity behaviour as the SQLAlchemy
repositories and keeps an aborted operation from leaking partial updates.
"""

from typing import TypeVar
import copy

from ballotbox.domain.entities.base import BaseEntity
from ballotbox.domain.entities.candidate import Candidate
from ballotbox.domain.entities.election import Election
from ballotbox.domain.entities.voter import Voter
from ballotbox.domain.repositories.base import BaseRepository
from ballotbox.domain.repositories.candidate_repository import CandidateRepository
from ballotbox.domain.repositories.election_repository import ElectionRepository
from ballotbox.domain.repositories.voter_repository import VoterRepository


T = TypeVar("T", bound=BaseEntity)


class InMemoryRepositoryImpl(BaseRepository[T]):
    """Dictionary-backed repository keyed by entity id."""

    def __init__(self) -> None:
        self._items: dict[int, T] = {}

    def _next_id(self) -> int:
        return max(self._items, default=0) + 1

    async def get_by_id(self, entity_id: int) -> T | None:
        """Get entity by ID."""
        item = self._items.get(entity_id)
        return copy.deepcopy(item) if item is not None else None

    async def get_all(
        self, limit: int | None = None, offset: int | None = None
    ) -> list[T]:
        """Get all entities ordered by ID."""
        items = [self._items[key] for key in sorted(self._items)]
        start = offset or 0
        end = start + limit if limit is not None else None
        return [copy.deepcopy(item) for item in items[start:end]]

    async def create(self, entity: T) -> T:
        """Create a new entity, assigning an ID when it has none."""
        stored = copy.deepcopy(entity)
        if stored.id is None:
            stored.id = self._next_id()
        if stored.id in self._items:
            raise ValueError(f"Entity with ID {stored.id} already exists")
        self._items[stored.id] = stored
        return copy.deepcopy(stored)

    async def update(self, entity: T) -> T:
        """Update an existing entity."""
        if not entity.id:
            raise ValueError("Entity must have an ID to update")
        if entity.id not in self._items:
            raise ValueError(f"Entity with ID {entity.id} not found")
        self._items[entity.id] = copy.deepcopy(entity)
        return copy.deepcopy(entity)

    async def count(self) -> int:
        """Count total number of entities."""
        return len(self._items)


class InMemoryCandidateRepositoryImpl(
    InMemoryRepositoryImpl[Candidate], CandidateRepository
):
    """In-memory candidate repository with a name index."""

    def __init__(self) -> None:
        super().__init__()
        self._ids_by_name: dict[str, int] = {}

    async def get_by_name(self, name: str) -> Candidate | None:
        candidate_id = self._ids_by_name.get(name)
        if candidate_id is None:
            return None
        return await self.get_by_id(candidate_id)

    async def create(self, entity: Candidate) -> Candidate:
        if entity.name in self._ids_by_name:
            raise ValueError(f"Candidate name '{entity.name}' already exists")
        created = await super().create(entity)
        self._ids_by_name[created.name] = created.id  # type: ignore[assignment]
        return created


class InMemoryVoterRepositoryImpl(InMemoryRepositoryImpl[Voter], VoterRepository):
    """In-memory voter repository keyed by voter id."""

    def __init__(self) -> None:
        super().__init__()
        self._ids_by_voter_id: dict[str, int] = {}

    async def get_by_voter_id(self, voter_id: str) -> Voter | None:
        entity_id = self._ids_by_voter_id.get(voter_id)
        if entity_id is None:
            return None
        return await self.get_by_id(entity_id)

    async def save(self, voter: Voter) -> Voter:
        entity_id = self._ids_by_voter_id.get(voter.voter_id)
        if entity_id is None:
            created = await self.create(voter)
            self._ids_by_voter_id[created.voter_id] = created.id  # type: ignore[assignment]
            return created
        voter.id = entity_id
        return await self.update(voter)


class InMemoryElectionRepositoryImpl(
    InMemoryRepositoryImpl[Election], ElectionRepository
):
    """In-memory store for the single election state record."""

    async def get_current(self) -> Election | None:
        elections = await self.get_all(limit=1)
        return elections[0] if elections else None

    async def save(self, election: Election) -> Election:
        if election.id is None:
            current = await self.get_current()
            if current is None:
                return await self.create(election)
            election.id = current.id
        return await self.update(election)
