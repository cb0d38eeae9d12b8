"""Domain entities."""

from ballotbox.domain.entities.base import BaseEntity
from ballotbox.domain.entities.candidate import Candidate
from ballotbox.domain.entities.election import Election
from ballotbox.domain.entities.voter import Voter


__all__ = [
    "BaseEntity",
    "Candidate",
    "Election",
    "Voter",
]
