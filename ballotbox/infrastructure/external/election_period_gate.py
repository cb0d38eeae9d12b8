"""Period gate backed by the stored election period."""

from datetime import datetime

from ballotbox.domain.repositories.election_repository import ElectionRepository
from ballotbox.domain.services.interfaces.period_gate import IPeriodGate


class ElectionPeriodGate(IPeriodGate):
    """Open while ``start_time <= now <= end_time`` of the stored period.

    The gate is closed until an administrator has set a period.
    """

    def __init__(self, election_repository: ElectionRepository):
        self.election_repository = election_repository

    async def is_open(self, now: datetime) -> bool:
        election = await self.election_repository.get_current()
        if election is None:
            return False
        return election.is_within_period(now)


class AlwaysOpenPeriodGate(IPeriodGate):
    """Gate that never closes. Useful for tests and ad-hoc tallies."""

    async def is_open(self, now: datetime) -> bool:
        return True
