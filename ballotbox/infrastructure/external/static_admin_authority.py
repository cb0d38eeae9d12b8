"""Admin authority backed by a fixed set of caller ids."""

from collections.abc import Iterable

from ballotbox.domain.services.interfaces.admin_authority import IAdminAuthority


class StaticAdminAuthority(IAdminAuthority):
    """Callers listed at construction time are administrators.

    Args:
        admin_ids: Caller ids granted admin rights (from settings)
    """

    def __init__(self, admin_ids: Iterable[str]):
        self._admin_ids = frozenset(admin_ids)

    def is_admin(self, caller_id: str) -> bool:
        return caller_id in self._admin_ids
