"""Admin authority interface."""

from abc import ABC, abstractmethod


class IAdminAuthority(ABC):
    """呼び出し元が選挙管理者かどうかを判定するインターフェース."""

    @abstractmethod
    def is_admin(self, caller_id: str) -> bool:
        """呼び出し元IDが管理者ならTrueを返す."""
        pass
