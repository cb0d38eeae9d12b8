"""Base entity for domain layer."""

from typing import Any


class BaseEntity:
    """ドメインエンティティの基底クラス.

    IDを持つエンティティの同一性はIDで判定する。
    IDが未採番（None）の場合はオブジェクト同一性にフォールバックする。
    """

    def __init__(self, id: int | None = None) -> None:
        self.id = id

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, self.__class__):
            return False
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self) -> int:
        if self.id is None:
            return id(self)
        return hash((self.__class__.__name__, self.id))
