"""Period gate interface.

投票期間の判定は外部の時計・期間管理に委ねる。コアはその結果のみを使う。
"""

from abc import ABC, abstractmethod
from datetime import datetime


class IPeriodGate(ABC):
    """投票期間が開いているかを判定するインターフェース."""

    @abstractmethod
    async def is_open(self, now: datetime) -> bool:
        """指定日時に投票期間が開いているかどうかを返す.

        Args:
            now: 判定基準日時

        Returns:
            期間内ならTrue
        """
        pass
