"""支払いリマインダー提案リポジトリのインターフェース"""
from abc import ABC, abstractmethod

from invoicecraft.domain.value_objects.reminder import ReminderRequest, ReminderSuggestion


class IReminderSuggestionRepository(ABC):
    """リマインダー文面を調整する生成AIのインターフェース"""

    @abstractmethod
    async def suggest(self, request: ReminderRequest) -> ReminderSuggestion:
        """顧客との関係と支払い履歴からリマインダー文面を調整する

        Args:
            request: 現在の文面と顧客情報

        Returns:
            ReminderSuggestion: 調整後の文面と理由

        Raises:
            ExternalServiceError: 生成AIの呼び出しに失敗した場合
        """
        pass
