"""支払いリマインダーの値オブジェクト"""
from dataclasses import dataclass


@dataclass(frozen=True)
class ReminderRequest:
    """AIに渡すリマインダー調整リクエスト"""

    customer_id: str
    invoice_id: str
    payment_history: str
    customer_relationship: str
    current_reminder_message: str


@dataclass(frozen=True)
class ReminderSuggestion:
    """AIが提案したリマインダー文面と理由"""

    adjusted_reminder_message: str
    reasoning: str
