"""Gemini APIを使用した支払いリマインダーの文面調整サービス"""
import json
import logging

import google.generativeai as genai

from invoicecraft.domain.exceptions import ExternalServiceError
from invoicecraft.domain.repositories.reminder_suggestion_repository import IReminderSuggestionRepository
from invoicecraft.domain.value_objects.reminder import ReminderRequest, ReminderSuggestion

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """You are an expert in customer relations and communication. Your goal is to optimize payment reminder messages to improve the likelihood of on-time payments,
taking into account the customer's payment history and the relationship with the customer.

Here is the information about the customer and the invoice:

Customer ID: {customer_id}
Invoice ID: {invoice_id}
Payment History: {payment_history}
Customer Relationship: {customer_relationship}
Current Reminder Message: {current_reminder_message}

Based on this information, suggest an adjusted payment reminder message. Explain your reasoning for the adjustments.

Your response should be concise and professional.
Return JSON only, with exactly these keys:
{{"adjustedReminderMessage": "...", "reasoning": "..."}}
"""


def extract_json_text(response_text: str) -> str:
    """レスポンスからJSON部分を取り出す（```json で囲まれている場合がある）"""
    if "```json" in response_text:
        json_start = response_text.find("```json") + 7
        json_end = response_text.find("```", json_start)
        return response_text[json_start:json_end].strip()
    if "```" in response_text:
        json_start = response_text.find("```") + 3
        json_end = response_text.find("```", json_start)
        return response_text[json_start:json_end].strip()
    return response_text


class GeminiReminderService(IReminderSuggestionRepository):
    """Gemini APIで顧客に合わせたリマインダー文面を提案するサービス"""

    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash"):
        """Geminiサービスを初期化する

        Args:
            api_key: Gemini APIキー
            model_name: 使用するモデル名
        """
        api_key = api_key.strip()
        if not api_key:
            raise ValueError("Gemini APIキーが空です")

        if any(ord(c) < 32 and c not in '\t\n\r' for c in api_key):
            raise ValueError("Gemini APIキーに無効な文字が含まれています")

        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name)

    async def suggest(self, request: ReminderRequest) -> ReminderSuggestion:
        """リマインダー文面の調整案を取得する

        Raises:
            ExternalServiceError: API呼び出しまたはレスポンスの解析に失敗した場合
        """
        logger.info(f"リマインダー文面の調整をGeminiに依頼します: 請求書 {request.invoice_id}")

        prompt = PROMPT_TEMPLATE.format(
            customer_id=request.customer_id,
            invoice_id=request.invoice_id,
            payment_history=request.payment_history or "No payment history",
            customer_relationship=request.customer_relationship or "New customer",
            current_reminder_message=request.current_reminder_message,
        )

        response_text = ""
        try:
            response = await self.model.generate_content_async(prompt)
            response_text = response.text.strip()
            logger.debug(f"Gemini APIレスポンス: {response_text[:500]}")

            data = json.loads(extract_json_text(response_text))
            adjusted = str(data.get("adjustedReminderMessage") or "").strip()
            if not adjusted:
                raise ValueError("adjustedReminderMessage が空です")

            suggestion = ReminderSuggestion(
                adjusted_reminder_message=adjusted,
                reasoning=str(data.get("reasoning") or ""),
            )
            logger.info(f"リマインダー文面の調整案を取得しました: 請求書 {request.invoice_id}")
            return suggestion

        except json.JSONDecodeError as e:
            logger.error(f"JSONのパースに失敗しました: {e}")
            logger.error(f"レスポンステキスト: {response_text[:1000]}")
            raise ExternalServiceError(f"リマインダー提案の解析に失敗しました: JSONのパースエラー - {e}") from e
        except Exception as e:
            logger.error(f"リマインダー提案の取得中にエラーが発生しました: {e}")
            raise ExternalServiceError(f"リマインダー提案の取得に失敗しました: {e}") from e
