"""Normalizes Kount order responses into EvaluationResult."""

import json
import logging
from typing import Any

import httpx

from ..core.base_models import Decision, EvaluationResult
from ..core.exceptions import APIError
from ..validators.nulls import normalize_null

logger = logging.getLogger(__name__)

# Provider verdicts (and the single-letter RIS codes) to normalized decisions
DECISION_MAP = {
    "APPROVE": Decision.APPROVE,
    "A": Decision.APPROVE,
    "DECLINE": Decision.DECLINE,
    "D": Decision.DECLINE,
    "REVIEW": Decision.REVIEW,
    "R": Decision.REVIEW,
    "ESCALATE": Decision.REVIEW,
    "E": Decision.REVIEW,
}


def normalize_decision(raw_decision: Any, default: Decision = Decision.REVIEW) -> Decision:
    """
    Normalize a provider verdict.

    Args:
        raw_decision: Verdict as sent by Kount, possibly missing
        default: Decision used when the verdict is missing or unrecognized

    Returns:
        Normalized decision
    """
    raw_decision = normalize_null(raw_decision)
    if not isinstance(raw_decision, str):
        return default
    return DECISION_MAP.get(raw_decision.strip().upper(), default)


def normalize_reason_codes(raw_codes: Any) -> list[str]:
    """Reason codes arrive as a single value or a list; always return a list."""
    if raw_codes is None:
        return []
    if not isinstance(raw_codes, (list, tuple)):
        raw_codes = [raw_codes]
    return [str(code) for code in raw_codes if normalize_null(code) is not None]


class ResponseParser:
    """
    Parses Kount order responses.

    Newer responses nest the verdict under order.riskInquiry; older ones put
    it at the top level. The nested shape wins when both are present.
    """

    def __init__(self, default_decision: Decision = Decision.REVIEW):
        self.default_decision = default_decision

    def parse(self, response: httpx.Response) -> EvaluationResult:
        """
        Parse a provider response.

        Raises:
            APIError: status outside 200-299 or a body that is not a JSON object
        """
        status_code = response.status_code
        if not 200 <= status_code < 300:
            body = self._error_body(response)
            raise APIError(f"Kount API error: {status_code} {response.text}", status_code=status_code, body=body)

        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise APIError(f"Kount API returned invalid JSON: {e}", status_code=status_code, body=response.text) from e

        if not isinstance(body, dict):
            raise APIError(
                f"Kount API returned unexpected body type: {type(body).__name__}",
                status_code=status_code,
                body=body,
            )

        return self.parse_body(body)

    def parse_body(self, body: dict[str, Any]) -> EvaluationResult:
        """Extract the decision summary from a decoded response body."""
        order = body.get("order")
        risk = order.get("riskInquiry") if isinstance(order, dict) else None

        if isinstance(risk, dict):
            fields = self._extract_nested(order, risk)
        else:
            fields = self._extract_flat(body)

        provider_decision = normalize_null(fields["decision"])
        decision = normalize_decision(provider_decision, self.default_decision)
        if provider_decision is not None and decision.value != str(provider_decision).strip().upper():
            logger.info("[Kount] Decision %r normalized to %s", provider_decision, decision.value)

        return EvaluationResult(
            decision=decision,
            risk_score=self._to_score(fields["risk_score"]),
            reason_codes=normalize_reason_codes(fields["reason_codes"]),
            transaction_id=self._to_str(fields["transaction_id"]),
            order_id=self._to_str(fields["order_id"]),
            merchant_order_id=self._to_str(fields["merchant_order_id"]),
            persona=fields["persona"],
            provider_decision=str(provider_decision) if provider_decision is not None else None,
            raw=body,
        )

    def _extract_nested(self, order: dict, risk: dict) -> dict[str, Any]:
        return {
            "decision": risk.get("decision"),
            "risk_score": risk.get("omniscore"),
            "reason_codes": risk.get("reasonCode", risk.get("reasonCodes")),
            "transaction_id": self._first_transaction_id(order.get("transactions")),
            "order_id": order.get("orderId"),
            "merchant_order_id": order.get("merchantOrderId"),
            "persona": risk.get("persona"),
        }

    def _extract_flat(self, body: dict) -> dict[str, Any]:
        order = body.get("order") if isinstance(body.get("order"), dict) else {}
        return {
            "decision": body.get("decision"),
            "risk_score": body.get("riskScore", body.get("omniscore")),
            "reason_codes": body.get("reasonCodes", body.get("reasonCode")),
            "transaction_id": body.get("transactionId") or self._first_transaction_id(order.get("transactions")),
            "order_id": body.get("orderId", order.get("orderId")),
            "merchant_order_id": body.get("merchantOrderId", order.get("merchantOrderId")),
            "persona": body.get("persona"),
        }

    def _first_transaction_id(self, transactions: Any) -> Any:
        if isinstance(transactions, list) and transactions and isinstance(transactions[0], dict):
            return transactions[0].get("transactionId")
        return None

    def _to_score(self, value: Any) -> float | None:
        value = normalize_null(value)
        if value is None or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning("[Kount] Ignoring non-numeric score: %r", value)
            return None

    def _to_str(self, value: Any) -> str | None:
        value = normalize_null(value)
        return None if value is None else str(value)

    def _error_body(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return response.text
