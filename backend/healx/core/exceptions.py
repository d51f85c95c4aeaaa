"""
Domain exceptions for the HealX inventory backend.

Services raise these; the global handlers in ``healx.main`` convert them into
``{"success": false, "error": {...}}`` responses so routers never catch them.
"""
from typing import Any, Optional

from fastapi import status


class HealXException(Exception):
    """Base class for every domain error raised by the service layer."""

    code = "HEALX_ERROR"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class EntityNotFoundException(HealXException):
    code = "NOT_FOUND"
    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} with id {entity_id} not found", {"entity": entity, "id": entity_id})


class BusinessRuleViolation(HealXException):
    code = "BUSINESS_RULE_VIOLATION"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidPriceError(HealXException):
    code = "INVALID_PRICE"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidRestockValueError(HealXException):
    code = "INVALID_RESTOCK_VALUE"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class ConcurrentStockChangeError(HealXException):
    code = "CONCURRENT_STOCK_CHANGE"
    http_status = status.HTTP_409_CONFLICT


class NotificationFailure(HealXException):
    code = "NOTIFICATION_FAILURE"
    http_status = status.HTTP_502_BAD_GATEWAY


class StoreUnavailableError(HealXException):
    code = "STORE_UNAVAILABLE"
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
