"""Dependency injection for FastAPI endpoints"""

from datetime import date
from fastapi import Request
from loan_servicing.config import settings
from loan_servicing.infrastructure.cache import TTLCache
from loan_servicing.utils.date_utils import local_today


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_tracking_cache(request: Request) -> TTLCache:
    """Provide the application's tracking lookup cache"""
    return request.app.state.tracking_cache


def get_today() -> date:
    """Current business date, used for due-date and overdue checks"""
    return local_today(settings.business_timezone)
