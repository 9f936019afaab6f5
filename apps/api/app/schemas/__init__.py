"""Pydantic schemas for request/response validation."""

from app.schemas.common import HealthResponse, SubscribeResponse
from app.schemas.signup import Signup, SignupData

__all__ = [
    "HealthResponse",
    "Signup",
    "SignupData",
    "SubscribeResponse",
]
