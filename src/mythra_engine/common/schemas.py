"""Shared Pydantic schemas for Mythra-Engine."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    service: str = "mythra-engine"


class ErrorResponse(BaseModel):
    error: str
    code: str
    detail: str = ""
