"""
API schemas for Workforce Risk.

Request and response models for the REST API endpoints.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from workforce_risk.models.base import CamelModel


class AssessRequest(CamelModel):
    """
    Request model for POST /assess.

    Example:
    {
        "name": "Jane Doe",
        "company": "Acme Corp",
        "linkedin": "https://www.linkedin.com/in/jane-doe/"
    }
    """
    name: Optional[str] = Field(default=None, description="Person name")
    company: Optional[str] = Field(default=None, description="Current company name, narrows a name search")
    linkedin: Optional[str] = Field(default=None, description="Profile URL; takes precedence over name")


class ChatRequest(CamelModel):
    """
    Request model for POST /chat.

    The context objects are passed back as the client received them from
    /assess (camelCase keys).
    """
    question: str = Field(default="", description="Follow-up question")
    person: Optional[Dict[str, Any]] = Field(default=None, description="Assessed person")
    scores: Optional[Dict[str, Any]] = Field(default=None, description="Risk scores")
    company: Optional[Dict[str, Any]] = Field(default=None, description="Company summary")
    salary: Optional[Dict[str, Any]] = Field(default=None, description="Salary estimate")
    hiring_signals: Optional[Dict[str, Any]] = Field(default=None, description="Hiring signals")
    tab: Optional[str] = Field(default=None, description="Active UI tab (overview, company, salary, opportunities)")


class ChatResponse(BaseModel):
    """Response model for POST /chat."""
    answer: str = Field(description="Assistant answer")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(description="Error message")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(description="Service status")
    timestamp: datetime = Field(description="Current timestamp")
