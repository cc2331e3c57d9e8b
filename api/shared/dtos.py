"""Shared DTOs for the chat API."""
from pydantic import BaseModel


class BaseDTO(BaseModel):
    """Base DTO with common configuration."""

    class Config:
        from_attributes = True
