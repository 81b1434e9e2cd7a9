"""
Blog API Backend — User Schemas
================================

What:  Request and response contracts for /users.
Why:   Schemas are separate from the ORM model so the password hash can never
       leak into a response: UserRead simply has no password field.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from blogapi.schemas.common import strip_required


class UserCreate(BaseModel):
    """
    Body of POST /users (JSON or form).

    The password arrives in plain text and is hashed by the mutation service
    before it reaches the database. EmailStr (email-validator) rejects
    malformed addresses such as `a@b@c` before any lookup runs.
    """
    name: str = Field(min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(description="Unique login email")
    password: str = Field(min_length=1, max_length=128, description="Plain-text password")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return strip_required(v, "name")


class UserUpdate(UserCreate):
    """Body of PUT /users/{id}. Full replace: every field is required."""


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
