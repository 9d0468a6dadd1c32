"""Auth schemas: CurrentUser, registration, login, profile."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from esg_api.modules.esg.schemas import PRINTABLE_TEXT


class CurrentUser(BaseModel):
    """Lightweight user context extracted from the JWT + DB lookup."""

    user_id: uuid.UUID
    email: str
    full_name: str


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255, pattern=PRINTABLE_TEXT)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class UpdateProfileRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = Field(default=None, min_length=1, max_length=255, pattern=PRINTABLE_TEXT)
    current_password: str | None = None
    new_password: str | None = Field(default=None, min_length=6, max_length=128)


class UserProfileResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: uuid.UUID
    name: str
    email: str
    created_at: datetime


class AuthTokenResponse(BaseModel):
    token: str
    user: UserProfileResponse
