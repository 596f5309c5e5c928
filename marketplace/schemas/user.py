"""User (owner profile) request/response schemas."""

import uuid

from pydantic import EmailStr, Field

from marketplace.schemas.common import CamelModel


class AddressSchema(CamelModel):
    street: str
    city: str
    state: str
    zip_code: str
    country: str
    is_default: bool = False


class RegisterRequest(CamelModel):
    # Falls back to the identity token's email / email local part
    email: EmailStr | None = None
    name: str | None = Field(default=None, min_length=1, max_length=255)
    phone: str | None = Field(default=None, max_length=32)


class ProfileResponse(CamelModel):
    id: uuid.UUID
    email: str
    name: str
    phone: str = ""
    role: str
    addresses: list[AddressSchema] = []


class RegisterResponse(CamelModel):
    message: str
    user: ProfileResponse
