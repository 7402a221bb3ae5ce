"""Pydantic schemas for registration, login and issued tokens."""

import uuid

from pydantic import BaseModel, EmailStr, Field, model_validator


class RegisterUser(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("The passwords do not match")
        return self


class LoginUser(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=100)


class ClaimRead(BaseModel):
    type: str
    value: str


class UserToken(BaseModel):
    id: uuid.UUID
    email: str
    claims: list[ClaimRead] = []


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user_token: UserToken
