# models.py

from typing import Optional

from fastapi import Request
from pydantic import BaseModel, EmailStr, Field, validator
from pydantic import ValidationError as SchemaError

from errors import ValidationError


class UserCreate(BaseModel):
    username: str
    email: EmailStr
    password: str

    @validator("username", "password")
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str = Field(alias="newPassword")


class VehicleForm(BaseModel):
    vehicleNumber: str
    vehicleType: str
    brandModel: str
    registrationYear: int

    @validator("vehicleNumber", "vehicleType", "brandModel", pre=True)
    def not_blank(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("must not be empty")
        return str(v).strip()


def public_user(doc: dict) -> dict:
    return {"_id": str(doc["_id"]), "username": doc["username"], "email": doc["email"]}


def vehicle_out(doc: dict) -> dict:
    doc = dict(doc)
    doc["_id"] = str(doc["_id"])
    doc["userId"] = str(doc["userId"])
    return doc


def first_error(exc) -> Optional[str]:
    """Readable message for the first problem in a pydantic ValidationError."""
    errors = exc.errors()
    if not errors:
        return None
    err = errors[0]
    field = ".".join(str(p) for p in err.get("loc", ()))
    return f"{field}: {err.get('msg')}" if field else err.get("msg")


async def request_payload(request: Request) -> dict:
    """Body fields from either a JSON or a form-encoded request."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            raise ValidationError("Malformed JSON body")
        if not isinstance(data, dict):
            raise ValidationError("Expected a JSON object")
        return data
    form = await request.form()
    return {k: v for k, v in form.items() if isinstance(v, str)}


def parse(model, data: dict):
    try:
        return model(**data)
    except SchemaError as e:
        raise ValidationError(first_error(e))
