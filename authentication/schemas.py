from datetime import datetime
from typing import Annotated, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from ninja import Schema
from pydantic import AfterValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from authentication.models import UserIdentity


def _check_email(value: str) -> str:
    try:
        validate_email(value)
    except DjangoValidationError:
        raise ValueError("Invalid email address")
    return value


EmailAddress = Annotated[str, AfterValidator(_check_email)]


class CamelSchema(Schema):
    """Schema exchanged with the browser client in camelCase"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserInSchema(CamelSchema):
    """Schema for upserting an identity"""
    email: EmailAddress
    name: Optional[str] = Field(None, min_length=2, max_length=80)
    role: Optional[UserIdentity.Role] = None


class UserOutSchema(CamelSchema):
    id: int
    email: str
    name: Optional[str] = None
    role: str
    created_at: datetime
