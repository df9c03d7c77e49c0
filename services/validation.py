"""
Buyer record validation.

Per-field rules live on ``BuyerInSchema``; rules spanning several fields are
checked here once the fields themselves are known to be valid. Every path that
writes a buyer (single create, update, each import row) goes through
``validate_buyer``.
"""
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Union

from pydantic import ValidationError as PydanticValidationError

from buyers.models import BHK_REQUIRED_PROPERTY_TYPES
from buyers.schemas import BuyerInSchema
from services.exceptions import ValidationError

BUDGET_ORDER_MESSAGE = "budgetMax must be greater than or equal to budgetMin"
BHK_REQUIRED_MESSAGE = "bhk is required for Apartment or Villa property types"


def field_errors(exc: PydanticValidationError) -> List[Dict[str, str]]:
    """Flatten pydantic errors to ``{"field", "message"}`` pairs"""
    errors = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "__root__"
        errors.append({"field": field, "message": error.get("msg", "Invalid value")})
    return errors


def describe_errors(errors: List[Dict[str, str]]) -> str:
    return "; ".join(f"{error['field']}: {error['message']}" for error in errors)


def check_cross_field_rules(data: BuyerInSchema) -> None:
    """
    Enforce invariants that involve more than one field.

    Raises:
        ValidationError: the first violated rule, with its message
    """
    if data.budget_min is not None and data.budget_max is not None:
        if data.budget_max < data.budget_min:
            raise ValidationError(
                BUDGET_ORDER_MESSAGE,
                errors=[{"field": "budgetMax", "message": BUDGET_ORDER_MESSAGE}],
            )

    if data.property_type in BHK_REQUIRED_PROPERTY_TYPES and not data.bhk:
        raise ValidationError(
            BHK_REQUIRED_MESSAGE,
            errors=[{"field": "bhk", "message": BHK_REQUIRED_MESSAGE}],
        )


def validate_buyer(raw: Union[Mapping[str, Any], BuyerInSchema]) -> BuyerInSchema:
    """
    Validate a raw buyer record and return the typed record.

    ``raw`` may be a mapping with camelCase or snake_case keys, or a schema
    instance the HTTP layer already parsed. Unknown keys are ignored.

    Raises:
        ValidationError: listing every field-level violation, or the violated
            cross-field rule
    """
    if isinstance(raw, BuyerInSchema):
        data = raw
    else:
        try:
            data = BuyerInSchema.model_validate(dict(raw))
        except PydanticValidationError as exc:
            errors = field_errors(exc)
            raise ValidationError(describe_errors(errors), errors=errors)

    check_cross_field_rules(data)
    return data


def plain(value: Any) -> Any:
    """Enum members to their stored value"""
    if isinstance(value, Enum):
        return value.value
    return value


def plain_amount(value: Any) -> Any:
    """Budget amounts as JSON numbers: whole amounts as int, the rest as float"""
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    return value
