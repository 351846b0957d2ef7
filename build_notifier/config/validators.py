"""Validation helpers: readable pydantic errors and shared field types."""

from typing import Annotated, Any, List, Tuple

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BeforeValidator, ValidationError
from pydantic_core import PydanticCustomError

_TYPE_ERRORS = {
    "string_type": "string",
    "int_type": "integer",
    "int_parsing": "integer",
    "int_from_float": "integer",
    "bool_type": "boolean",
    "list_type": "list",
    "model_type": "object",
    "dict_type": "object",
    "model_attributes_type": "object",
}


def field_path(loc: Tuple) -> str:
    """Join a pydantic error location into a dotted field path.

    Discriminated union tags (e.g. ``structured``) and list indices are
    kept so nested errors stay traceable.

    Args:
        loc: Location tuple from a pydantic error

    Returns:
        Dotted path such as ``settings.email.statuses.0``
    """
    return ".".join(str(part) for part in loc) or "<root>"


def format_validation_errors(exc: ValidationError) -> List[str]:
    """
    Convert pydantic validation errors into user-friendly messages.

    Args:
        exc: ValidationError raised by a model or TypeAdapter

    Returns:
        One message per violated field
    """
    errors = []
    for error in exc.errors():
        path = field_path(error["loc"])
        error_type = error["type"]
        error_msg = error["msg"]

        if error_type == "missing":
            errors.append(f"Missing required field: {path}")
        elif error_type in _TYPE_ERRORS:
            errors.append(
                f"Invalid type for '{path}': expected {_TYPE_ERRORS[error_type]}, "
                f"got {error.get('input')!r}"
            )
        elif error_type == "enum":
            errors.append(f"Invalid value for '{path}': {error_msg}")
        elif error_type == "extra_forbidden":
            errors.append(f"Unknown field: {path}")
        else:
            errors.append(f"{path}: {error_msg}")

    return errors


def violated_fields(exc: ValidationError) -> List[str]:
    """Return the distinct field paths named by a ValidationError, in order."""
    fields = []
    for error in exc.errors():
        path = field_path(error["loc"])
        if path not in fields:
            fields.append(path)
    return fields


def check_address(value: str) -> str:
    """Check address syntax and return the address exactly as given.

    Display-name forms such as ``Dev Team <dev@example.com>`` are rejected.

    Raises:
        ValueError: If the address is not a valid email address
    """
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(f"invalid email address {value!r}: {e}") from e
    return value


def reject_bool(value: Any) -> Any:
    """Refuse booleans where an integer is expected."""
    if isinstance(value, bool):
        raise PydanticCustomError("int_type", "Input should be a valid integer")
    return value


# Validated address, passed through unchanged
EmailAddress = Annotated[str, AfterValidator(check_address)]

# Integer that does not accept True/False
Integer = Annotated[int, BeforeValidator(reject_bool)]
