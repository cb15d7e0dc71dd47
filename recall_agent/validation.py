"""
Schema validation helpers.

Turns raw decoded JSON into typed pydantic models and converts pydantic's
errors into :class:`recall_agent.errors.ValidationError` with wire paths.
"""

import json
import re
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError, ValidationIssue


ModelT = TypeVar("ModelT", bound=BaseModel)

EVM_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
# Base58 alphabet, no 0 / O / I / l
SOLANA_ADDRESS_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")
# Plain positional decimal: no sign, exponent or digit separators
DECIMAL_PATTERN = re.compile(r"^[0-9]+(\.[0-9]+)?$")


def is_evm_address(value: str) -> bool:
    return bool(value) and bool(EVM_ADDRESS_PATTERN.match(value))


def is_solana_address(value: str) -> bool:
    return bool(value) and bool(SOLANA_ADDRESS_PATTERN.match(value))


def is_token_address(value: str) -> bool:
    """True for any address format the competition API accepts."""
    if not isinstance(value, str):
        return False
    return is_evm_address(value) or is_solana_address(value)


def same_token(a: str, b: str) -> bool:
    """
    Compare two token addresses.

    EVM addresses are hex and case-insensitive; Solana addresses are
    base58 and compared exactly.
    """
    if is_evm_address(a) and is_evm_address(b):
        return a.lower() == b.lower()
    return a == b


def _format_loc(loc) -> str:
    parts = [str(part) for part in loc]
    return ".".join(parts) if parts else "$"


def from_pydantic(exc: PydanticValidationError, context: Optional[str] = None) -> ValidationError:
    """Convert a pydantic error into our :class:`ValidationError`."""
    issues = [
        ValidationIssue(
            path=_format_loc(err.get("loc", ())),
            message=err.get("msg", "invalid value"),
            kind=err.get("type", "value_error"),
        )
        for err in exc.errors()
    ]
    return ValidationError(issues, context=context)


def parse_model(model: Type[ModelT], payload: Any, context: Optional[str] = None) -> ModelT:
    """
    Validate ``payload`` against ``model``.

    Args:
        model: pydantic model class describing the expected shape
        payload: decoded JSON value (usually a dict)
        context: optional label prefixed to the error message

    Returns:
        A fully-typed model instance

    Raises:
        ValidationError: listing every mismatched field
    """
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise from_pydantic(e, context=context or model.__name__) from e


def parse_json(response: httpx.Response) -> Any:
    """Decode a response body, raising ValidationError if it is not JSON."""
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError.single(
            "$", f"response body is not valid JSON: {e}", kind="json_invalid"
        ) from e
