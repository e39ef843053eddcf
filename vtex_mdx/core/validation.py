"""Inbound payload validation.

Payloads arrive as loosely typed mappings (decoded JSON bodies or CLI
options). They are normalized and checked here, before any remote call
is issued, and turned into RetrievalRequest objects.
"""

import re
from typing import Any, Mapping, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..types.export import Credentials, ProtocolVersion, RetrievalRequest
from .errors import ValidationError

ACCOUNT_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9-]{1,62}[a-zA-Z0-9]$")
IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z0-9_\-]{1,64}$")
CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F-\x9F]")

# Whitespace trimmed from inbound values; other control characters are kept
TRIM_CHARS = (
    " \t\n\r\v\f\u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007"
    "\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)

MAX_APP_KEY_LENGTH = 256
MAX_APP_TOKEN_LENGTH = 512

MAX_PAGE = 10_000
MAX_PAGE_SIZE = 200
DEFAULT_PAGE_SIZE = 50

_MISSING_CREDENTIALS = "Account name, app key and app token are required."
_INVALID_CREDENTIALS = "Invalid credentials."


def normalize_value(value: Any) -> str:
    """Strip a possibly missing string value."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError("Expected a string value.")
    return value.strip(TRIM_CHARS)


def _check_secret(value: str, max_length: int) -> str:
    if not value:
        raise ValueError(_MISSING_CREDENTIALS)
    if len(value) > max_length or CONTROL_CHARS.search(value):
        raise ValueError(_INVALID_CREDENTIALS)
    return value


class CredentialsPayload(BaseModel):
    """Credential and version fields shared by every inbound call."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", validate_default=True)

    account_name: str = Field(default="", alias="accountName")
    app_key: str = Field(default="", alias="appKey")
    app_token: str = Field(default="", alias="appToken")
    version: ProtocolVersion = ProtocolVersion.V1

    @field_validator("account_name", mode="before")
    @classmethod
    def _account_name(cls, value: Any) -> str:
        value = normalize_value(value)
        if not value:
            raise ValueError(_MISSING_CREDENTIALS)
        if not ACCOUNT_NAME_PATTERN.match(value):
            raise ValueError("Invalid account name.")
        return value

    @field_validator("app_key", mode="before")
    @classmethod
    def _app_key(cls, value: Any) -> str:
        return _check_secret(normalize_value(value), MAX_APP_KEY_LENGTH)

    @field_validator("app_token", mode="before")
    @classmethod
    def _app_token(cls, value: Any) -> str:
        return _check_secret(normalize_value(value), MAX_APP_TOKEN_LENGTH)

    @field_validator("version", mode="before")
    @classmethod
    def _version(cls, value: Any) -> Any:
        if value is None:
            return ProtocolVersion.V1
        if isinstance(value, ProtocolVersion):
            return value
        if value not in ("v1", "v2"):
            raise ValueError("Invalid version.")
        return value

    def to_credentials(self) -> Credentials:
        return Credentials(
            account_name=self.account_name,
            app_key=self.app_key,
            app_token=self.app_token,
        )


def _check_identifier(value: Any, label: str, required: bool) -> Optional[str]:
    value = normalize_value(value)
    if not value:
        if required:
            raise ValueError(f"{label} is required.")
        return None
    if not IDENTIFIER_PATTERN.match(value):
        raise ValueError(f"Invalid {label.lower()}.")
    return value


class ExportPayload(CredentialsPayload):
    """Payload of an export call."""

    entity: str = ""
    schema_name: Optional[str] = Field(default=None, alias="schema")

    @field_validator("entity", mode="before")
    @classmethod
    def _entity(cls, value: Any) -> str:
        return _check_identifier(value, "Entity", required=True)

    @field_validator("schema_name", mode="before")
    @classmethod
    def _schema(cls, value: Any) -> Optional[str]:
        return _check_identifier(value, "Schema", required=False)

    def to_request(self) -> RetrievalRequest:
        return RetrievalRequest(
            credentials=self.to_credentials(),
            version=self.version,
            entity=self.entity,
            schema_name=self.schema_name,
        )


class PagePayload(ExportPayload):
    """Payload of a single-page browsing call."""

    page: int = 1
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, alias="pageSize")

    @field_validator("page", mode="before")
    @classmethod
    def _page(cls, value: Any) -> int:
        if value is None:
            return 1
        page = _as_integer(value, "Invalid page.")
        if not 1 <= page <= MAX_PAGE:
            raise ValueError("Invalid page.")
        return page

    @field_validator("page_size", mode="before")
    @classmethod
    def _page_size(cls, value: Any) -> int:
        if value is None:
            return DEFAULT_PAGE_SIZE
        page_size = _as_integer(value, "Invalid page size.")
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValueError("Invalid page size.")
        return page_size


def _as_integer(value: Any, message: str) -> int:
    if isinstance(value, bool):
        raise ValueError(message)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValueError(message)


def _first_error_message(exc: pydantic.ValidationError) -> str:
    """Readable message for the first failing field, without its input."""
    errors = exc.errors(include_input=False, include_url=False)
    if not errors:
        return "Invalid payload."
    message = errors[0].get("msg", "Invalid payload.")
    prefix = "Value error, "
    if message.startswith(prefix):
        message = message[len(prefix):]
    return message


def _parse(model: type[BaseModel], payload: Mapping[str, Any]) -> Any:
    if not isinstance(payload, Mapping):
        raise ValidationError("Payload must be an object.")
    try:
        return model.model_validate(dict(payload))
    except pydantic.ValidationError as e:
        raise ValidationError(_first_error_message(e)) from None


def parse_credentials_payload(payload: Mapping[str, Any]) -> tuple[Credentials, ProtocolVersion]:
    """Validate credentials and version.

    Raises:
        ValidationError: If any field is malformed.
    """
    parsed: CredentialsPayload = _parse(CredentialsPayload, payload)
    return parsed.to_credentials(), parsed.version


def parse_export_payload(payload: Mapping[str, Any]) -> RetrievalRequest:
    """Validate an export payload.

    Raises:
        ValidationError: If any field is malformed.
    """
    parsed: ExportPayload = _parse(ExportPayload, payload)
    return parsed.to_request()


def parse_page_payload(payload: Mapping[str, Any]) -> tuple[RetrievalRequest, int, int]:
    """Validate a page payload.

    Returns:
        Tuple of (request, page, page_size).

    Raises:
        ValidationError: If any field is malformed.
    """
    parsed: PagePayload = _parse(PagePayload, payload)
    return parsed.to_request(), parsed.page, parsed.page_size
