"""Tests for inbound payload validation."""

import pytest

from vtex_mdx.core.errors import ValidationError
from vtex_mdx.core.validation import (
    parse_credentials_payload,
    parse_export_payload,
    parse_page_payload,
)
from vtex_mdx.types.export import ProtocolVersion


def with_fields(payload, **fields):
    updated = dict(payload)
    updated.update(fields)
    return updated


class TestCredentials:
    """Tests for credential validation."""

    def test_valid_payload(self, valid_payload):
        credentials, version = parse_credentials_payload(valid_payload)

        assert credentials.account_name == "acme"
        assert credentials.app_key.get_secret_value() == "vtexappkey-acme-XYZ"
        assert version == ProtocolVersion.V1

    def test_values_are_trimmed(self, valid_payload):
        credentials, _ = parse_credentials_payload(
            with_fields(valid_payload, accountName="  acme  ", appToken=" secret-token ")
        )

        assert credentials.account_name == "acme"
        assert credentials.app_token.get_secret_value() == "secret-token"

    @pytest.mark.parametrize("field", ["accountName", "appKey", "appToken"])
    def test_missing_credential(self, valid_payload, field):
        payload = dict(valid_payload)
        del payload[field]

        with pytest.raises(ValidationError) as exc_info:
            parse_credentials_payload(payload)

        assert exc_info.value.message == "Account name, app key and app token are required."
        assert exc_info.value.status_code == 400

    def test_blank_credential(self, valid_payload):
        with pytest.raises(ValidationError, match="required"):
            parse_credentials_payload(with_fields(valid_payload, appKey="   "))

    @pytest.mark.parametrize("account", ["-acme", "acme-", "a", "ac", "acme.store", "a" * 65])
    def test_invalid_account_name(self, valid_payload, account):
        with pytest.raises(ValidationError) as exc_info:
            parse_credentials_payload(with_fields(valid_payload, accountName=account))

        assert exc_info.value.message == "Invalid account name."

    def test_control_characters_rejected(self, valid_payload):
        with pytest.raises(ValidationError) as exc_info:
            parse_credentials_payload(with_fields(valid_payload, appToken="secret\x00token"))

        assert exc_info.value.message == "Invalid credentials."

    @pytest.mark.parametrize("suffix", ["\x1c", "\x1d", "\x1e", "\x1f", "\x85"])
    def test_trailing_control_characters_rejected(self, valid_payload, suffix):
        with pytest.raises(ValidationError, match="Invalid credentials."):
            parse_credentials_payload(with_fields(valid_payload, appToken="secret" + suffix))

    @pytest.mark.parametrize("field", ["appKey", "appToken"])
    def test_leading_separator_rejected(self, valid_payload, field):
        with pytest.raises(ValidationError, match="Invalid credentials."):
            parse_credentials_payload(with_fields(valid_payload, **{field: "\x1fsecret"}))

    def test_surrounding_whitespace_trimmed(self, valid_payload):
        credentials, _ = parse_credentials_payload(
            with_fields(valid_payload, appToken="\t\u00a0secret-token\r\n")
        )
        assert credentials.app_token.get_secret_value() == "secret-token"

    def test_token_too_long(self, valid_payload):
        with pytest.raises(ValidationError, match="Invalid credentials."):
            parse_credentials_payload(with_fields(valid_payload, appToken="t" * 513))

    def test_key_length_limit(self, valid_payload):
        parse_credentials_payload(with_fields(valid_payload, appKey="k" * 256))
        with pytest.raises(ValidationError):
            parse_credentials_payload(with_fields(valid_payload, appKey="k" * 257))

    def test_error_never_echoes_secret(self, valid_payload):
        with pytest.raises(ValidationError) as exc_info:
            parse_credentials_payload(with_fields(valid_payload, appToken="leaky\x07secret"))

        assert "leaky" not in str(exc_info.value)

    def test_invalid_version(self, valid_payload):
        with pytest.raises(ValidationError, match="Invalid version."):
            parse_credentials_payload(with_fields(valid_payload, version="v3"))

    def test_version_defaults_to_v1(self, valid_payload):
        payload = dict(valid_payload)
        del payload["version"]

        _, version = parse_credentials_payload(payload)

        assert version == ProtocolVersion.V1

    def test_non_mapping_payload(self):
        with pytest.raises(ValidationError, match="Payload must be an object."):
            parse_credentials_payload(["acme"])


class TestExportPayload:
    """Tests for export payload validation."""

    def test_valid_export(self, valid_payload):
        request = parse_export_payload(with_fields(valid_payload, version="v2", schema="profile"))

        assert request.entity == "CL"
        assert request.schema_name == "profile"
        assert request.version == ProtocolVersion.V2

    def test_blank_schema_is_absent(self, valid_payload):
        request = parse_export_payload(with_fields(valid_payload, schema="  "))
        assert request.schema_name is None

    def test_entity_required(self, valid_payload):
        with pytest.raises(ValidationError, match="Entity is required."):
            parse_export_payload(with_fields(valid_payload, entity=None))

    @pytest.mark.parametrize("entity", ["CL/../AD", "C L", "x" * 65, "CL;drop"])
    def test_invalid_entity(self, valid_payload, entity):
        with pytest.raises(ValidationError, match="Invalid entity."):
            parse_export_payload(with_fields(valid_payload, entity=entity))

    def test_invalid_schema(self, valid_payload):
        with pytest.raises(ValidationError, match="Invalid schema."):
            parse_export_payload(with_fields(valid_payload, schema="pro file"))

    def test_credentials_checked_before_entity(self, valid_payload):
        with pytest.raises(ValidationError, match="Invalid account name."):
            parse_export_payload(with_fields(valid_payload, accountName="-", entity=""))


class TestPagePayload:
    """Tests for page payload validation."""

    def test_defaults(self, valid_payload):
        _, page, page_size = parse_page_payload(valid_payload)

        assert page == 1
        assert page_size == 50

    def test_numeric_strings_accepted(self, valid_payload):
        _, page, page_size = parse_page_payload(
            with_fields(valid_payload, page="3", pageSize="200")
        )

        assert (page, page_size) == (3, 200)

    @pytest.mark.parametrize("page", [0, 10_001, "abc", 1.5, True])
    def test_invalid_page(self, valid_payload, page):
        with pytest.raises(ValidationError, match="Invalid page."):
            parse_page_payload(with_fields(valid_payload, page=page))

    @pytest.mark.parametrize("page_size", [0, 201, "many"])
    def test_invalid_page_size(self, valid_payload, page_size):
        with pytest.raises(ValidationError, match="Invalid page size."):
            parse_page_payload(with_fields(valid_payload, pageSize=page_size))
