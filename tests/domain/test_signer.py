"""Tests for the API gateway request signer."""

import base64
import hashlib
import hmac

import pytest

from ncloud_mcp.domain.services.signer import sign, sign_request, current_timestamp
from ncloud_mcp.domain.value_objects.credentials import Credentials
from ncloud_mcp.domain.value_objects.signed_request import (
    ACCESS_KEY_HEADER,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
)


def _reference(method, url, timestamp, access_key, secret_key) -> str:
    message = (
        method.encode()
        + b" "
        + url.encode()
        + b"\n"
        + timestamp.encode()
        + b"\n"
        + access_key.encode()
    )
    digest = hmac.new(secret_key.encode(), message, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


BASE_INPUTS = (
    "GET",
    "/vserver/v2/getServerInstanceList?regionCode=KR",
    "1700000000000",
    "AK",
    "SK",
)


class TestSign:
    def test_matches_reference_message_layout(self):
        assert sign(*BASE_INPUTS) == _reference(*BASE_INPUTS)

    def test_deterministic(self):
        assert sign(*BASE_INPUTS) == sign(*BASE_INPUTS)

    def test_is_plain_base64_of_sha256(self):
        signature = sign(*BASE_INPUTS)
        assert len(base64.b64decode(signature)) == 32
        assert not signature.endswith("\n")

    @pytest.mark.parametrize("index", range(5))
    def test_any_input_change_changes_signature(self, index):
        changed = list(BASE_INPUTS)
        changed[index] = changed[index] + "x"
        assert sign(*changed) != sign(*BASE_INPUTS)

    def test_query_order_matters(self):
        a = sign("GET", "/p?a=1&b=2", "1", "AK", "SK")
        b = sign("GET", "/p?b=2&a=1", "1", "AK", "SK")
        assert a != b


class TestSignRequest:
    def test_uses_given_timestamp(self):
        creds = Credentials(access_key="AK", secret_key="SK")
        signed = sign_request("GET", "/vserver/v2/getVpcList", creds, timestamp="42")
        assert signed.timestamp == "42"
        assert signed.signature == sign("GET", "/vserver/v2/getVpcList", "42", "AK", "SK")

    def test_generates_millisecond_timestamp(self):
        creds = Credentials(access_key="AK", secret_key="SK")
        signed = sign_request("GET", "/vserver/v2/getVpcList", creds)
        assert signed.timestamp.isdigit()
        assert len(signed.timestamp) == 13

    def test_headers(self):
        creds = Credentials(access_key="AK", secret_key="SK")
        signed = sign_request("POST", "/x", creds, timestamp="1")
        headers = signed.headers(creds.access_key)
        assert headers == {
            TIMESTAMP_HEADER: "1",
            ACCESS_KEY_HEADER: "AK",
            SIGNATURE_HEADER: signed.signature,
        }


def test_current_timestamp_is_epoch_millis():
    ts = int(current_timestamp())
    assert ts > 1_600_000_000_000
