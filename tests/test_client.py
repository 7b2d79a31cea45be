"""Tests for the low-level API client, against a fake transport."""

import base64
import json

import pytest
from conftest import TEST_API_KEY, TEST_BASE_URL, make_response

from printnode_cli.core.client import MIN_TIMEOUT, APIClient, apply_offset_limit, format_set
from printnode_cli.core.credentials import ApiKeyCredentials, UsernamePasswordCredentials
from printnode_cli.core.entity import Entity
from printnode_cli.core.errors import (
    HTTPError,
    InvalidArgumentError,
    MissingChildAccountError,
    NoSuchOperationError,
    UnexpectedFieldError,
)
from printnode_cli.core.types import Account, ApiKey, Client, Computer, Printer, PrintJob, Tag

AUTH = "Basic " + base64.b64encode(f"{TEST_API_KEY}:".encode()).decode()


# =============================================================================
# Helpers
# =============================================================================


class TestApplyOffsetLimit:
    def test_appends_query(self):
        assert apply_offset_limit("https://x.invalid/printers", 0, 10) == "https://x.invalid/printers?offset=0&limit=10"

    def test_keeps_existing_arguments_and_replaces_paging(self):
        url = apply_offset_limit("https://x.invalid/download/client/osx?edition=printnode&limit=3", 5, 20)
        assert url == "https://x.invalid/download/client/osx?edition=printnode&offset=5&limit=20"

    @pytest.mark.parametrize("offset,limit", [(-1, 10), (0, 0), ("0", 10), (0, True), (0, None)])
    def test_rejects_invalid_values(self, offset, limit):
        with pytest.raises(InvalidArgumentError):
            apply_offset_limit("https://x.invalid/", offset, limit)


class TestFormatSet:
    @pytest.mark.parametrize(
        "value,expected",
        [(5, "5"), ("1,2", "1,2"), ([1, 2, 3], "1,2,3"), (("a", 7), "a,7")],
    )
    def test_valid(self, value, expected):
        assert format_set(value) == expected

    @pytest.mark.parametrize("value", [[], "", True, 1.5, {"a": 1}])
    def test_invalid(self, value):
        with pytest.raises(InvalidArgumentError):
            format_set(value)


# =============================================================================
# Configuration
# =============================================================================


class TestConfiguration:
    def test_base_url_is_validated_and_trimmed(self, transport):
        api = APIClient(credentials=ApiKeyCredentials("k"), base_url="https://api.example.invalid/", transport=transport)
        assert api.base_url == "https://api.example.invalid"

        with pytest.raises(InvalidArgumentError):
            api.base_url = "not a url"

    def test_env_configuration(self, monkeypatch, transport):
        monkeypatch.setenv("PRINTNODE_API_KEY", "from-env")
        monkeypatch.setenv("PRINTNODE_BASE_URL", "https://env.example.invalid")
        api = APIClient(transport=transport)

        assert api.credentials.api_key == "from-env"
        assert api.base_url == "https://env.example.invalid"

    def test_timeout_floor(self, api):
        api.set_timeout(1)
        assert api.timeout == MIN_TIMEOUT
        api.set_timeout(30)
        assert api.timeout == 30
        with pytest.raises(InvalidArgumentError):
            api.set_timeout("10")

    def test_offset_and_limit_validation(self, api):
        with pytest.raises(InvalidArgumentError):
            api.set_offset(-1)
        with pytest.raises(InvalidArgumentError):
            api.set_limit(0)

    def test_child_account_needs_credentials(self, monkeypatch, transport):
        monkeypatch.delenv("PRINTNODE_API_KEY", raising=False)
        api = APIClient(base_url=TEST_BASE_URL, transport=transport)
        with pytest.raises(InvalidArgumentError):
            api.set_child_account_by_id(5)


# =============================================================================
# Headers
# =============================================================================


class TestHeaders:
    def test_default_headers(self, api):
        assert api.build_headers() == [("Authorization", AUTH), ("Expect", "")]

    def test_full_header_order(self, api):
        api.set_child_account_by_email("kid@example.com")
        api.pretty = True
        api.dont_log = True
        api.set_headers({"X-Trace": "abc"})

        assert api.build_headers() == [
            ("Authorization", AUTH),
            ("X-Child-Account-By-Email", "kid@example.com"),
            ("Expect", ""),
            ("X-Pretty", "1"),
            ("X-Dont-Log", "1"),
            ("X-Trace", "abc"),
        ]

    def test_account_credentials_flag(self, transport):
        api = APIClient(
            credentials=UsernamePasswordCredentials("me@example.com", "pw"),
            base_url=TEST_BASE_URL,
            transport=transport,
        )
        names = [name for name, _value in api.build_headers()]
        assert names[:2] == ["Authorization", "X-Auth-With-Account-Credentials"]

    def test_child_account_switching(self, api):
        api.set_child_account_by_id(7)
        assert ("X-Child-Account-By-Id", "7") in api.build_headers()

        api.set_child_account_by_creator_ref("ref-9")
        headers = api.build_headers()
        assert ("X-Child-Account-By-CreatorRef", "ref-9") in headers
        assert not any(name == "X-Child-Account-By-Id" for name, _ in headers)

        api.clear_child_account()
        assert api.build_headers() == [("Authorization", AUTH), ("Expect", "")]

    def test_headers_reach_transport(self, api, transport):
        transport.queue(200, [])
        api.get("/computers")
        _request, headers, timeout = transport.calls[0]
        assert headers[0] == ("Authorization", AUTH)
        assert timeout == MIN_TIMEOUT


# =============================================================================
# Requests
# =============================================================================


class TestRequests:
    def test_end_point_url(self, api):
        assert api.end_point_url(Printer) == f"{TEST_BASE_URL}/printers"
        assert api.end_point_url(Tag) == f"{TEST_BASE_URL}/account/tag"

    def test_end_point_url_unmapped(self, api):
        class Unmapped(Entity):
            pass

        with pytest.raises(InvalidArgumentError, match="Unmapped"):
            api.end_point_url(Unmapped)

    def test_get_applies_paging(self, api, transport):
        transport.queue(200, [])
        api.get("/printers", offset=20, limit=5)
        assert transport.last.uri == f"{TEST_BASE_URL}/printers?offset=20&limit=5"
        assert transport.last.method == "GET"

    def test_get_uses_client_defaults(self, api, transport):
        api.set_offset(3)
        api.set_limit(7)
        transport.queue(200, [])
        api.get("/printers")
        assert transport.last.uri.endswith("?offset=3&limit=7")

    def test_post_body_and_url(self, api, transport):
        transport.queue(201, 123)
        job = PrintJob(printer_id=34, title="t", content_type="raw_uri", content="https://x.invalid/a.zpl")
        api.post(job)

        assert transport.last.method == "POST"
        assert transport.last.uri == f"{TEST_BASE_URL}/printjobs"
        assert json.loads(transport.last.body) == {
            "printerId": 34,
            "title": "t",
            "contentType": "raw_uri",
            "content": "https://x.invalid/a.zpl",
        }

    def test_patch_uses_update_body(self, api, transport):
        transport.queue(200, [12])
        api.patch(Client(id=12, enabled=True, version="1"))
        assert transport.last.method == "PATCH"
        assert transport.last.uri == f"{TEST_BASE_URL}/download/clients/12"
        assert json.loads(transport.last.body) == {"enabled": True}

    def test_put_appends_segments(self, api, transport):
        transport.queue(200, None)
        api.put(Tag(name="a b", value="v"), "extra")
        assert transport.last.method == "PUT"
        assert transport.last.uri == f"{TEST_BASE_URL}/account/tag/a%20b/extra"

    def test_delete_requires_child_account(self, api, transport):
        with pytest.raises(MissingChildAccountError):
            api.delete(ApiKey(description="dev"))
        assert transport.calls == []

    def test_delete_as_child(self, api, transport):
        api.set_child_account_by_id(3)
        transport.queue(200, True)
        api.delete(ApiKey(description="dev"))
        assert transport.paths == ["DELETE /account/apikey/dev"]


# =============================================================================
# Responses
# =============================================================================


class TestResponses:
    def test_validate_response_rejects_non_200(self, api, transport):
        transport.queue(404, {"message": "No such printer"}, reason="Not Found")
        response = api.get("/printers/99")

        with pytest.raises(HTTPError) as exc_info:
            api.validate_response(response)
        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == "HTTP Error (404): Not Found"
        assert exc_info.value.to_dict()["status"] == 404

    def test_expect_status(self, api):
        response = make_response(204)
        assert api.expect_status(response, 200, 204) is response
        with pytest.raises(HTTPError):
            api.expect_status(response, 201)

    def test_get_entities_hydrates(self, api, transport):
        transport.queue(200, [{"id": 1, "name": "PC"}])
        assert api.get_entities("/computers", Computer) == [Computer(id=1, name="PC")]

    def test_unexpected_property_in_response(self, api, transport):
        transport.queue(200, {"id": 5, "surprise": True})
        with pytest.raises(UnexpectedFieldError):
            api.get_entities("/computers/5", Computer)


# =============================================================================
# Dynamic accessors
# =============================================================================


class TestAccessors:
    def test_fetch_collection(self, api, transport):
        transport.queue(200, [{"id": 1}])
        assert api.fetch("printers") == [Printer(id=1)]
        assert transport.last.uri == f"{TEST_BASE_URL}/printers?offset=0&limit=10"

    def test_get_accessor_with_identifier(self, api, transport):
        transport.queue(200, [{"id": 1}, {"id": 2}])
        assert api.get_computers("1,2") == [Computer(id=1), Computer(id=2)]
        assert transport.last.uri.startswith(f"{TEST_BASE_URL}/computers/1,2?")

    def test_get_account(self, api, transport):
        transport.queue(200, {"id": 1, "email": "me@example.com"})
        assert api.get_account() == Account(id=1, email="me@example.com")

    def test_identifier_must_be_string(self, api):
        with pytest.raises(InvalidArgumentError):
            api.get_printers(5)

    def test_unknown_accessor(self, api):
        with pytest.raises(NoSuchOperationError):
            api.get_unicorns
        with pytest.raises(NoSuchOperationError):
            api.fetch("unicorns")

    def test_unknown_accessor_is_an_attribute_error(self, api):
        assert not hasattr(api, "get_unicorns")
        with pytest.raises(AttributeError):
            api.something_else


# =============================================================================
# Pagination
# =============================================================================


class TestPagination:
    def test_stops_on_short_page(self, api, transport):
        transport.queue(200, [{"id": 1}, {"id": 2}])
        transport.queue(200, [{"id": 3}])

        items = api.paginate_all("/computers", Computer, limit=2)

        assert [c.id for c in items] == [1, 2, 3]
        assert transport.paths == [
            "GET /computers?offset=0&limit=2",
            "GET /computers?offset=2&limit=2",
        ]

    def test_empty_last_page(self, api, transport):
        transport.queue(200, [{"id": 1}])
        transport.queue(200, [])
        assert len(api.paginate_all("/computers", Computer, limit=1)) == 1
        assert len(transport.calls) == 2

    def test_single_object_page(self, api, transport):
        transport.queue(200, {"id": 1})
        assert api.paginate_all("/computers/1", Computer) == [Computer(id=1)]
