"""Tests for the SDK layer, against a fake transport."""

import json

import pytest

from printnode_cli.core.errors import (
    HTTPError,
    InvalidArgumentError,
    MissingChildAccountError,
    PrintNodeError,
)
from printnode_cli.core.message import Response
from printnode_cli.core.types import Account, ChildAccount, Client, Download, Printer, PrintJob, Scale, Whoami

PRINTER = {"id": 34, "name": "Laser", "computer": {"id": 12, "name": "PC"}, "state": "online"}
PRINT_JOB = {"id": 42, "printer": PRINTER, "title": "Invoice", "contentType": "pdf_uri", "state": "new"}


class TestAccount:
    def test_whoami(self, client, transport):
        transport.queue(200, {"id": 1, "email": "me@example.com", "numComputers": 2, "Tags": {}, "ApiKeys": []})

        me = client.account.whoami()

        assert isinstance(me, Whoami)
        assert me.num_computers == 2
        assert transport.paths == ["GET /whoami?offset=0&limit=10"]

    def test_create_child(self, client, transport):
        transport.queue(200, {"Account": {"id": 77, "email": "kid@example.com"}, "ApiKeys": {"dev": "k1"}, "Tags": {}})

        child = client.account.create_child(
            Account(firstname="Kid", lastname="Doe", email="kid@example.com", password="pw12345"),
            api_keys=["dev"],
            tags={"plan": "basic"},
        )

        assert isinstance(child, ChildAccount)
        assert child.account.id == 77
        assert child.api_keys == {"dev": "k1"}
        assert transport.paths == ["POST /account"]
        assert json.loads(transport.last.body) == {
            "Account": {"firstname": "Kid", "lastname": "Doe", "email": "kid@example.com", "password": "pw12345"},
            "ApiKeys": ["dev"],
            "Tags": {"plan": "basic"},
        }

    def test_update(self, client, transport):
        client.act_as(email="kid@example.com")
        transport.queue(200, None)

        client.account.update(Account(firstname="New", credits=5))

        assert transport.paths == ["PATCH /account"]
        assert json.loads(transport.last.body) == {"firstname": "New"}
        assert ("X-Child-Account-By-Email", "kid@example.com") in transport.last_headers

    def test_delete_needs_child(self, client, transport):
        with pytest.raises(MissingChildAccountError):
            client.account.delete()

        client.act_as(child_id=77)
        transport.queue(200, True)
        assert client.account.delete() is True
        assert transport.paths == ["DELETE /account"]

    def test_act_as_self(self, client):
        client.act_as(creator_ref="ref-1")
        client.act_as_self()
        assert client.api.credentials.child_account is None

    def test_client_key(self, client, transport):
        transport.queue(200, "ck-123")
        assert client.account.client_key("0a756864", "printnode", "4.7.1") == "ck-123"
        assert transport.paths == ["GET /client/key/0a756864?edition=printnode&version=4.7.1&offset=0&limit=10"]


class TestApiKeysAndTags:
    def test_api_key_lifecycle(self, client, transport):
        transport.queue(201, "new-key")
        assert client.api_keys.create("dev key") == "new-key"

        transport.queue(200, "new-key")
        assert client.api_keys.get("dev key") == "new-key"

        client.act_as(child_id=3)
        transport.queue(200, True)
        client.api_keys.delete("dev key")

        assert transport.paths == [
            "POST /account/apikey/dev%20key",
            "GET /account/apikey/dev%20key?offset=0&limit=10",
            "DELETE /account/apikey/dev%20key",
        ]

    def test_tag_set_sends_value(self, client, transport):
        transport.queue(201, "Tag Created")
        client.tags.set("colour", "blue")
        assert transport.paths == ["POST /account/tag/colour"]
        assert transport.last.body == '"blue"'

    def test_tag_delete_needs_child(self, client):
        with pytest.raises(MissingChildAccountError):
            client.tags.delete("colour")


class TestComputers:
    def test_list_with_set(self, client, transport):
        transport.queue(200, [{"id": 1}, {"id": 2}])
        computers = client.computers.list([1, 2], limit=5)
        assert [c.id for c in computers] == [1, 2]
        assert transport.paths == ["GET /computers/1,2?offset=0&limit=5"]

    def test_get_missing(self, client, transport):
        transport.queue(200, [])
        with pytest.raises(PrintNodeError, match="Computer 9 not found"):
            client.computers.get(9)

    def test_printers_of_computers(self, client, transport):
        transport.queue(200, [PRINTER])
        printers = client.computers.printers("12,13", [34])
        assert isinstance(printers[0], Printer)
        assert transport.paths == ["GET /computers/12,13/printers/34?offset=0&limit=10"]

    @pytest.mark.parametrize(
        "args,path",
        [
            ((12,), "/computer/12/scales"),
            ((12, "PSC Scale"), "/computer/12/scales/PSC%20Scale"),
            ((12, "PSC Scale", 0), "/computer/12/scale/PSC%20Scale/0"),
        ],
    )
    def test_scales(self, client, transport, args, path):
        transport.queue(200, [{"deviceName": "PSC Scale", "deviceNum": 0, "mass": [1000, None], "computerId": 12}])
        scales = client.computers.scales(*args)
        assert scales == [Scale(device_name="PSC Scale", device_num=0, mass=[1000, None], computer_id=12)]
        assert transport.paths == [f"GET {path}?offset=0&limit=10"]

    def test_scale_number_needs_name(self, client, transport):
        with pytest.raises(InvalidArgumentError):
            client.computers.scales(12, device_number=0)
        assert transport.calls == []

    def test_list_all_paginates(self, client, transport):
        transport.queue(200, [{"id": n} for n in range(100)])
        transport.queue(200, [{"id": 100}])
        assert len(client.computers.list_all()) == 101
        assert transport.paths[1] == "GET /computers?offset=100&limit=100"


class TestPrinters:
    def test_get(self, client, transport):
        transport.queue(200, [PRINTER])
        printer = client.printers.get(34)
        assert printer.computer.name == "PC"
        assert transport.paths == ["GET /printers/34?offset=0&limit=10"]

    def test_list_bad_set(self, client, transport):
        with pytest.raises(InvalidArgumentError):
            client.printers.list(printer_set=[])
        assert transport.calls == []

    def test_http_error_propagates(self, client, transport):
        transport.queue(401, {"message": "API Key not found"}, reason="Unauthorized")
        with pytest.raises(HTTPError) as exc_info:
            client.printers.list()
        assert exc_info.value.status_code == 401
        assert "API Key not found" in exc_info.value.to_dict()["body"]


class TestPrintJobs:
    def test_create_returns_response(self, client, transport):
        transport.queue(201, 42, reason="Created")
        job = PrintJob(printer_id=34, title="Invoice")
        job.attach_url("https://example.invalid/invoice.pdf")

        response = client.print_jobs.create(job)

        assert isinstance(response, Response)
        assert response.decoded_content() == 42
        assert transport.paths == ["POST /printjobs"]

    def test_create_return_object(self, client, transport):
        transport.queue(201, 42, reason="Created")
        transport.queue(200, [PRINT_JOB])

        job = client.print_jobs.create(PrintJob(printer_id=34, content_type="pdf_uri", content="u"), return_object=True)

        assert isinstance(job, PrintJob)
        assert job.id == 42
        assert job.printer.id == 34
        assert transport.paths == ["POST /printjobs", "GET /printjobs/42?offset=0&limit=10"]

    def test_create_rejects_non_201(self, client, transport):
        transport.queue(200, 42)
        with pytest.raises(HTTPError):
            client.print_jobs.create(PrintJob(printer_id=34))

    def test_list_for_printers(self, client, transport):
        transport.queue(200, [PRINT_JOB])
        client.print_jobs.list(print_job_set=[42, 43], printer_set=34)
        assert transport.paths == ["GET /printers/34/printjobs/42,43?offset=0&limit=10"]

    def test_states(self, client, transport):
        transport.queue(200, [[{"printJobId": 42, "state": "new", "age": 0}], [{"printJobId": 43, "state": "done"}]])
        states = client.print_jobs.states([42, 43])
        assert [s[0].print_job_id for s in states] == [42, 43]
        assert transport.paths == ["GET /printjobs/42,43/states?offset=0&limit=10"]

    def test_iterate(self, client, transport):
        transport.queue(200, [PRINT_JOB])
        assert [j.id for j in client.print_jobs.iterate(limit=5)] == [42]


class TestDownloads:
    def test_clients(self, client, transport):
        transport.queue(200, [{"id": 1, "enabled": True, "os": "windows", "version": "4.7.1"}])
        clients = client.downloads.clients()
        assert clients == [Client(id=1, enabled=True, os="windows", version="4.7.1")]

    def test_latest(self, client, transport):
        transport.queue(200, {"os": "osx", "version": "4.7.1", "url": "https://dl.example.invalid/pn.dmg"})
        download = client.downloads.latest("OSX", edition="printnode")
        assert isinstance(download, Download)
        assert transport.paths == ["GET /download/client/osx?edition=printnode&offset=0&limit=10"]

    def test_set_enabled(self, client, transport):
        transport.queue(200, [12])
        client.downloads.set_enabled(12, False)
        assert transport.paths == ["PATCH /download/clients/12"]
        assert json.loads(transport.last.body) == {"enabled": False}
