"""
Spill Callback Listener Tests
"""

import asyncio

import httpx
import pytest
from aiohttp import test_utils

from spill.api.server import CallbackServer
from spill.constants import IPP_CONTENT_TYPE, PRINTER_PATH
from spill.errors import ListenerStartupError
from spill.protocol.ipp import ProtocolResponse, encode_request
from spill.protocol.printer import PrinterAttributes


async def _client(server: CallbackServer) -> test_utils.TestClient:
    client = test_utils.TestClient(test_utils.TestServer(server.build_app()))
    await client.start_server()
    return client


class TestHandler:
    """Tests for the IPP request handler via the aiohttp test client."""

    @pytest.mark.asyncio
    async def test_valid_request(self, ipp_body):
        server = CallbackServer()
        client = await _client(server)
        try:
            resp = await client.post(PRINTER_PATH, data=ipp_body)
            body = await resp.read()
        finally:
            await client.close()

        assert resp.status == 200
        assert resp.headers["Content-Type"] == IPP_CONTENT_TYPE
        assert body[0:2] == b"\x02\x00"
        assert body[2:4] == b"\x00\x00"
        assert body[4:8] == b"\x00\x00\x00\x07"

        response = ProtocolResponse.deserialize(body)
        assert response.printer_attributes == tuple(server.printer)
        assert server.stats.requests_handled == 1

    @pytest.mark.asyncio
    async def test_unsupported_version(self):
        server = CallbackServer()
        client = await _client(server)
        try:
            resp = await client.post(PRINTER_PATH, data=encode_request(7, version=(1, 0)))
            body = await resp.read()
        finally:
            await client.close()

        assert resp.status == 400
        assert resp.headers["Content-Type"] != IPP_CONTENT_TYPE
        assert not body.startswith(b"\x02\x00")
        assert server.stats.requests_rejected == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"", b"\x02", b"\x02\x00\x00\x0b\x00\x00\x00"])
    async def test_short_body_rejected(self, body):
        server = CallbackServer()
        client = await _client(server)
        try:
            resp = await client.post(PRINTER_PATH, data=body)
            # Listener keeps serving after a malformed request
            follow_up = await client.post(PRINTER_PATH, data=encode_request(1))
        finally:
            await client.close()

        assert resp.status == 400
        assert follow_up.status == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
    async def test_non_post_rejected(self, method):
        server = CallbackServer()
        client = await _client(server)
        try:
            resp = await client.request(method, PRINTER_PATH)
            body = await resp.read()
        finally:
            await client.close()

        assert resp.status == 405
        assert resp.headers.get("Content-Type") != IPP_CONTENT_TYPE
        assert not body.startswith(b"\x02\x00")
        assert server.stats.requests_rejected == 1

    @pytest.mark.asyncio
    async def test_other_paths_not_served(self, ipp_body):
        client = await _client(CallbackServer())
        try:
            resp = await client.post("/printers/Other", data=ipp_body)
        finally:
            await client.close()

        assert resp.status == 404

    @pytest.mark.asyncio
    async def test_custom_printer_and_path(self, ipp_body):
        printer = PrinterAttributes.from_pairs([("printer-name", "Lobby")])
        server = CallbackServer(path="/ipp/print", printer=printer)
        client = await _client(server)
        try:
            resp = await client.post("/ipp/print", data=ipp_body)
            body = await resp.read()
        finally:
            await client.close()

        assert resp.status == 200
        assert ProtocolResponse.deserialize(body).printer_attributes == (("printer-name", "Lobby"),)

    @pytest.mark.asyncio
    async def test_large_body_accepted(self):
        body = encode_request(9, attributes=b"\x00" * (2 * 1024 * 1024))
        client = await _client(CallbackServer())
        try:
            resp = await client.post(PRINTER_PATH, data=body)
            data = await resp.read()
        finally:
            await client.close()

        assert resp.status == 200
        assert ProtocolResponse.deserialize(data).request_id == 9

    @pytest.mark.asyncio
    async def test_body_over_limit_is_server_error(self):
        server = CallbackServer(max_body_size=64)
        client = await _client(server)
        try:
            resp = await client.post(PRINTER_PATH, data=encode_request(1, attributes=b"\x00" * 256))
            follow_up = await client.post(PRINTER_PATH, data=encode_request(2))
        finally:
            await client.close()

        assert resp.status == 500
        assert resp.headers["Content-Type"] != IPP_CONTENT_TYPE
        assert follow_up.status == 200
        assert server.stats.requests_rejected == 1

    @pytest.mark.asyncio
    async def test_concurrent_requests(self):
        server = CallbackServer()
        client = await _client(server)
        try:
            responses = await asyncio.gather(*[
                client.post(PRINTER_PATH, data=encode_request(i)) for i in range(1, 21)
            ])
            bodies = [await r.read() for r in responses]
        finally:
            await client.close()

        ids = sorted(ProtocolResponse.deserialize(b).request_id for b in bodies)
        assert ids == list(range(1, 21))


class TestLifecycle:
    """Tests for starting and stopping a real listener."""

    @pytest.mark.asyncio
    @pytest.mark.timeout(10)
    async def test_serves_over_tcp(self, unused_tcp_port, ipp_body):
        server = CallbackServer(host="127.0.0.1", port=unused_tcp_port)
        await server.start()
        try:
            assert server.running
            assert server.bound_port == unused_tcp_port

            url = f"http://127.0.0.1:{unused_tcp_port}{PRINTER_PATH}"
            async with httpx.AsyncClient() as client:
                ok = await client.post(url, content=ipp_body)
                not_allowed = await client.get(url)
        finally:
            await server.stop()

        assert ok.status_code == 200
        assert ok.headers["content-type"] == IPP_CONTENT_TYPE
        assert ok.content[4:8] == b"\x00\x00\x00\x07"
        assert not_allowed.status_code == 405
        assert not server.running

    @pytest.mark.asyncio
    async def test_port_in_use_is_fatal(self, unused_tcp_port):
        first = CallbackServer(host="127.0.0.1", port=unused_tcp_port)
        await first.start()
        try:
            second = CallbackServer(host="127.0.0.1", port=unused_tcp_port)
            with pytest.raises(ListenerStartupError):
                await second.start()
            assert not second.running
        finally:
            await first.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        server = CallbackServer()
        await server.stop()
        assert server.bound_port is None
