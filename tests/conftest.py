"""
Spill Test Fixtures
"""

import pytest

from spill.config import SpillConfig
from spill.constants import PRINTER_PATH
from spill.core.types import CallbackAddress, Destination, OutboundMessage
from spill.protocol.ipp import encode_request
from spill.protocol.printer import PrinterAttributes


@pytest.fixture
def callback() -> CallbackAddress:
    """Callback address used by the encoder tests."""
    return CallbackAddress(host="10.0.0.5", port=12345, path=PRINTER_PATH)


@pytest.fixture
def printer() -> PrinterAttributes:
    return PrinterAttributes.default()


@pytest.fixture
def make_messages():
    """Factory for n messages to 10.1.0.x with a payload naming the index."""
    def factory(count: int, port: int = 631):
        return [
            OutboundMessage(
                destination=Destination(address=f"10.1.{i // 256}.{i % 256}", port=port),
                payload=f"msg-{i}".encode(),
            )
            for i in range(count)
        ]
    return factory


@pytest.fixture
def target_file(tmp_path):
    """Write target lines to a file and return its path."""
    def writer(*lines: str, name: str = "targets.txt") -> str:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return str(path)
    return writer


@pytest.fixture
def ipp_body() -> bytes:
    """Valid IPP 2.0 Get-Printer-Attributes request with request id 7."""
    return encode_request(request_id=7)


@pytest.fixture
def run_config(unused_tcp_port) -> SpillConfig:
    """Config for a loopback run that does not wait for callbacks."""
    config = SpillConfig(target="127.0.0.1", wait_forever=False)
    config.listener.host = "127.0.0.1"
    config.listener.port = unused_tcp_port
    config.listener.callback_host = "127.0.0.1"
    return config
