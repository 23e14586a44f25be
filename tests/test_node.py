"""
Spill Run Lifecycle and CLI Tests
"""

import asyncio

import httpx
import pytest

from spill.cli import build_parser, config_from_args, main
from spill.constants import PRINTER_PATH
from spill.errors import (
    InvalidParameterError,
    InvalidPortError,
    InvalidTargetError,
    ListenerStartupError,
)
from spill.node import SpillNode
from spill.protocol.ipp import encode_request


class CollectingSender:
    def __init__(self):
        self.messages = []

    async def __call__(self, message):
        self.messages.append(message)


class TestSpillNode:
    """Tests for the run orchestration."""

    def test_prepare_builds_messages(self, run_config):
        run_config.target = "10.0.0.0/30"
        run_config.dispatch.target_port = 5353
        messages = SpillNode(run_config).prepare()

        assert [m.destination.address for m in messages] == [
            "10.0.0.0", "10.0.0.1", "10.0.0.2", "10.0.0.3",
        ]
        assert all(m.destination.port == 5353 for m in messages)
        assert messages[0].payload.startswith(b"0 3 http://127.0.0.1:")

    def test_prepare_rejects_invalid_config(self, run_config):
        run_config.listener.callback_host = ""
        with pytest.raises(InvalidParameterError):
            SpillNode(run_config).prepare()

    @pytest.mark.asyncio
    async def test_bad_target_fails_before_listener(self, run_config):
        run_config.target = "not-a-target"
        node = SpillNode(run_config, sender=CollectingSender())
        with pytest.raises(InvalidTargetError):
            await node.run()
        assert node.listener is None

    @pytest.mark.asyncio
    async def test_run_without_waiting(self, run_config):
        sender = CollectingSender()
        node = SpillNode(run_config, sender=sender)

        report = await node.run()

        assert report.sent == 1
        assert [m.destination.address for m in sender.messages] == ["127.0.0.1"]
        assert not node.listener.running
        assert node.status.targets == 1

    @pytest.mark.asyncio
    async def test_listener_failure_is_fatal(self, run_config):
        blocker = SpillNode(run_config)
        await blocker.start_listener()
        sender = CollectingSender()
        try:
            with pytest.raises(ListenerStartupError):
                await SpillNode(run_config, sender=sender).run()
        finally:
            await blocker.listener.stop()
        assert sender.messages == []

    @pytest.mark.asyncio
    @pytest.mark.timeout(10)
    async def test_listener_catches_late_callbacks(self, run_config):
        run_config.wait_forever = True
        node = SpillNode(run_config, sender=CollectingSender())
        task = asyncio.create_task(node.run())

        while node.status.report is None:
            await asyncio.sleep(0.01)

        url = f"http://127.0.0.1:{run_config.listener.port}{PRINTER_PATH}"
        async with httpx.AsyncClient() as client:
            resp = await client.post(url, content=encode_request(42))

        assert not task.done()
        node.stop()
        report = await asyncio.wait_for(task, timeout=5)

        assert resp.status_code == 200
        assert resp.content[4:8] == (42).to_bytes(4, "big")
        assert report.sent == 1
        assert node.listener.stats.requests_handled == 1


class TestCLI:
    """Tests for the command line."""

    def test_defaults(self):
        args = build_parser().parse_args(["--target", "10.0.0.1", "--dest", "10.0.0.2"])
        config = config_from_args(args)
        assert config.target == "10.0.0.1"
        assert config.listener.callback_host == "10.0.0.2"
        assert config.dispatch.target_port == 631
        assert config.listener.port == 12345
        assert config.dispatch.batch_size == 10
        assert config.wait_forever is True

    def test_overrides(self, tmp_path, run_config):
        path = str(tmp_path / "spill.json")
        run_config.save(path)
        args = build_parser().parse_args([
            "-c", path, "-t", "10.0.0.0/24", "-p", "5353", "-b", "50", "--no-wait",
        ])
        config = config_from_args(args)
        assert config.target == "10.0.0.0/24"
        assert config.dispatch.target_port == 5353
        assert config.dispatch.batch_size == 50
        assert config.listener.port == run_config.listener.port
        assert config.wait_forever is False

    def test_bad_port(self):
        args = build_parser().parse_args(["-t", "10.0.0.1", "-d", "10.0.0.2", "-p", "http"])
        with pytest.raises(InvalidPortError):
            config_from_args(args)

    def test_main_missing_target(self):
        assert main(["--no-banner", "--dest", "10.0.0.2"]) == 1

    def test_main_bad_port(self):
        assert main(["--no-banner", "-t", "10.0.0.1", "-d", "10.0.0.2", "--destport", "0"]) == 1

    def test_main_config_with_bad_types(self, tmp_path):
        path = tmp_path / "spill.json"
        path.write_text('{"target": "127.0.0.1", "dispatch": {"batch_size": "many"}}')
        assert main(["--no-banner", "--no-wait", "-d", "127.0.0.1", "--config", str(path)]) == 1

    def test_main_bad_target(self, unused_tcp_port):
        assert main([
            "--no-banner", "-t", "nowhere", "-d", "127.0.0.1",
            "--listen", "127.0.0.1", "--destport", str(unused_tcp_port), "--no-wait",
        ]) == 1

    @pytest.mark.timeout(10)
    def test_main_loopback_run(self, unused_tcp_port, unused_udp_port, capsys):
        code = main([
            "-t", "127.0.0.1", "-p", str(unused_udp_port),
            "-d", "127.0.0.1", "--listen", "127.0.0.1",
            "--destport", str(unused_tcp_port), "--no-wait",
        ])
        assert code == 0
        assert "Spill" in capsys.readouterr().out
