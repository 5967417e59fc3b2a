"""Tests for Prometheus exposition of switch statistics."""

from unittest.mock import MagicMock, patch

import pytest

from prosafe import __version__
from prosafe.errors import MalformedHeader, NoResponse
from prosafe.interface import InterfaceAddress
from prosafe.metrics import parse_target, probe, probe_targets, render
from prosafe.types import LinkSpeed, PortStat, SpeedStat

PORT_STATS = [
    PortStat(port_no=1, recv_bytes=122379777938, send_bytes=145970553284, error_pkts=0),
    PortStat(port_no=2, recv_bytes=10, send_bytes=20, error_pkts=3),
]
SPEED_STATS = [
    SpeedStat(port_no=1, link=LinkSpeed.SPEED_1GBPS),
    SpeedStat(port_no=2, link=LinkSpeed.NONE),
]


@pytest.fixture
def mock_switch():
    """Patch ProSafeSwitch, yielding the mock class."""
    with patch("prosafe.metrics.ProSafeSwitch") as cls:
        cls.return_value.port_stats.return_value = PORT_STATS
        cls.return_value.speed_stats.return_value = SPEED_STATS
        yield cls


class TestParseTarget:
    def test_host_and_interface(self):
        assert parse_target("192.168.0.239:eth0") == ("192.168.0.239", "eth0")

    def test_no_colon(self):
        assert parse_target("192.168.0.239") is None


class TestProbe:
    def test_port_metrics(self, mock_switch):
        registry = probe("192.168.0.239:eth0", timeout=0.5)

        mock_switch.assert_called_once_with("192.168.0.239", "eth0", timeout=0.5)
        assert registry.get_sample_value("prosafe_up") == 1.0
        assert registry.get_sample_value(
            "prosafe_receive_bytes_total", {"port": "1"}) == 122379777938.0
        assert registry.get_sample_value(
            "prosafe_transmit_bytes_total", {"port": "1"}) == 145970553284.0
        assert registry.get_sample_value(
            "prosafe_error_packets_total", {"port": "2"}) == 3.0

    def test_link_speed(self, mock_switch):
        registry = probe("192.168.0.239:eth0")
        assert registry.get_sample_value("prosafe_link_speed", {"port": "1"}) == 1000.0
        assert registry.get_sample_value("prosafe_link_speed", {"port": "2"}) == 0.0

    def test_instance_label(self, mock_switch):
        registry = probe("sw1:eth0", instance_label=True)
        assert registry.get_sample_value("prosafe_up", {"instance": "sw1:eth0"}) == 1.0
        assert registry.get_sample_value(
            "prosafe_receive_bytes_total", {"instance": "sw1:eth0", "port": "2"}) == 10.0

    def test_build_info(self, mock_switch):
        registry = probe("sw1:eth0")
        text = render(registry).decode()
        assert "prosafe_build_info{" in text
        assert f'version="{__version__}"' in text

    def test_port_stats_failure_sets_up_zero(self, mock_switch, capsys):
        mock_switch.return_value.port_stats.side_effect = NoResponse("No reply from 'sw1'")
        registry = probe("sw1:eth0")

        assert registry.get_sample_value("prosafe_up") == 0.0
        assert registry.get_sample_value("prosafe_receive_bytes_total", {"port": "1"}) is None
        # Speed statistics are still reported.
        assert registry.get_sample_value("prosafe_link_speed", {"port": "1"}) == 1000.0
        assert "Fail to access: No reply from 'sw1'" in capsys.readouterr().err

    def test_speed_stats_failure_keeps_up(self, mock_switch, capsys):
        mock_switch.return_value.speed_stats.side_effect = MalformedHeader("bad magic")
        registry = probe("sw1:eth0")

        assert registry.get_sample_value("prosafe_up") == 1.0
        assert registry.get_sample_value("prosafe_link_speed", {"port": "1"}) is None
        assert "Fail to access: bad magic" in capsys.readouterr().err

    def test_target_without_interface(self, mock_switch):
        registry = probe("sw1")
        mock_switch.assert_not_called()
        assert registry.get_sample_value("prosafe_receive_bytes_total", {"port": "1"}) is None

    def test_fresh_registry_per_probe(self, mock_switch):
        first = probe("sw1:eth0")
        mock_switch.return_value.port_stats.return_value = PORT_STATS[1:]
        second = probe("sw2:eth0")

        assert first is not second
        assert first.get_sample_value("prosafe_receive_bytes_total", {"port": "1"}) is not None
        assert second.get_sample_value("prosafe_receive_bytes_total", {"port": "1"}) is None

    def test_holds_interface_lock(self, mock_switch):
        held = []

        def port_stats():
            from prosafe.client import interface_lock
            held.append(interface_lock("eth3").locked())
            return []

        mock_switch.return_value.port_stats.side_effect = port_stats
        probe("sw1:eth3")
        assert held == [True]

    def test_verbose(self, mock_switch, capsys):
        probe("sw1:eth0", verbose=True)
        assert "Access to switch: sw1 through eth0" in capsys.readouterr().err


class TestRender:
    def test_text_format(self, mock_switch):
        text = render(probe("sw1:eth0")).decode()
        assert "# HELP prosafe_up The last query is successful." in text
        assert "# TYPE prosafe_link_speed gauge" in text
        assert 'prosafe_receive_bytes_total{port="2"} 10.0' in text


class TestProbeTargets:
    def test_single_registry(self, mock_switch):
        registry = probe_targets(["sw1:eth0", "sw2:eth1"], instance_label=True)

        assert registry.get_sample_value("prosafe_up", {"instance": "sw1:eth0"}) == 1.0
        assert registry.get_sample_value("prosafe_up", {"instance": "sw2:eth1"}) == 1.0
        text = render(registry).decode()
        assert text.count("# TYPE prosafe_up gauge") == 1

    def test_empty(self, mock_switch):
        registry = probe_targets([])
        mock_switch.assert_not_called()
        assert registry.get_sample_value("prosafe_up") is None

    def test_failing_switch_only_affects_itself(self, mock_switch, capsys):
        def make_switch(host, if_name, timeout):
            switch = MagicMock()
            if host == "sw1":
                switch.port_stats.side_effect = NoResponse("No reply from 'sw1'")
            else:
                switch.port_stats.return_value = PORT_STATS
            switch.speed_stats.return_value = SPEED_STATS
            return switch

        mock_switch.side_effect = make_switch
        registry = probe_targets(["sw1:eth0", "sw2:eth0"], instance_label=True)

        assert registry.get_sample_value("prosafe_up", {"instance": "sw1:eth0"}) == 0.0
        assert registry.get_sample_value("prosafe_up", {"instance": "sw2:eth0"}) == 1.0
        assert registry.get_sample_value(
            "prosafe_receive_bytes_total", {"instance": "sw2:eth0", "port": "2"}) == 10.0


class TestUnresolvableTarget:
    """Bad hostnames go through the real query path and must only mark the target down."""

    @pytest.mark.parametrize("hostname", ["sw1..lan", "x" * 64 + ".lan"])
    def test_marks_target_down(self, hostname, make_reply, capsys):
        def replying_socket(*args, **kwargs):
            sock = MagicMock()
            sock.__enter__.return_value = sock
            sock.recvfrom.return_value = (make_reply([]), ("192.168.0.239", 63322))
            return sock

        iface = InterfaceAddress(ipv4="10.0.0.5", mac=b"\x00\x11\x22\x33\x44\x55")
        with patch("prosafe.client.resolve", return_value=iface), \
                patch("prosafe.transport.socket.socket", side_effect=replying_socket):
            registry = probe_targets(
                [f"{hostname}:eth0", "192.168.0.239:eth0"], instance_label=True)

        assert registry.get_sample_value(
            "prosafe_up", {"instance": f"{hostname}:eth0"}) == 0.0
        assert registry.get_sample_value(
            "prosafe_up", {"instance": "192.168.0.239:eth0"}) == 1.0
        assert "Fail to access" in capsys.readouterr().err
