"""Shared test fixtures for prosafe."""

import struct

import pytest


def build_reply(records, end=True, result=0):
    """Build a switch reply from (tag, payload) pairs."""
    data = b"\x01\x02" + struct.pack(">HH", result, 0) + b"\x00" * 26
    for tag, payload in records:
        data += struct.pack(">HH", tag, len(payload)) + payload
    if end:
        data += struct.pack(">HH", 0xFFFF, 0)
    return data


def port_payload(port_no, counters):
    """Build a 49-byte port statistics payload."""
    return bytes([port_no]) + struct.pack(">6Q", *counters)


@pytest.fixture
def make_reply():
    """Return a builder for raw switch replies."""
    return build_reply


@pytest.fixture
def make_port_payload():
    """Return a builder for port statistics payloads."""
    return port_payload


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    """Run every test in an empty directory so no stray prosafe.toml is read."""
    monkeypatch.chdir(tmp_path)
