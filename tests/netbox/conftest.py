#!/usr/bin/env python3

"""Shared fixtures for NetBox client contract tests."""

from __future__ import annotations

import pytest

from netbox_fakes import RecordingTransport
from netboxkit.netbox.client import NetboxClient


@pytest.fixture
def client() -> NetboxClient:
    """Create test client.

    Returns:
        NetboxClient: Initialized client.
    """
    return NetboxClient(url="https://netbox.example.com", token="token-secret", timeout=1)


@pytest.fixture
def transport(client: NetboxClient, monkeypatch: pytest.MonkeyPatch) -> RecordingTransport:
    """Replace the request layer of ``client`` with a recorder.

    Args:
        client: NetBox client fixture.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        RecordingTransport: Recorder with an empty response queue.
    """
    recorder = RecordingTransport()
    monkeypatch.setattr(client, "_request", recorder)
    return recorder
