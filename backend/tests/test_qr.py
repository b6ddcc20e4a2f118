"""Tests for stop QR code generation."""

import base64

from bus_tracker.core.qr import qr_data_url, stop_url


def test_stop_url():
    assert stop_url(12, base_url="https://bus.example.com") == "https://bus.example.com/stop/12"
    assert stop_url(12, base_url="https://bus.example.com/") == "https://bus.example.com/stop/12"


def test_qr_data_url_is_png():
    data_url = qr_data_url("https://bus.example.com/stop/12")
    prefix = "data:image/png;base64,"
    assert data_url.startswith(prefix)
    png = base64.b64decode(data_url[len(prefix):])
    assert png[:8] == b"\x89PNG\r\n\x1a\n"
