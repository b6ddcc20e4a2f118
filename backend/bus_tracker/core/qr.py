"""QR codes pointing passengers at a stop's arrivals page."""

import base64
from io import BytesIO

import qrcode

from bus_tracker.config import settings

DARK_COLOR = "#1a1a2e"
LIGHT_COLOR = "#ffffff"


def stop_url(stop_id: int, base_url: str | None = None) -> str:
    """Passenger frontend URL opened when the stop's QR code is scanned."""
    base = (base_url or settings.passenger_frontend_url).rstrip("/")
    return f"{base}/stop/{stop_id}"


def qr_data_url(data: str, box_size: int = 10, border: int = 2) -> str:
    """Render ``data`` as a QR code and return it as a PNG data URL."""
    qr = qrcode.QRCode(box_size=box_size, border=border)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color=DARK_COLOR, back_color=LIGHT_COLOR).convert("RGB")

    buf = BytesIO()
    img.save(buf, format="PNG")
    encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
