import base64
from io import BytesIO
from typing import Dict
from urllib.parse import parse_qsl, quote, urlencode, urlsplit

import qrcode

from . import config
from .errors import InternalError


def build_upi_uri(
    amount: int,
    *,
    payee: str = config.UPI_PAYEE,
    payee_name: str = config.UPI_PAYEE_NAME,
    note: str = config.UPI_NOTE,
    currency: str = config.UPI_CURRENCY,
) -> str:
    """UPI payment request, e.g. upi://pay?pa=x@bank&pn=Name&am=500&cu=INR."""
    query = urlencode(
        [
            ("pa", payee),
            ("pn", payee_name),
            ("am", str(amount)),
            ("cu", currency),
            ("tn", note),
        ],
        quote_via=quote,
        safe="@",
    )
    return f"upi://pay?{query}"


def parse_upi_uri(uri: str) -> Dict[str, str]:
    parts = urlsplit(uri)
    if parts.scheme != "upi" or parts.netloc != "pay":
        raise ValueError(f"not a UPI payment uri: {uri!r}")
    return dict(parse_qsl(parts.query, keep_blank_values=True))


def qr_png(data: str) -> bytes:
    img = qrcode.make(data)
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def qr_data_uri(data: str) -> str:
    try:
        png = qr_png(data)
    except Exception as e:
        raise InternalError("QR encoding failed") from e
    return "data:image/png;base64," + base64.b64encode(png).decode()
