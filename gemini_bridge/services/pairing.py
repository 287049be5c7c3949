import base64
import io
import logging
from typing import Optional

import qrcode
import qrcode.image.svg

logger = logging.getLogger(__name__)


PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta http-equiv="X-UA-Compatible" content="IE=edge">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>WhatsApp QR Code</title>
</head>
<body>
    <h1>Scan the QR Code to Connect to WhatsApp</h1>
    <img src="{data_url}" alt="QR Code" />
</body>
</html>
"""


def qr_data_url(code: str) -> str:
    img = qrcode.make(code, image_factory=qrcode.image.svg.SvgPathImage)
    buf = io.BytesIO()
    img.save(buf)
    encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


def render_qr_page(code: str) -> str:
    if not code:
        raise ValueError("empty pairing code")
    return PAGE_TEMPLATE.format(data_url=qr_data_url(code))


class PairingPage:
    """
    Holds the most recently rendered pairing page.
    Each new pairing code replaces the previous page.
    """

    def __init__(self):
        self._html: Optional[str] = None

    @property
    def html(self) -> Optional[str]:
        return self._html

    @property
    def available(self) -> bool:
        return self._html is not None

    def publish(self, code: str) -> bool:
        logger.info("QR code received. Generating QR...")
        try:
            html = render_qr_page(code)
        except Exception:
            logger.exception("Error generating QR code")
            return False

        self._html = html
        logger.info("QR code page generated. Open / to scan.")
        return True
