"""QR code rendering for share URLs."""
import base64
from io import BytesIO

import qrcode
import qrcode.constants


def qr_code_data_url(url: str) -> str:
    """Render ``url`` as a PNG QR code and return it as a data URL."""
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=8,
        border=4,
    )
    qr.add_data(url)
    qr.make(fit=True)
    img = qr.make_image(fill_color='black', back_color='white')
    buffer = BytesIO()
    img.save(buffer, format='PNG')
    encoded = base64.b64encode(buffer.getvalue()).decode('ascii')
    return f'data:image/png;base64,{encoded}'
