"""QR code rendering for attendee badges."""

import io

import qrcode
from qrcode.image.pure import PyPNGImage
from qrcode.image.svg import SvgPathImage

from eventsite.app.core.config import settings
from eventsite.app.exceptions import InvalidInputError

# format -> (image factory, media type)
QR_FORMATS = {
    "png": (PyPNGImage, "image/png"),
    "svg": (SvgPathImage, "image/svg+xml"),
}


def render_qr(data: str, fmt: str = "png") -> tuple[bytes, str]:
    """Render `data` as a QR code image.

    Args:
        data: Payload to encode (the attendee's employee ID)
        fmt: "png" or "svg"

    Returns:
        Tuple of (image bytes, media type)

    Raises:
        InvalidInputError: If the format is not supported
    """
    try:
        image_factory, media_type = QR_FORMATS[fmt.lower()]
    except KeyError:
        raise InvalidInputError(f"Unsupported QR format: {fmt}")

    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=settings.qr_box_size,
        border=settings.qr_border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    buffer = io.BytesIO()
    qr.make_image(image_factory=image_factory).save(buffer)
    return buffer.getvalue(), media_type
