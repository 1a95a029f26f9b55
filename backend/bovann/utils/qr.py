"""
QR credential codec.

The scannable string is the base64 of a compact JSON object::

    {"studentId": ..., "totalAmount": ..., "validFrom": ..., "validUntil": ..., "status": ...}

``render_qr_image`` turns that string into a PNG data URL for printing.
"""
import base64
import binascii
import json
from io import BytesIO

import qrcode

from bovann.utils.errors import InvalidPayload
from bovann.utils.validators import parse_iso_datetime

PAYLOAD_FIELDS = ("studentId", "totalAmount", "validFrom", "validUntil", "status")


def encode_payload(student_id, total_amount, valid_from, valid_until, status):
    payload = {
        "studentId": student_id,
        "totalAmount": total_amount,
        "validFrom": valid_from.isoformat(),
        "validUntil": valid_until.isoformat(),
        "status": status,
    }
    raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_payload(qr_data):
    """
    Decode a scanned string back into a payload dict with parsed datetimes.
    Raises InvalidPayload for anything that is not a well-formed credential.
    """
    if not isinstance(qr_data, str) or not qr_data.strip():
        raise InvalidPayload("QR data is required")

    try:
        raw = base64.b64decode(qr_data.strip(), validate=True)
        parsed = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError):
        raise InvalidPayload()

    if not isinstance(parsed, dict) or any(field not in parsed for field in PAYLOAD_FIELDS):
        raise InvalidPayload()

    total_amount = parsed["totalAmount"]
    if isinstance(total_amount, bool) or not isinstance(total_amount, (int, float)):
        raise InvalidPayload()

    try:
        valid_from = parse_iso_datetime(parsed["validFrom"])
        valid_until = parse_iso_datetime(parsed["validUntil"], end_of_day=True)
    except ValueError:
        raise InvalidPayload()

    return {
        "studentId": str(parsed["studentId"]),
        "totalAmount": total_amount,
        "validFrom": valid_from,
        "validUntil": valid_until,
        "status": str(parsed["status"]),
    }


def render_qr_image(data):
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = BytesIO()
    img.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
