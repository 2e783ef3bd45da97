"""Business services for the event site."""

from eventsite.app.services.log_export import LOG_CSV_HEADER, logs_to_csv, serialize_log
from eventsite.app.services.qr import render_qr

__all__ = [
    "LOG_CSV_HEADER",
    "logs_to_csv",
    "serialize_log",
    "render_qr",
]
