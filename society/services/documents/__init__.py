"""Printable receipts and notices."""

from society.services.documents.formatting import (
    format_amount,
    format_long_date,
    format_short_date,
    parse_timestamp,
)
from society.services.documents.pdf_documents import (
    DocumentRenderError,
    DocumentRenderer,
    notice_filename,
    receipt_filename,
    receipt_number,
)

__all__ = [
    "DocumentRenderError",
    "DocumentRenderer",
    "format_amount",
    "format_long_date",
    "format_short_date",
    "notice_filename",
    "parse_timestamp",
    "receipt_filename",
    "receipt_number",
]
