"""Tests for printable documents, formatting and photo encoding."""

from datetime import date
from decimal import Decimal
from io import BytesIO

import pytest
from PIL import Image

from conftest import make_member, make_payment
from society.services.documents import (
    DocumentRenderer,
    DocumentRenderError,
    format_amount,
    format_long_date,
    format_short_date,
    notice_filename,
    receipt_filename,
    receipt_number,
)
from society.services.image import PhotoError, PhotoService


class TestFormatting:
    """Tests for amount and date formatting."""

    @pytest.mark.parametrize("amount, expected", [
        (Decimal("0"), "0"),
        (Decimal("2500"), "2,500"),
        (Decimal("100000"), "1,00,000"),
        (Decimal("12345678"), "1,23,45,678"),
        (Decimal("1800.5"), "1,800.50"),
        (Decimal("-700"), "-700"),
        (999, "999"),
    ])
    def test_format_amount(self, amount, expected):
        assert format_amount(amount) == expected

    def test_format_amount_beyond_default_precision(self):
        formatted = format_amount(Decimal("1e30"))
        assert formatted.startswith("10,00,00")
        assert formatted.endswith(",000")
        assert format_amount(Decimal("-1e30")).startswith("-10,00,00")

    def test_short_date_from_iso(self):
        assert format_short_date("2024-03-05T10:01:00+00:00") == "05/03/2024"
        assert format_short_date("2024-03-05T10:01:00.000Z") == "05/03/2024"

    def test_long_date(self):
        assert format_long_date(date(2026, 10, 9)) == "9 October 2026"


class TestReceipt:
    """Tests for maintenance receipts."""

    @pytest.fixture
    def renderer(self, society_settings):
        return DocumentRenderer(society_settings)

    def test_receipt_fields(self, renderer):
        payment = make_payment(
            id="a1b2c3d4-0000-4000-8000-000000000000",
            member_name="A. Rao",
            month="2024-03",
            amount="2500",
            date="2024-03-05T10:01:00+00:00",
        )
        fields = dict(renderer.receipt_fields(payment))

        assert fields["Receipt No:"] == "A1B2C3D4"
        assert fields["Date:"] == "05/03/2024"
        assert fields["Received From:"] == "A. Rao"
        assert fields["For Month:"] == "2024-03"
        assert fields["Amount:"] == "Rs. 2,500"

    def test_receipt_uses_snapshot_name(self, renderer):
        payment = make_payment(member_name="Name At Payment Time")
        assert dict(renderer.receipt_fields(payment))["Received From:"] == "Name At Payment Time"

    def test_render_receipt_is_pdf(self, renderer):
        pdf = renderer.render_receipt(make_payment())
        assert pdf.startswith(b"%PDF")

    def test_render_receipt_escapes_markup(self, renderer):
        pdf = renderer.render_receipt(make_payment(member_name="Rao & Sons <HUF>"))
        assert pdf.startswith(b"%PDF")

    def test_filenames(self):
        payment = make_payment(id="a1b2c3d4e5", month="2024-03")
        assert receipt_number(payment) == "A1B2C3D4"
        assert receipt_filename(payment) == "receipt_A1B2C3D4_2024-03.pdf"
        assert notice_filename(make_member(flat_number="B/101")) == "demand_notice_flat_B_101.pdf"


class TestLegalNotice:
    """Tests for demand notices."""

    @pytest.fixture
    def renderer(self, society_settings):
        return DocumentRenderer(society_settings)

    def test_notice_text(self, renderer):
        paragraphs = renderer.notice_paragraphs(make_member(), Decimal("5000"))
        text = " ".join(paragraphs)
        assert "Rs. 5,000" in text
        assert "within 7 days" in text

    def test_render_with_default_dues(self, renderer):
        pdf = renderer.render_legal_notice(make_member(), on=date(2026, 10, 19))
        assert pdf.startswith(b"%PDF")

    def test_render_with_explicit_dues(self, renderer):
        pdf = renderer.render_legal_notice(make_member(), dues=Decimal("12000"))
        assert pdf.startswith(b"%PDF")

    def test_negative_dues_rejected(self, renderer):
        with pytest.raises(DocumentRenderError):
            renderer.render_legal_notice(make_member(), dues=Decimal("-1"))


def _image_bytes(fmt: str = "PNG", size=(800, 600), mode="RGBA") -> bytes:
    buffer = BytesIO()
    Image.new(mode, size, color=(200, 30, 30, 255) if mode == "RGBA" else (200, 30, 30)).save(
        buffer, format=fmt
    )
    return buffer.getvalue()


class TestPhotoService:
    """Tests for member photo thumbnails."""

    def test_encode_shrinks_to_thumbnail(self):
        service = PhotoService(max_size=128)
        data_url = service.encode(_image_bytes(), "image/png")

        assert data_url.startswith("data:image/jpeg;base64,")
        thumb = Image.open(BytesIO(PhotoService.decode(data_url)))
        assert thumb.format == "JPEG"
        assert max(thumb.size) == 128

    def test_encode_jpeg(self):
        data_url = PhotoService().encode(_image_bytes("JPEG", (100, 50), "RGB"), "image/jpeg")
        thumb = Image.open(BytesIO(PhotoService.decode(data_url)))
        assert thumb.size == (100, 50)

    def test_rejects_unsupported_type(self):
        with pytest.raises(PhotoError):
            PhotoService().encode(_image_bytes(), "application/pdf")

    def test_rejects_empty_upload(self):
        with pytest.raises(PhotoError):
            PhotoService().encode(b"", "image/png")

    def test_rejects_non_image_bytes(self):
        with pytest.raises(PhotoError):
            PhotoService().encode(b"definitely not a png", "image/png")
