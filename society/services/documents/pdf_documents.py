"""
Printable Documents

Renders the two documents the committee hands out:
1. Maintenance receipt for a single payment
2. Formal demand notice for a member with outstanding dues

Both are built with reportlab and returned as PDF bytes, ready for
download or printing.

DESIGN DECISION: The receipt prints payment.member_name, the name captured
when the payment was recorded, never the member's current name. An old
receipt reprinted today must match the one handed out back then.

The dues printed on a notice are supplied by the caller (the configured
placeholder by default). No dues calculation happens here.
"""

import io
from datetime import date
from decimal import Decimal
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from society.config import SocietySettings, get_settings
from society.models import Member, Payment
from society.services.documents.formatting import (
    format_amount,
    format_long_date,
    format_short_date,
)

# The standard PDF fonts have no rupee glyph
PDF_CURRENCY = "Rs."

PAYMENT_MODE = "Cash / UPI"


class DocumentRenderError(Exception):
    """A document could not be rendered."""
    pass


def receipt_number(payment: Payment) -> str:
    """Short receipt number printed on the receipt: first 8 id characters."""
    return payment.id[:8].upper()


def receipt_filename(payment: Payment) -> str:
    return f"receipt_{receipt_number(payment)}_{payment.month}.pdf"


def notice_filename(member: Member) -> str:
    flat = "".join(c if c.isalnum() else "_" for c in member.flat_number)
    return f"demand_notice_flat_{flat}.pdf"


class DocumentRenderer:
    """Builds receipt and legal notice PDFs on the society letterhead."""

    def __init__(self, settings: Optional[SocietySettings] = None):
        self._settings = settings or get_settings().society
        self._styles = getSampleStyleSheet()
        self._title_style = ParagraphStyle(
            'SocietyTitle',
            parent=self._styles['Heading1'],
            fontSize=20,
            alignment=1,  # Center
            spaceAfter=6,
        )
        self._centered = ParagraphStyle(
            'Centered',
            parent=self._styles['Normal'],
            alignment=1,
        )
        self._body = ParagraphStyle(
            'NoticeBody',
            parent=self._styles['Normal'],
            fontName='Times-Roman',
            fontSize=11,
            leading=16,
            alignment=4,  # Justify
            spaceAfter=10,
        )

    def _money(self, amount: Decimal) -> str:
        return f"{PDF_CURRENCY} {format_amount(amount)}"

    # -------------------------------------------------------------------------
    # Receipt
    # -------------------------------------------------------------------------

    def receipt_fields(self, payment: Payment) -> list[tuple[str, str]]:
        """Label/value rows printed in the body of a receipt."""
        return [
            ("Receipt No:", receipt_number(payment)),
            ("Date:", format_short_date(payment.date)),
            ("Received From:", payment.member_name),
            ("For Month:", payment.month),
            ("Payment Mode:", PAYMENT_MODE),
            ("Amount:", self._money(payment.amount)),
        ]

    def render_receipt(self, payment: Payment) -> bytes:
        """Render a maintenance receipt for one payment."""
        story = [
            Paragraph(escape(self._settings.name.upper()), self._title_style),
            Paragraph("Maintenance Receipt", self._centered),
            Paragraph(
                escape(
                    f"Reg No: {self._settings.registration_number} - "
                    f"{self._settings.address}"
                ),
                self._centered,
            ),
            Spacer(1, 24),
        ]

        rows = [[label, escape(value)] for label, value in self.receipt_fields(payment)]
        table = Table(rows, colWidths=[2 * inch, 3.5 * inch])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTNAME', (1, -1), (1, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 12),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 10),
            ('LINEBELOW', (0, 0), (-1, -1), 0.5, colors.grey),
        ]))
        story.append(table)
        story.append(Spacer(1, 48))

        signatures = Table(
            [["______________________", "______________________"],
             ["Payer Signature", "Treasurer / Secretary"]],
            colWidths=[2.75 * inch, 2.75 * inch],
        )
        signatures.setStyle(TableStyle([
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('FONTSIZE', (0, 1), (-1, 1), 9),
        ]))
        story.append(signatures)
        story.append(Spacer(1, 24))
        story.append(Paragraph("This is a computer generated receipt.", self._centered))

        return self._build(story, title=f"Receipt {receipt_number(payment)}")

    # -------------------------------------------------------------------------
    # Legal notice
    # -------------------------------------------------------------------------

    def notice_paragraphs(self, member: Member, dues: Decimal) -> list[str]:
        """Body paragraphs of a demand notice, as plain text."""
        days = self._settings.notice_response_days
        return [
            "Dear Member,",
            (
                f"This notice is to inform you that an amount of "
                f"{self._money(dues)} is outstanding against your flat towards "
                f"the society maintenance charges."
            ),
            (
                "It has come to our attention that the dues have not been cleared "
                "despite previous verbal reminders. We would like to draw your "
                "attention to the legal framework governing apartment ownership."
            ),
            (
                '"Maintenance liability is attached to the ownership of the '
                'property, regardless of occupancy status (vacant flat)."'
            ),
            (
                "Under the provisions of the Apartment Ownership Act and the "
                "Transfer of Property Act, every flat owner is legally obligated "
                "to contribute towards the common expenses of the association. "
                "Non-occupancy of the flat does not exempt the owner from this "
                "statutory liability."
            ),
            (
                f"You are hereby requested to clear the total outstanding dues "
                f"within {days} days from the receipt of this notice. Failure to "
                f"do so may compel the Association to initiate recovery proceedings "
                f"under the applicable Cooperative Societies Act, including but not "
                f"limited to disconnection of essential services (Water/Electricity) "
                f"as per the association bye-laws."
            ),
            "Please treat this as urgent.",
        ]

    def render_legal_notice(
        self,
        member: Member,
        dues: Optional[Decimal] = None,
        on: Optional[date] = None,
    ) -> bytes:
        """
        Render a formal demand notice addressed to a member.

        Args:
            member: The defaulting member
            dues: Outstanding amount; the configured default if None
            on: Date printed on the notice; today if None
        """
        dues = self._settings.notice_default_dues if dues is None else dues
        if dues < 0:
            raise DocumentRenderError("Outstanding dues cannot be negative")
        on = on or date.today()
        s = self._settings

        story = [
            Paragraph("<u>FORMAL DEMAND NOTICE</u>", self._title_style),
            Paragraph(
                f"<i>Before the Managing Committee, {escape(s.association_name)}</i>",
                self._centered,
            ),
            Spacer(1, 18),
            Paragraph(f"Date: <b>{format_long_date(on)}</b>", self._styles['Normal']),
            Spacer(1, 12),
        ]

        for line in (
            "To,",
            f"<b>{escape(member.name)}</b>",
            f"Flat No: {escape(member.flat_number)}",
            f"{escape(s.name)}, {escape(s.address)}.",
            f"Mobile: {escape(member.mobile)}",
        ):
            story.append(Paragraph(line, self._styles['Normal']))
        story.append(Spacer(1, 12))

        story.append(Paragraph(
            "<b><u>SUBJECT: OUTSTANDING MAINTENANCE DUES - FINAL REMINDER</u></b>",
            self._styles['Normal'],
        ))
        story.append(Spacer(1, 12))

        for text in self.notice_paragraphs(member, dues):
            story.append(Paragraph(escape(text), self._body))

        story.append(Spacer(1, 36))
        for line in (
            "Sincerely,",
            "<br/><br/>",
            "<b>Secretary / President</b>",
            escape(s.association_name),
        ):
            story.append(Paragraph(line, self._styles['Normal']))

        return self._build(story, title=f"Demand notice - flat {member.flat_number}")

    # -------------------------------------------------------------------------

    def _build(self, story: list, title: str) -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=72, leftMargin=72,
            topMargin=72, bottomMargin=36,
            title=title,
            author=self._settings.association_name,
        )
        try:
            doc.build(story)
        except Exception as e:
            raise DocumentRenderError(f"Failed to render {title}: {e}") from e
        return buffer.getvalue()
