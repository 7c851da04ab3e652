from __future__ import annotations

import logging

from fpdf import FPDF

from billdesk.constants import PAYMENT_LABELS
from billdesk.engine.breakdown import build_breakdown
from billdesk.models import format_inr
from billdesk.models.customer_bill import BillBreakdown, CustomerBill

logger = logging.getLogger(__name__)

FONT = "Helvetica"
PRIMARY = (33, 57, 94)
PRIMARY_LIGHT = (236, 241, 248)
ACCENT = (230, 126, 34)
TEXT = (40, 40, 40)
MUTED = (120, 120, 120)
WHITE = (255, 255, 255)
BORDER = (208, 213, 221)


def _latin1(value: str) -> str:
    # Core PDF fonts only cover latin-1.
    return value.encode("latin-1", "replace").decode("latin-1")


def _rs(amount) -> str:
    return format_inr(amount, symbol="Rs. ")


class InvoicePDF:
    def generate(self, bill: CustomerBill, merchant_name: str = "") -> bytes:
        breakdown = build_breakdown(bill)

        pdf = FPDF()
        pdf.add_page()
        pdf.set_auto_page_break(auto=True, margin=20)
        page_w = pdf.w - pdf.l_margin - pdf.r_margin

        self._draw_header(pdf, page_w, bill, merchant_name)
        self._draw_table(pdf, page_w, breakdown)
        self._draw_totals(pdf, page_w, breakdown)
        self._draw_payment(pdf, bill)

        if bill.remarks:
            self._draw_remarks(pdf, page_w, bill.remarks)

        self._draw_footer(pdf, page_w)

        output = bytes(pdf.output())
        logger.debug(
            "PDF generated: bill=%s items=%d size=%d bytes",
            bill.bill_number,
            len(bill.items),
            len(output),
        )
        return output

    def _draw_info_card(self, pdf: FPDF, x: float, y: float, w: float, h: float, label: str, value: str) -> None:
        pdf.set_fill_color(*PRIMARY_LIGHT)
        pdf.rect(x, y, w, h, "F")
        pdf.set_fill_color(*ACCENT)
        pdf.rect(x, y, 3, h, "F")

        pdf.set_xy(x + 8, y + 3)
        pdf.set_font(FONT, "", 7)
        pdf.set_text_color(*MUTED)
        pdf.cell(w - 12, 5, label, new_x="LEFT", new_y="NEXT")
        pdf.set_x(x + 8)
        pdf.set_font(FONT, "B", 11)
        pdf.set_text_color(*TEXT)
        pdf.cell(w - 12, 8, _latin1(value))

    def _draw_header(self, pdf: FPDF, page_w: float, bill: CustomerBill, merchant_name: str) -> None:
        x = pdf.l_margin
        y = pdf.get_y()

        pdf.set_fill_color(*PRIMARY)
        pdf.rect(x, y, page_w, 34, "F")
        pdf.set_y(y + 8)
        pdf.set_text_color(*WHITE)
        pdf.set_font(FONT, "B", 24)
        pdf.cell(0, 12, "INVOICE", align="C", new_x="LMARGIN", new_y="NEXT")
        if merchant_name:
            pdf.set_font(FONT, "", 9)
            pdf.cell(0, 6, _latin1(merchant_name), align="C", new_x="LMARGIN", new_y="NEXT")

        card_y = y + 42
        card_h = 20
        card_w = page_w / 3 - 4
        bill_date = f"{bill.bill_date:%d/%m/%Y}" if bill.bill_date else ""
        customer = bill.customer_name or bill.customer_phone_number
        self._draw_info_card(pdf, x, card_y, card_w, card_h, "BILL NO.", bill.bill_number)
        self._draw_info_card(pdf, x + card_w + 6, card_y, card_w, card_h, "DATE", bill_date)
        self._draw_info_card(pdf, x + 2 * (card_w + 6), card_y, card_w, card_h, "CUSTOMER", customer)

        pdf.set_y(card_y + card_h + 10)

    def _draw_table(self, pdf: FPDF, page_w: float, breakdown: BillBreakdown) -> None:
        widths = [page_w * 0.34, page_w * 0.10, page_w * 0.16, page_w * 0.14, page_w * 0.12, page_w * 0.14]
        headers = ["  Item", "Qty", "Price", "Gross", "Discount", "Net  "]
        line_h = 9

        pdf.set_fill_color(*PRIMARY)
        pdf.set_text_color(*WHITE)
        pdf.set_font(FONT, "B", 9)
        for i, (width, header) in enumerate(zip(widths, headers)):
            last = i == len(widths) - 1
            pdf.cell(
                width,
                line_h,
                header,
                fill=True,
                align="L" if i == 0 else "R",
                new_x="LMARGIN" if last else "RIGHT",
                new_y="NEXT" if last else "TOP",
            )

        pdf.set_text_color(*TEXT)
        pdf.set_font(FONT, "", 9)
        for row_index, item in enumerate(breakdown.items):
            pdf.set_fill_color(*(PRIMARY_LIGHT if row_index % 2 == 0 else WHITE))
            values = [
                f"  {_latin1(item.name)}",
                f"{item.quantity.normalize():f}",
                _rs(item.unit_price),
                _rs(item.gross_amount),
                _rs(item.discount),
                f"{_rs(item.net_amount)}  ",
            ]
            for i, (width, value) in enumerate(zip(widths, values)):
                last = i == len(widths) - 1
                pdf.cell(
                    width,
                    line_h,
                    value,
                    fill=True,
                    align="L" if i == 0 else "R",
                    new_x="LMARGIN" if last else "RIGHT",
                    new_y="NEXT" if last else "TOP",
                )

        pdf.set_draw_color(*BORDER)
        pdf.set_line_width(0.3)
        y = pdf.get_y()
        pdf.line(pdf.l_margin, y, pdf.l_margin + page_w, y)

    def _draw_totals(self, pdf: FPDF, page_w: float, breakdown: BillBreakdown) -> None:
        pdf.ln(4)
        col_label = page_w * 0.72
        col_amount = page_w * 0.28

        rows = [
            ("Subtotal", breakdown.subtotal),
            ("Item discounts", -breakdown.item_discount_total),
            ("Additional discount", -breakdown.additional_discount),
        ]
        pdf.set_text_color(*TEXT)
        for label, amount in rows:
            pdf.set_font(FONT, "", 10)
            pdf.cell(col_label, 7, f"{label}  ", align="R")
            pdf.cell(col_amount, 7, f"{_rs(amount)}  ", align="R", new_x="LMARGIN", new_y="NEXT")

        pdf.ln(2)
        pdf.set_fill_color(*ACCENT)
        pdf.set_text_color(*WHITE)
        pdf.set_font(FONT, "B", 12)
        pdf.cell(col_label, 12, "TOTAL  ", fill=True, align="R")
        pdf.cell(col_amount, 12, f"{_rs(breakdown.grand_total)}  ", fill=True, align="R", new_x="LMARGIN", new_y="NEXT")

    def _draw_payment(self, pdf: FPDF, bill: CustomerBill) -> None:
        pdf.ln(4)
        pdf.set_font(FONT, "", 9)
        pdf.set_text_color(*MUTED)
        label = PAYMENT_LABELS.get(bill.payment_method, bill.payment_method.value)
        pdf.cell(0, 6, f"Payment method: {label}", new_x="LMARGIN", new_y="NEXT")

    def _draw_remarks(self, pdf: FPDF, page_w: float, remarks: str) -> None:
        pdf.ln(10)
        pdf.set_font(FONT, "B", 8)
        pdf.set_text_color(*MUTED)
        pdf.cell(0, 6, "REMARKS", new_x="LMARGIN", new_y="NEXT")
        pdf.set_font(FONT, "", 10)
        pdf.set_text_color(*TEXT)
        pdf.multi_cell(page_w, 6, _latin1(remarks))

    def _draw_footer(self, pdf: FPDF, page_w: float) -> None:
        pdf.set_y(-30)
        pdf.set_draw_color(*BORDER)
        pdf.set_line_width(0.3)
        y = pdf.get_y()
        pdf.line(pdf.l_margin, y, pdf.l_margin + page_w, y)
        pdf.ln(5)
        pdf.set_font(FONT, "", 7)
        pdf.set_text_color(*MUTED)
        pdf.cell(0, 5, "Computer generated invoice", align="C")