"""SKP PDF printing

Draws a PrintLayout (see skp.print_projector) onto A4 pages with ReportLab,
reproducing the paper form. Signature placeholders are edit-time only and are
never drawn here.
"""
import base64
import io
import logging
import tempfile
from pathlib import Path
from typing import Optional

from PIL import Image
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from .config import PDF_FONT_PATH
from .print_projector import CheckBox, PartyBlock, PrintLayout, ProductRow, SignatureBox

logger = logging.getLogger(__name__)


def decode_data_url(data_url: str) -> bytes:
    """data:image/png;base64,... -> raw bytes"""
    _, _, encoded = data_url.partition(",")
    return base64.b64decode(encoded or data_url)


class SKPPrinter:
    """A4 renderer for Surat Kerjasama Promosi"""

    FONT_NAME = "SKPFont"
    BOLD_FONT_NAME = "Helvetica-Bold"
    PAGE_WIDTH, PAGE_HEIGHT = A4
    MARGIN = 15 * mm
    FIRST_PAGE_ROWS = 10  # product rows on the form itself; the rest go to Lampiran Produk pages
    ATTACHMENT_ROWS = 38

    # product table columns
    COLUMNS = [
        ("No.", 9 * mm),
        ("Item Code", 25 * mm),
        ("Nama Produk", 58 * mm),
        ("Mekanisme Promo", 38 * mm),
        ("% Discount", 22 * mm),
        ("Potong Harga (Rp)", 28 * mm),
    ]

    def __init__(self, font_path: Optional[str] = None):
        self.font_path = font_path or PDF_FONT_PATH
        self._font_registered = False

    def _register_font(self):
        """Register the TTF font once; Helvetica when unavailable"""
        if self._font_registered:
            return

        try:
            pdfmetrics.registerFont(TTFont(self.FONT_NAME, str(self.font_path)))
            logger.debug("Font '%s' registered from %s", self.FONT_NAME, self.font_path)
        except Exception as e:
            # TTFont raises TTFError / OSError depending on the failure
            logger.warning("Font registration failed (%s: %s), falling back to Helvetica", type(e).__name__, e)
            self.FONT_NAME = "Helvetica"
        self._font_registered = True

    def generate(self, layout: PrintLayout, output_path: Optional[Path] = None) -> Path:
        """Write the layout to a PDF file

        Args:
            layout: projected document
            output_path: target file; defaults to a temp file named after the number

        Returns:
            Path: the written PDF
        """
        self._register_font()

        if output_path is None:
            safe_number = (layout.number or "draft").replace("/", "_").replace("\\", "_")
            temp_dir = Path(tempfile.gettempdir()) / "skp_temp"
            temp_dir.mkdir(exist_ok=True)
            output_path = temp_dir / f"SKP_{safe_number}.pdf"

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self._create_pdf(layout, output_path)
        logger.info("PDF written: %s", output_path)
        return output_path

    def render_bytes(self, layout: PrintLayout) -> bytes:
        """Same as generate() but returns the PDF content"""
        self._register_font()
        buf = io.BytesIO()
        self._create_pdf(layout, buf)
        return buf.getvalue()

    def _create_pdf(self, layout: PrintLayout, target):
        c = canvas.Canvas(target if isinstance(target, io.BytesIO) else str(target), pagesize=A4)
        c.setTitle(f"{layout.title} {layout.number}".strip())

        rows = list(layout.product_rows)
        first_rows = rows[:self.FIRST_PAGE_ROWS]
        rest = rows[self.FIRST_PAGE_ROWS:]

        self._draw_form_page(c, layout, first_rows, has_attachment=bool(rest))

        page_num = 1
        for start in range(0, len(rest), self.ATTACHMENT_ROWS):
            c.showPage()
            page_num += 1
            self._draw_attachment_page(c, layout, rest[start:start + self.ATTACHMENT_ROWS], page_num)

        c.save()

    # ===== form page =====

    def _draw_form_page(self, c, layout: PrintLayout, rows: list[ProductRow], has_attachment: bool):
        width, height = self.PAGE_WIDTH, self.PAGE_HEIGHT
        left = self.MARGIN
        right = width - self.MARGIN
        y = height - self.MARGIN

        y = self._draw_header(c, layout, left, right, y)
        y = self._draw_number(c, layout, left, right, y)
        y = self._draw_party(c, layout.principal, left, right, y)
        y = self._draw_party(c, layout.distributor, left, right, y)
        y = self._draw_period(c, layout, left, right, y)
        y = self._draw_product_table(c, rows, left, y, title="Nama Produk :")
        if has_attachment:
            c.setFont(self.FONT_NAME, 7)
            c.drawString(left, y - 3 * mm, "Produk selanjutnya: lihat Lampiran Produk.")
            y -= 4 * mm
        c.setFont(self.FONT_NAME, 7)
        c.drawString(left, y - 3 * mm, layout.product_note)
        y -= 7 * mm

        y = self._draw_admin_section(c, layout, left, right, y)
        y = self._draw_pic(c, layout, left, right, y)
        y = self._draw_clause(c, layout, left, right, y)
        y = self._draw_signatures(c, layout, left, right, y)
        self._draw_footnotes(c, layout, left, y)

    def _draw_header(self, c, layout: PrintLayout, left, right, y):
        """Issuer name left, title and cooperation type ticks right"""
        c.setFont(self.BOLD_FONT_NAME, 18)
        c.setFillColor(colors.HexColor("#ea580c"))
        c.drawString(left, y - 8 * mm, "apotekalpro")
        c.setFillColor(colors.black)
        c.setFont(self.FONT_NAME, 7)
        c.drawString(left, y - 12 * mm, "pharmacy")

        c.setFont(self.BOLD_FONT_NAME, 14)
        c.drawRightString(right, y - 6 * mm, layout.title)

        # CONSIGNMENT / OUTRIGHT
        x = right - 70 * mm
        for box in layout.cooperation_type:
            x = self._draw_checkbox(c, box, x, y - 12 * mm, size=3.5 * mm, font_size=9) + 8 * mm

        y -= 15 * mm
        c.setLineWidth(1.2)
        c.line(left, y, right, y)
        c.setLineWidth(0.5)
        return y - 5 * mm

    def _draw_number(self, c, layout: PrintLayout, left, right, y):
        c.setFont(self.BOLD_FONT_NAME, 9)
        c.drawString(left, y, "No. Surat :")
        c.setFont(self.FONT_NAME, 9)
        c.drawString(left + 20 * mm, y, layout.number)
        c.line(left + 19 * mm, y - 1 * mm, right, y - 1 * mm)
        y -= 5 * mm
        c.setFont(self.FONT_NAME, 8.5)
        c.drawString(left, y, layout.intro)
        return y - 6 * mm

    def _draw_party(self, c, party: PartyBlock, left, right, y):
        line_height = 4.5 * mm
        label_x = left
        value_x = left + 32 * mm

        c.setFont(self.BOLD_FONT_NAME, 9)
        c.drawString(left, y, party.title)
        c.line(left, y - 0.8 * mm, left + c.stringWidth(party.title, self.BOLD_FONT_NAME, 9), y - 0.8 * mm)
        y -= line_height

        c.setFont(self.FONT_NAME, 8.5)
        c.drawString(label_x, y, party.name_label)
        self._draw_field(c, value_x, right, y, party.name)
        y -= line_height

        c.setFont(self.FONT_NAME, 8.5)
        c.drawString(label_x, y, "NPWP")
        c.drawString(value_x - 3 * mm, y, ":")
        x = value_x
        for box in party.tax_id_boxes:
            x = self._draw_checkbox(c, box, x, y, size=3 * mm, font_size=8.5) + 8 * mm
        c.setFont(self.FONT_NAME, 8.5)
        c.drawRightString(right - 2 * mm, y, f"No. NPWP: {party.tax_id}")
        c.line(value_x, y - 1 * mm, right, y - 1 * mm)
        y -= line_height

        c.drawString(label_x, y, "Alamat Pajak")
        self._draw_field(c, value_x, right, y, party.tax_address)
        return y - 6 * mm

    def _draw_period(self, c, layout: PrintLayout, left, right, y):
        c.setFont(self.BOLD_FONT_NAME, 9)
        c.drawString(left, y, "Priode (Tanggal)")
        c.setFont(self.FONT_NAME, 9)
        value_x = left + 32 * mm
        c.drawString(value_x - 3 * mm, y, ":")
        c.drawCentredString(value_x + 18 * mm, y, layout.period_start)
        c.line(value_x, y - 1 * mm, value_x + 36 * mm, y - 1 * mm)
        c.setFont(self.BOLD_FONT_NAME, 9)
        c.drawCentredString(value_x + 42 * mm, y, "s.d")
        c.setFont(self.FONT_NAME, 9)
        c.drawCentredString(value_x + 66 * mm, y, layout.period_end)
        c.line(value_x + 48 * mm, y - 1 * mm, value_x + 84 * mm, y - 1 * mm)
        y -= 4 * mm
        c.setLineWidth(1.2)
        c.line(left, y, right, y)
        c.setLineWidth(0.5)
        return y - 5 * mm

    def _draw_product_table(self, c, rows: list[ProductRow], x, y, title: str):
        """Header + one bordered row per projected product row"""
        row_height = 5.5 * mm
        header_height = 7 * mm

        c.setFont(self.BOLD_FONT_NAME, 9)
        c.drawString(x, y, title)
        y -= 2 * mm

        c.setStrokeColor(colors.black)
        c.setLineWidth(0.5)
        current_x = x
        c.setFont(self.BOLD_FONT_NAME, 7.5)
        for col_name, col_width in self.COLUMNS:
            c.setFillColor(colors.HexColor("#f3f4f6"))
            c.rect(current_x, y - header_height, col_width, header_height, fill=1)
            c.setFillColor(colors.black)
            c.drawCentredString(current_x + col_width / 2, y - header_height + 2.5 * mm, col_name)
            current_x += col_width
        y -= header_height

        c.setFont(self.FONT_NAME, 7.5)
        for row in rows:
            y -= row_height
            cells = [
                (f"{row.no}.", "center"),
                (row.item_code[:16], "center"),
                (row.name[:42], "left"),
                (row.promo_mechanism[:26], "center"),
                (row.discount, "center"),
                (row.price_deduction, "center"),
            ]
            current_x = x
            for (text, align), (_, col_width) in zip(cells, self.COLUMNS):
                c.rect(current_x, y, col_width, row_height)
                if text:
                    if align == "left":
                        c.drawString(current_x + 1.5 * mm, y + 1.7 * mm, text)
                    else:
                        c.drawCentredString(current_x + col_width / 2, y + 1.7 * mm, text)
                current_x += col_width
        return y

    def _draw_admin_section(self, c, layout: PrintLayout, left, right, y):
        """Tax ticks, cooperation terms, company types and payment routing"""
        # tax status (right aligned)
        x = right - 80 * mm
        for box in layout.tax_status:
            x = self._draw_checkbox(c, box, x, y, size=3 * mm, font_size=8, bold=True) + 8 * mm
        y -= 6 * mm

        col_width = (right - left) / 2
        left_y = y
        right_y = y
        line_height = 4.5 * mm

        # left column
        c.setFont(self.BOLD_FONT_NAME, 8.5)
        c.drawString(left, left_y, "Jenis Kerjasama :")
        left_y -= line_height
        c.setFont(self.FONT_NAME, 8.5)
        for label, value in (("Rafaksi", layout.rafaksi), ("Marketing Supp", layout.marketing_support)):
            c.drawString(left, left_y, label)
            c.drawString(left + 25 * mm, left_y, f": {value}"[:60])
            c.setDash(1, 1)
            c.line(left + 25 * mm, left_y - 1 * mm, left + col_width - 5 * mm, left_y - 1 * mm)
            c.setDash()
            left_y -= line_height
        left_y -= 1 * mm
        c.drawString(left, left_y, "Jenis Perusahaan :")
        for box in layout.company_types:
            self._draw_checkbox(c, box, left + 28 * mm, left_y, size=3 * mm, font_size=8.5)
            left_y -= line_height

        # right column
        x0 = left + col_width
        for title, boxes in (
            ("Invoice dan Faktur Pajak dibuat atas nama :", layout.invoice_to),
            ("Pembayaran", layout.payment_type),
            ("Potong tagihan kepada :", layout.cut_invoice_to),
        ):
            c.setFont(self.BOLD_FONT_NAME, 8.5)
            c.drawString(x0, right_y, title)
            right_y -= line_height
            x = x0
            for box in boxes:
                x = self._draw_checkbox(c, box, x, right_y, size=3 * mm, font_size=8.5) + 10 * mm
            right_y -= line_height + 1 * mm

        return min(left_y, right_y) - 2 * mm

    def _draw_pic(self, c, layout: PrintLayout, left, right, y):
        line_height = 4.5 * mm
        c.setFont(self.BOLD_FONT_NAME, 9)
        c.drawString(left, y, "Pengiriman Invoice")
        y -= line_height
        c.setFont(self.FONT_NAME, 8.5)
        for label, value in layout.pic_rows:
            c.drawString(left, y, label)
            self._draw_field(c, left + 32 * mm, right, y, value)
            y -= line_height
        return y - 2 * mm

    def _draw_clause(self, c, layout: PrintLayout, left, right, y):
        c.setFont(self.FONT_NAME, 8)
        for line in self._wrap(c, layout.clause, right - left, 8):
            c.drawString(left, y, line)
            y -= 3.8 * mm
        return y - 3 * mm

    def _draw_signatures(self, c, layout: PrintLayout, left, right, y):
        alpro, principal = layout.signatures
        c.setFont(self.FONT_NAME, 8.5)
        c.drawRightString(right - 5 * mm, y, layout.place_date)
        y -= 5 * mm

        box_height = 22 * mm
        centers = (left + 35 * mm, right - 40 * mm)
        for box, center in zip((alpro, principal), centers):
            self._draw_signature_box(c, box, center, y, box_height)
        return y - box_height - 14 * mm

    def _draw_signature_box(self, c, box: SignatureBox, center_x, y, box_height):
        box_width = 48 * mm
        c.setFont(self.FONT_NAME, 8.5)
        c.drawCentredString(center_x, y, box.caption)
        bottom = y - 2 * mm - box_height

        if box.image:
            try:
                pil_image = Image.open(io.BytesIO(decode_data_url(box.image)))
                pil_image.load()
                image = ImageReader(pil_image)
                c.drawImage(
                    image,
                    center_x - 32 * mm / 2,
                    bottom + 1 * mm,
                    width=32 * mm,
                    height=box_height - 2 * mm,
                    mask="auto",
                    preserveAspectRatio=True,
                    anchor="s",
                )
            except (ValueError, OSError) as e:
                # undecodable image: leave the area blank rather than failing the print
                logger.warning("Signature for %s could not be drawn: %s", box.role.value, e)

        c.line(center_x - box_width / 2, bottom, center_x + box_width / 2, bottom)
        c.setFont(self.BOLD_FONT_NAME, 8.5)
        c.drawCentredString(center_x, bottom - 4 * mm, box.signer)
        c.setFont(self.FONT_NAME, 7)
        c.drawCentredString(center_x, bottom - 7.5 * mm, box.signer_note)

    def _draw_footnotes(self, c, layout: PrintLayout, left, y):
        c.setFont("Helvetica-Oblique", 6.5)
        for note in layout.footnotes:
            c.drawString(left, y, note)
            y -= 3 * mm

    # ===== attachment pages =====

    def _draw_attachment_page(self, c, layout: PrintLayout, rows: list[ProductRow], page_num: int):
        left = self.MARGIN
        y = self.PAGE_HEIGHT - self.MARGIN
        c.setFont(self.BOLD_FONT_NAME, 12)
        c.drawString(left, y - 5 * mm, "Lampiran Produk")
        c.setFont(self.FONT_NAME, 9)
        c.drawRightString(self.PAGE_WIDTH - self.MARGIN, y - 5 * mm, f"No. Surat: {layout.number}   Hal. {page_num}")
        self._draw_product_table(c, rows, left, y - 14 * mm, title="Nama Produk (lanjutan) :")

    # ===== primitives =====

    def _draw_checkbox(self, c, box: CheckBox, x, y, size, font_size, bold=False) -> float:
        """Square box with a vector tick when ticked; returns the x after the label"""
        c.setLineWidth(0.6)
        c.rect(x, y - 0.5 * mm, size, size)
        if box.ticked:
            c.setLineWidth(1.1)
            c.line(x + size * 0.18, y - 0.5 * mm + size * 0.5, x + size * 0.42, y - 0.5 * mm + size * 0.2)
            c.line(x + size * 0.42, y - 0.5 * mm + size * 0.2, x + size * 0.85, y - 0.5 * mm + size * 0.88)
        c.setLineWidth(0.5)
        font = self.BOLD_FONT_NAME if bold else self.FONT_NAME
        c.setFont(font, font_size)
        label_x = x + size + 1.5 * mm
        c.drawString(label_x, y, box.label)
        return label_x + c.stringWidth(box.label, font, font_size)

    def _draw_field(self, c, x, right, y, value: str):
        """': value' on an underline reaching the right margin"""
        c.drawString(x - 3 * mm, y, ":")
        c.drawString(x + 1 * mm, y, value[:90])
        c.line(x, y - 1 * mm, right, y - 1 * mm)

    def _wrap(self, c, text: str, max_width, font_size) -> list[str]:
        words = text.split()
        lines: list[str] = []
        current = ""
        for word in words:
            candidate = f"{current} {word}".strip()
            if c.stringWidth(candidate, self.FONT_NAME, font_size) <= max_width:
                current = candidate
            else:
                if current:
                    lines.append(current)
                current = word
        if current:
            lines.append(current)
        return lines
