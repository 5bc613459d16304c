"""
PDF layout primitives for the Suffah school document pipeline
Brand palette, header band, page footer, tables, legend and the paginated document builder
"""

import logging
import re
from collections import namedtuple
from datetime import datetime
from io import BytesIO
from xml.sax.saxutils import escape as xml_escape

from reportlab.graphics.shapes import Circle, Drawing, String
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas
from reportlab.platypus import BaseDocTemplate, Frame, PageTemplate, Paragraph, Table, TableStyle

from config import Config
from models.errors import GenerationError
from utils.formatters import initials

logger = logging.getLogger(__name__)


def rgb(red, green, blue):
    """reportlab color from 0-255 channels"""
    return colors.Color(red / 255.0, green / 255.0, blue / 255.0)


# ------------------------------ Palette ------------------------------
PRIMARY = rgb(30, 100, 180)
GOLD = rgb(180, 140, 50)
DARK = rgb(30, 30, 30)
GRAY = rgb(100, 100, 100)
LIGHT_GRAY = rgb(240, 240, 240)
RULE_GRAY = rgb(200, 200, 200)
WHITE = colors.white

GOOD = rgb(34, 139, 34)
WARNING = rgb(230, 140, 0)
DANGER = rgb(220, 53, 69)

StatusStyle = namedtuple('StatusStyle', ['status', 'symbol', 'label', 'color'])

# Single source for attendance colors: the cell styler and the legend both read this table
ATTENDANCE_STATUSES = (
    StatusStyle('present', 'P', 'Present', GOOD),
    StatusStyle('absent', 'A', 'Absent', DANGER),
    StatusStyle('late', 'L', 'Late', rgb(255, 165, 0)),
    StatusStyle('excused', 'E', 'Excused', rgb(70, 130, 180)),
)
STATUS_BY_NAME = {item.status: item for item in ATTENDANCE_STATUSES}
STATUS_BY_SYMBOL = {item.symbol: item for item in ATTENDANCE_STATUSES}
UNMARKED_SYMBOL = '-'

FEE_STATUS_COLORS = {
    'paid': rgb(34, 197, 94),
    'partial': rgb(234, 179, 8),
    'pending': rgb(148, 163, 184),
    'overdue': rgb(239, 68, 68),
}

CARD_SIZE = (53.98 * mm, 85.6 * mm)
PORTRAIT = A4
LANDSCAPE = landscape(A4)

HEADER_HEIGHT = 36 * mm
HEADER_GAP = 6 * mm
PAGE_MARGIN = 15 * mm
FOOTER_SPACE = 30 * mm

DEFAULT_SIGNATURES = ('Class Teacher', 'Principal')

Organization = namedtuple('Organization', ['name', 'address', 'tagline', 'phone', 'email'])

CellStyle = namedtuple('CellStyle', ['text_color', 'bold', 'background'], defaults=(None, False, None))

ColumnRule = namedtuple('ColumnRule', ['width', 'align', 'wrap'], defaults=(1, 'LEFT', True))


def resolve_organization(record=None, config=Config):
    """School details from the record, falling back to configured defaults"""
    name = getattr(record, 'school_name', None) or config.SCHOOL_NAME
    address = getattr(record, 'school_address', None) or config.SCHOOL_ADDRESS
    return Organization(name, address, config.SCHOOL_TAGLINE, config.SCHOOL_PHONE, config.SCHOOL_EMAIL)


def build_filename(kind, entity, qualifier=None):
    """'<Kind>-<Entity>-<Qualifier>.pdf' with spaces collapsed and unsafe characters dropped"""
    parts = []
    for part in (kind, entity, qualifier):
        if part is None:
            continue
        text = re.sub(r'[\\/:*?"<>|]+', '', str(part)).strip()
        text = re.sub(r'\s+', '-', text)
        text = re.sub(r'-{2,}', '-', text).strip('-')
        if text:
            parts.append(text)
    return '-'.join(parts) + '.pdf'


def class_label(class_name, section=None):
    """'Class 5' + 'A' -> 'Class 5 - A'"""
    if section:
        return f'{class_name} - {section}'
    return str(class_name)


# ------------------------------ Cell stylers ------------------------------
def _parse_number(value):
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = re.search(r'-?\d+(?:\.\d+)?', str(value))
    return float(match.group(0)) if match else None


def attendance_cell_style(value):
    """Color a P/A/L/E symbol from the status table; unmarked days in gray"""
    item = STATUS_BY_SYMBOL.get(str(value))
    if item is not None:
        return CellStyle(item.color, True)
    return CellStyle(GRAY)


def status_color(status):
    """Color for an attendance status name; gray for anything unmarked or unknown"""
    item = STATUS_BY_NAME.get(str(status or '').lower())
    return item.color if item is not None else GRAY


def percentage_color(percentage, good=Config.ATTENDANCE_GOOD_THRESHOLD,
                     warning=Config.ATTENDANCE_WARNING_THRESHOLD):
    if percentage >= good:
        return GOOD
    if percentage >= warning:
        return WARNING
    return DANGER


def percentage_cell_style(value):
    number = _parse_number(value)
    if number is None:
        return None
    return CellStyle(percentage_color(number), True)


def collection_rate_cell_style(value):
    number = _parse_number(value)
    if number is None:
        return None
    return CellStyle(percentage_color(number, Config.COLLECTION_GOOD_THRESHOLD,
                                      Config.COLLECTION_WARNING_THRESHOLD), True)


def pass_fail_cell_style(value):
    text = str(value or '').upper()
    if text == 'PASS':
        return CellStyle(GOOD, True)
    if text == 'FAIL':
        return CellStyle(DANGER, True)
    return None


def fee_status_cell_style(value):
    color = FEE_STATUS_COLORS.get(str(value or '').lower())
    if color is None:
        return None
    return CellStyle(color, True)


def column_styler(stylers):
    """Build a (row, col, value) callback from {column index: value styler}"""
    def style(row_index, col_index, value):
        styler = stylers.get(col_index)
        return styler(value) if styler else None
    return style


# ------------------------------ Paragraph styles ------------------------------
_ALIGNMENTS = {'LEFT': TA_LEFT, 'CENTER': TA_CENTER, 'CENTRE': TA_CENTER, 'RIGHT': TA_RIGHT}

_styles = getSampleStyleSheet()

BODY_STYLE = ParagraphStyle('Body', parent=_styles['Normal'], fontSize=9, leading=12, textColor=DARK)
SMALL_STYLE = ParagraphStyle('Small', parent=BODY_STYLE, fontSize=8, leading=10)
LABEL_STYLE = ParagraphStyle('Label', parent=BODY_STYLE, fontName='Helvetica-Bold', textColor=GRAY)
TITLE_STYLE = ParagraphStyle('DocTitle', parent=_styles['Title'], fontSize=13, leading=16, textColor=DARK,
                             spaceAfter=2)
SECTION_STYLE = ParagraphStyle('Section', parent=BODY_STYLE, fontName='Helvetica-Bold', textColor=WHITE)


def cell_paragraph_style(font_size=8, align='LEFT', text_color=DARK, bold=False):
    """Return a compact cell Paragraph style to enable auto word-wrap in table cells."""
    return ParagraphStyle(
        'Cell',
        parent=_styles['Normal'],
        fontName='Helvetica-Bold' if bold else 'Helvetica',
        fontSize=font_size,
        leading=font_size + 2,
        alignment=_ALIGNMENTS.get(align, TA_LEFT),
        textColor=text_color,
        spaceAfter=0,
        spaceBefore=0,
    )


def to_paragraph(value, style=BODY_STYLE):
    """Convert any value to a Paragraph so ReportLab wraps text within cell width."""
    if value is None:
        return Paragraph('', style)
    # Escape text but preserve explicit line breaks by converting \n -> <br/>
    text = xml_escape(str(value)).replace('\n', '<br/>')
    return Paragraph(text, style)


def calc_colwidths_from_fracs(total_width, fracs):
    safe_fracs = fracs or []
    s = float(sum(safe_fracs)) or 1.0
    normalized = [f / s for f in safe_fracs]
    return [total_width * f for f in normalized]


def fit_font_size(text, font_name, font_size, max_width, min_size=6):
    """Shrink the font until the text fits on one line"""
    size = font_size
    while size > min_size and stringWidth(str(text), font_name, size) > max_width:
        size -= 0.5
    return size


# ------------------------------ Header & footer ------------------------------
def draw_header(canv, title, subtitle=None, organization=None, logo=None, height=HEADER_HEIGHT):
    """Brand band across the top of the page: logo (or initials), school name, address, title"""
    organization = organization or resolve_organization()
    width, page_height = canv._pagesize
    top = page_height
    canv.saveState()

    canv.setFillColor(PRIMARY)
    canv.rect(0, top - height, width, height, stroke=0, fill=1)
    canv.setFillColor(GOLD)
    canv.rect(0, top - height - 1.8 * mm, width, 1.8 * mm, stroke=0, fill=1)

    radius = min(13 * mm, height / 2 - 3 * mm)
    cx = PAGE_MARGIN + radius
    cy = top - height / 2
    canv.setFillColor(WHITE)
    canv.setStrokeColor(GOLD)
    canv.setLineWidth(1.2)
    canv.circle(cx, cy, radius, stroke=1, fill=1)
    if logo is not None:
        side = radius * 1.45
        canv.drawImage(logo.reader, cx - side / 2, cy - side / 2, width=side, height=side,
                       mask='auto', preserveAspectRatio=True)
    else:
        canv.setFillColor(PRIMARY)
        canv.setFont('Helvetica-Bold', radius * 0.9)
        canv.drawCentredString(cx, cy - radius * 0.3, initials(organization.name))

    text_left = cx + radius + 4 * mm
    text_width = width - text_left - PAGE_MARGIN
    center = text_left + text_width / 2

    canv.setFillColor(WHITE)
    name_size = fit_font_size(organization.name, 'Helvetica-Bold', 16, text_width)
    canv.setFont('Helvetica-Bold', name_size)
    canv.drawCentredString(center, top - 11 * mm, organization.name)
    canv.setFont('Helvetica', 9)
    canv.drawCentredString(center, top - 16.5 * mm, organization.address or '')

    canv.setFillColor(rgb(255, 230, 160))
    title_size = fit_font_size(title, 'Helvetica-Bold', 13, text_width)
    canv.setFont('Helvetica-Bold', title_size)
    canv.drawCentredString(center, top - 25 * mm, title)
    if subtitle:
        canv.setFillColor(WHITE)
        canv.setFont('Helvetica', fit_font_size(subtitle, 'Helvetica', 9.5, text_width))
        canv.drawCentredString(center, top - 31 * mm, subtitle)
    canv.restoreState()


def draw_footer(canv, page_index, page_count, generated_on=None, signatures=DEFAULT_SIGNATURES,
                organization=None):
    """Signature lines, a rule, the generated-on stamp and 'Page X of Y'"""
    width, _ = canv._pagesize
    canv.saveState()
    if signatures:
        slot = (width - 2 * PAGE_MARGIN) / len(signatures)
        line_length = min(50 * mm, slot - 10 * mm)
        for index, label in enumerate(signatures):
            center = PAGE_MARGIN + slot * (index + 0.5)
            canv.setStrokeColor(DARK)
            canv.setLineWidth(0.6)
            canv.line(center - line_length / 2, 22 * mm, center + line_length / 2, 22 * mm)
            canv.setFillColor(DARK)
            canv.setFont('Helvetica', 8)
            canv.drawCentredString(center, 18.5 * mm, label)

    canv.setStrokeColor(RULE_GRAY)
    canv.setLineWidth(0.5)
    canv.line(PAGE_MARGIN, 13 * mm, width - PAGE_MARGIN, 13 * mm)

    canv.setFillColor(GRAY)
    canv.setFont('Helvetica', 7.5)
    if generated_on is not None:
        canv.drawString(PAGE_MARGIN, 8.5 * mm, 'Generated: ' + generated_on.strftime('%d/%m/%Y %I:%M %p'))
    canv.drawCentredString(width / 2, 8.5 * mm, f'Page {page_index + 1} of {page_count}')
    if organization is not None:
        canv.drawRightString(width - PAGE_MARGIN, 8.5 * mm, organization.name)
    canv.restoreState()


def footer_stamp(generated_on, signatures=DEFAULT_SIGNATURES, organization=None):
    """Page stamp callback for PagedCanvas"""
    def stamp(canv, page_index, page_count):
        draw_footer(canv, page_index, page_count, generated_on, signatures, organization)
    return stamp


# ------------------------------ Tables ------------------------------
def render_table(headers, rows, column_rules, available_width, cell_style=None, *, font_size=8,
                 header_bg=PRIMARY, banded=True, repeat_header=True):
    """Build a standardized table with consistent styling across PDFs.
    - headers: header labels
    - rows: list of row value lists (may be empty: header-only table)
    - column_rules: one ColumnRule per column (width fraction, alignment, wrap)
    - cell_style: optional (row, col, value) -> CellStyle | None, row index counts body rows from 0
    """
    rules = list(column_rules)
    if len(rules) != len(headers):
        raise GenerationError('table', f'{len(headers)} headers but {len(rules)} column rules')
    colwidths = calc_colwidths_from_fracs(available_width, [rule.width for rule in rules])

    header_cells = [
        Paragraph(xml_escape(str(label)),
                  cell_paragraph_style(font_size, 'CENTER', WHITE, bold=True))
        for label in headers
    ]
    style_cmds = [
        ('BOX', (0, 0), (-1, -1), 0.5, GRAY),
        ('INNERGRID', (0, 0), (-1, -1), 0.25, RULE_GRAY),
        ('BACKGROUND', (0, 0), (-1, 0), header_bg),
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), font_size),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('LEFTPADDING', (0, 0), (-1, -1), 2),
        ('RIGHTPADDING', (0, 0), (-1, -1), 2),
        ('TOPPADDING', (0, 0), (-1, -1), 2),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
    ]
    for col_index, rule in enumerate(rules):
        style_cmds.append(('ALIGN', (col_index, 1), (col_index, -1), rule.align))

    body = []
    for row_index, row in enumerate(rows):
        table_row = row_index + 1
        cells = []
        for col_index, value in enumerate(row):
            rule = rules[col_index]
            style = cell_style(row_index, col_index, value) if cell_style else None
            if rule.wrap:
                cells.append(to_paragraph(value, cell_paragraph_style(
                    font_size, rule.align,
                    style.text_color if style and style.text_color is not None else DARK,
                    bold=bool(style and style.bold))))
            else:
                cells.append('' if value is None else str(value))
                if style and style.text_color is not None:
                    style_cmds.append(('TEXTCOLOR', (col_index, table_row), (col_index, table_row),
                                       style.text_color))
                if style and style.bold:
                    style_cmds.append(('FONTNAME', (col_index, table_row), (col_index, table_row),
                                       'Helvetica-Bold'))
            if style and style.background is not None:
                style_cmds.append(('BACKGROUND', (col_index, table_row), (col_index, table_row),
                                   style.background))
        body.append(cells)

    if banded and body:
        # Row banding goes first so explicit cell backgrounds paint over it
        style_cmds.insert(3, ('ROWBACKGROUNDS', (0, 1), (-1, -1), [WHITE, LIGHT_GRAY]))

    table = Table([header_cells] + body, colWidths=colwidths, repeatRows=1 if repeat_header else 0)
    table.setStyle(TableStyle(style_cmds))
    return table


def legend_entries(items=ATTENDANCE_STATUSES):
    """(symbol, label, color) triples in legend order"""
    return [(item.symbol, item.label, item.color) for item in items]


def build_legend(available_width, items=ATTENDANCE_STATUSES, trailing_text=None):
    """Caption row under a table: colored symbols with their meaning, plus optional right-hand text"""
    cells = ['Legend:']
    style_cmds = [
        ('FONTNAME', (0, 0), (0, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('TEXTCOLOR', (0, 0), (-1, -1), DARK),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('LEFTPADDING', (0, 0), (-1, -1), 1),
        ('RIGHTPADDING', (0, 0), (-1, -1), 1),
    ]
    for symbol, label, color in legend_entries(items):
        col = len(cells)
        cells.extend([symbol, f'= {label}'])
        style_cmds.append(('TEXTCOLOR', (col, 0), (col, 0), color))
        style_cmds.append(('FONTNAME', (col, 0), (col, 0), 'Helvetica-Bold'))
        style_cmds.append(('ALIGN', (col, 0), (col, 0), 'RIGHT'))
    widths = [16 * mm] + [4 * mm, 16 * mm] * (len(cells) // 2)
    if trailing_text:
        cells.append(trailing_text)
        style_cmds.append(('ALIGN', (-1, 0), (-1, 0), 'RIGHT'))
        style_cmds.append(('FONTNAME', (-1, 0), (-1, 0), 'Helvetica-Bold'))
        widths.append(max(available_width - sum(widths), 30 * mm))
    table = Table([cells], colWidths=widths, hAlign='LEFT')
    table.setStyle(TableStyle(style_cmds))
    return table


def details_table(pairs, available_width, columns=2, font_size=9):
    """Label/value pairs laid out `columns` pairs per row"""
    rows = []
    for start in range(0, len(pairs), columns):
        row = []
        for label, value in pairs[start:start + columns]:
            row.append(Paragraph(xml_escape(str(label)), cell_paragraph_style(font_size, bold=True,
                                                                              text_color=GRAY)))
            row.append(to_paragraph(value if value not in (None, '') else '-',
                                    cell_paragraph_style(font_size, text_color=DARK)))
        while len(row) < columns * 2:
            row.append('')
        rows.append(row)
    if not rows:
        rows = [[''] * (columns * 2)]
    fracs = [0.38, 0.62] * columns
    table = Table(rows, colWidths=calc_colwidths_from_fracs(available_width, fracs))
    table.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('LINEBELOW', (0, 0), (-1, -1), 0.25, RULE_GRAY),
        ('LEFTPADDING', (0, 0), (-1, -1), 2),
        ('TOPPADDING', (0, 0), (-1, -1), 3),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
    ]))
    return table


def section_heading(text, available_width):
    """Full-width colored bar introducing a form section"""
    table = Table([[Paragraph(xml_escape(text), SECTION_STYLE)]], colWidths=[available_width])
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, -1), PRIMARY),
        ('LINEBELOW', (0, 0), (-1, -1), 1.2, GOLD),
        ('LEFTPADDING', (0, 0), (-1, -1), 4),
        ('TOPPADDING', (0, 0), (-1, -1), 3),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
    ]))
    return table


def photo_or_placeholder(photo, width, height, caption='Photo'):
    """The student's photo, or an outlined box with a caption when it could not be loaded"""
    if photo is not None:
        return photo.flowable(width, height)
    box = Table([[caption]], colWidths=[width], rowHeights=[height])
    box.setStyle(TableStyle([
        ('BOX', (0, 0), (-1, -1), 0.75, GRAY),
        ('BACKGROUND', (0, 0), (-1, -1), LIGHT_GRAY),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('TEXTCOLOR', (0, 0), (-1, -1), GRAY),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
    ]))
    return box


def stat_cards(cards, available_width, height=16 * mm):
    """Row of colored summary boxes; cards are (label, value, color)"""
    if not cards:
        return Table([['']])
    values = [str(value) for _, value, _ in cards]
    labels = [label for label, _, _ in cards]
    table = Table([values, labels], colWidths=[available_width / len(cards)] * len(cards),
                  rowHeights=[height * 0.62, height * 0.38])
    style_cmds = [
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 14),
        ('FONTSIZE', (0, 1), (-1, 1), 8),
        ('TEXTCOLOR', (0, 0), (-1, -1), WHITE),
        ('LINEAFTER', (0, 0), (-2, -1), 3, WHITE),
    ]
    for index, (_, _, color) in enumerate(cards):
        style_cmds.append(('BACKGROUND', (index, 0), (index, -1), color))
    table.setStyle(TableStyle(style_cmds))
    return table


def percentage_badge(percentage, size=24 * mm, color=None):
    """Ring with the percentage in the middle"""
    color = color or percentage_color(percentage)
    drawing = Drawing(size, size)
    drawing.add(Circle(size / 2, size / 2, size / 2 - 2, strokeColor=color, strokeWidth=3,
                       fillColor=WHITE))
    drawing.add(String(size / 2, size / 2 - 4, f'{percentage}%', fontName='Helvetica-Bold',
                       fontSize=13, fillColor=color, textAnchor='middle'))
    drawing.add(String(size / 2, size / 2 - 12, 'Attendance', fontName='Helvetica', fontSize=6,
                       fillColor=GRAY, textAnchor='middle'))
    return drawing


def status_badge(text, color, width=28 * mm):
    """Filled pill with white caps text"""
    badge = Table([[str(text).upper()]], colWidths=[width])
    badge.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, -1), color),
        ('TEXTCOLOR', (0, 0), (-1, -1), WHITE),
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ]))
    return badge


# ------------------------------ Pagination ------------------------------
class PagedCanvas(canvas.Canvas):
    """Canvas that holds every page until save() so footers can say 'Page X of Y'.

    Pages are kept as saved canvas states in an indexed list; on save each one is
    restored in turn, stamped with (index, total) and only then emitted.
    """

    def __init__(self, *args, **kwargs):
        self._page_stamp = kwargs.pop('page_stamp', None)
        canvas.Canvas.__init__(self, *args, **kwargs)
        self._saved_page_states = []
        self.page_count = 0

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        page_count = len(self._saved_page_states)
        for page_index, state in enumerate(self._saved_page_states):
            self.__dict__.update(state)
            if self._page_stamp is not None:
                self._page_stamp(self, page_index, page_count)
            canvas.Canvas.showPage(self)
        self.page_count = page_count
        canvas.Canvas.save(self)


class PaginatedDocument:
    """Collects pages for one document and returns (pdf bytes, page count).

    Two ways to fill it:
    - build(story): platypus flowables, header band on the first page (or every
      page with repeat_header=True), tables split across pages with their header row
    - open_canvas() / finish(): direct drawing for fixed layouts such as ID cards
    """

    def __init__(self, kind, pagesize=PORTRAIT, title=None, page_stamp=None, header=None,
                 repeat_header=False, header_height=HEADER_HEIGHT, margin=PAGE_MARGIN,
                 bottom_margin=FOOTER_SPACE, author=None):
        self.kind = kind
        self.pagesize = pagesize
        self.title = title or kind
        self.page_stamp = page_stamp
        self.header = header  # callable(canvas)
        self.repeat_header = repeat_header
        self.header_height = header_height if header else 0
        self.margin = margin
        self.bottom_margin = bottom_margin
        self.author = author or Config.SCHOOL_NAME
        self._buffer = BytesIO()
        self._canvas = None
        self.page_count = 0

    @property
    def body_width(self):
        return self.pagesize[0] - 2 * self.margin

    def _make_canvas(self, *args, **kwargs):
        kwargs['page_stamp'] = self.page_stamp
        self._canvas = PagedCanvas(*args, **kwargs)
        return self._canvas

    def _draw_header(self, canv, doc):
        if self.header is not None:
            self.header(canv)

    def _frame(self, frame_id, with_header):
        width, height = self.pagesize
        top_offset = (self.header_height + HEADER_GAP) if with_header else self.margin
        return Frame(self.margin, self.bottom_margin, self.body_width,
                     height - top_offset - self.bottom_margin, id=frame_id,
                     leftPadding=0, rightPadding=0, topPadding=0, bottomPadding=0)

    def build(self, story):
        """Lay out platypus flowables; returns the PDF bytes"""
        doc = BaseDocTemplate(self._buffer, pagesize=self.pagesize, title=self.title, author=self.author,
                              leftMargin=self.margin, rightMargin=self.margin, topMargin=self.margin,
                              bottomMargin=self.bottom_margin, invariant=1)
        has_header = self.header is not None
        if self.repeat_header or not has_header:
            doc.addPageTemplates([
                PageTemplate(id='page', frames=[self._frame('body', has_header)], onPage=self._draw_header),
            ])
        else:
            doc.addPageTemplates([
                PageTemplate(id='first', frames=[self._frame('first', True)], onPage=self._draw_header,
                             autoNextPageTemplate='later'),
                PageTemplate(id='later', frames=[self._frame('later', False)]),
            ])
        try:
            doc.build(list(story), canvasmaker=self._make_canvas)
        except GenerationError:
            raise
        except Exception as e:
            logger.error("Layout failed for %s: %s", self.kind, e, exc_info=True)
            raise GenerationError(self.kind, str(e)) from e
        return self._finish_bytes()

    def open_canvas(self):
        """Canvas for direct drawing; call showPage() after each page, then finish()"""
        self._canvas = PagedCanvas(self._buffer, pagesize=self.pagesize, invariant=1,
                                   page_stamp=self.page_stamp)
        self._canvas.setTitle(self.title)
        self._canvas.setAuthor(self.author)
        return self._canvas

    def finish(self):
        """Emit the pages drawn on the open canvas; returns the PDF bytes"""
        try:
            self._canvas.save()
        except Exception as e:
            logger.error("Layout failed for %s: %s", self.kind, e, exc_info=True)
            raise GenerationError(self.kind, str(e)) from e
        return self._finish_bytes()

    def _finish_bytes(self):
        self.page_count = self._canvas.page_count
        pdf_bytes = self._buffer.getvalue()
        self._buffer.close()
        return pdf_bytes


def now():
    """Generation timestamp, truncated to the minute shown in the footer"""
    return datetime.now().replace(second=0, microsecond=0)


def hex_color(color):
    """'#rrggbb' for use inside Paragraph markup"""
    return '#' + color.hexval()[2:]
