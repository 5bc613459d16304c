"""
Fee document service for the Suffah school document pipeline
Invoices, payment receipts and fee collection reports
"""

import logging
from xml.sax.saxutils import escape as xml_escape

from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, Spacer, Table, TableStyle

from config import Config
from models.artifact import GeneratedArtifact
from services.asset_loader import AssetLoader
from services.pdf_layout import (
    BODY_STYLE, DANGER, DARK, FEE_STATUS_COLORS, GOLD, GOOD, GRAY, LIGHT_GRAY, PORTRAIT, PRIMARY, RULE_GRAY, WHITE,
    SMALL_STYLE, TITLE_STYLE, ColumnRule, PaginatedDocument, build_filename, class_label,
    collection_rate_cell_style, column_styler, details_table, draw_header, fee_status_cell_style, footer_stamp,
    now, percentage_color, render_table, resolve_organization, section_heading, stat_cards, status_badge
)
from utils.formatters import display, format_amount, format_date, number_to_words
from utils.grading import collection_rate
from utils.sorting_helpers import SortingHelpers

logger = logging.getLogger(__name__)


def amount_in_words(amount):
    """'Rupees Twelve Thousand Five Hundred Only'"""
    return f'Rupees {number_to_words(int(round(float(amount or 0))))} Only'


class FeeDocumentService:
    """Service for fee documents"""

    @staticmethod
    def _totals_box(lines, width):
        """Right-hand summary box; the last line is emphasised"""
        table = Table([[label, value] for label, value in lines], colWidths=[width * 0.55, width * 0.45])
        style_cmds = [
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('LINEBELOW', (0, 0), (-1, -2), 0.25, RULE_GRAY),
            ('BOX', (0, 0), (-1, -1), 0.5, GRAY),
            ('BACKGROUND', (0, -1), (-1, -1), PRIMARY),
            ('TEXTCOLOR', (0, -1), (-1, -1), WHITE),
            ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ]
        table.setStyle(TableStyle(style_cmds))
        return table

    # ------------------------- Invoice -------------------------
    @staticmethod
    async def generate_invoice(invoice, assets=None, generated_on=None):
        """Generate a fee invoice with totals, status badge and payment history."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(invoice)
        logo = await assets.load_logo()
        currency = Config.CURRENCY

        document = PaginatedDocument(
            'Invoice', pagesize=PORTRAIT, title=f'Invoice {invoice.invoice_number}',
            page_stamp=footer_stamp(generated_on, ('Accountant', 'Principal'), organization),
            header=lambda canv: draw_header(canv, 'FEE INVOICE', f'Invoice No. {invoice.invoice_number}',
                                            organization, logo),
        )
        width = document.body_width
        status = invoice.resolved_status(as_of=generated_on.date())

        bill_to = [
            Paragraph('<b>BILL TO</b>', BODY_STYLE),
            details_table([
                ('Student', invoice.student_name),
                ('Student ID', invoice.student_id),
                ("Father's Name", display(invoice.father_name)),
                ('Class', class_label(invoice.class_name, invoice.section)),
                ('Phone', display(invoice.phone)),
                ('Address', display(invoice.address)),
            ], width * 0.55 - 4 * mm, columns=1),
        ]
        meta = [
            details_table([
                ('Invoice No.', invoice.invoice_number),
                ('Issue Date', format_date(invoice.issue_date or generated_on.date())),
                ('Due Date', format_date(invoice.due_date)),
                ('Fee Period', display(invoice.fee_period)),
            ], width * 0.45, columns=1),
            Spacer(1, 3 * mm),
            status_badge(status, FEE_STATUS_COLORS[status]),
        ]
        top = Table([[bill_to, meta]], colWidths=[width * 0.55, width * 0.45])
        top.setStyle(TableStyle([
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('LEFTPADDING', (0, 0), (-1, -1), 0),
            ('RIGHTPADDING', (0, 0), (-1, -1), 0),
        ]))

        item_rows = [[str(index), item.description, format_amount(item.amount, currency)]
                     for index, item in enumerate(invoice.items, 1)]
        items = render_table(['#', 'Description', 'Amount'], item_rows,
                             [ColumnRule(8, 'CENTER', False), ColumnRule(62), ColumnRule(30, 'RIGHT', False)],
                             width, font_size=9)

        totals = FeeDocumentService._totals_box([
            ('Subtotal', format_amount(invoice.subtotal, currency)),
            ('Discount', '- ' + format_amount(invoice.discount or 0, currency)),
            ('Paid', format_amount(invoice.total_paid, currency)),
            ('Balance Due', format_amount(invoice.balance, currency)),
        ], 70 * mm)
        totals_row = Table([['', totals]], colWidths=[width - 70 * mm, 70 * mm])
        totals_row.setStyle(TableStyle([('LEFTPADDING', (0, 0), (-1, -1), 0),
                                        ('RIGHTPADDING', (0, 0), (-1, -1), 0)]))

        story = [top, Spacer(1, 5 * mm), items, Spacer(1, 3 * mm), totals_row]
        if invoice.payments:
            payment_rows = [[format_date(p.paid_on), format_amount(p.amount, currency), display(p.method),
                             display(p.reference)] for p in invoice.payments]
            story.extend([
                Spacer(1, 5 * mm),
                section_heading('PAYMENT HISTORY', width),
                render_table(['Date', 'Amount', 'Method', 'Reference'], payment_rows,
                             [ColumnRule(20, 'CENTER', False), ColumnRule(25, 'RIGHT', False),
                              ColumnRule(25, 'CENTER'), ColumnRule(30, 'CENTER')], width, font_size=8.5),
            ])
        if invoice.notes:
            story.extend([Spacer(1, 4 * mm),
                          Paragraph(f'<b>Notes:</b> {xml_escape(invoice.notes)}', SMALL_STYLE)])
        story.extend([
            Spacer(1, 6 * mm),
            Paragraph('Thank you for your timely payment.', BODY_STYLE),
            Paragraph(f'Please pay before the due date to avoid a late fee. For queries contact '
                      f'{xml_escape(display(organization.phone))} or '
                      f'{xml_escape(display(organization.email))}.', SMALL_STYLE),
        ])
        pdf_bytes = document.build(story)
        filename = build_filename('Invoice', invoice.student_name, invoice.invoice_number)
        logger.info("Generated invoice %s (%s)", filename, status)
        return GeneratedArtifact('Invoice', filename, pdf_bytes, document.page_count)

    # ------------------------- Receipt -------------------------
    @staticmethod
    async def generate_receipt(receipt, assets=None, generated_on=None):
        """Generate a payment receipt."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(receipt)
        logo = await assets.load_logo()
        currency = Config.CURRENCY

        document = PaginatedDocument(
            'Receipt', pagesize=PORTRAIT, title=f'Receipt {receipt.receipt_number}',
            page_stamp=footer_stamp(generated_on, ('Received By', 'Accountant'), organization),
            header=lambda canv: draw_header(canv, 'PAYMENT RECEIPT', f'Receipt No. {receipt.receipt_number}',
                                            organization, logo),
        )
        width = document.body_width
        amount_box = Table([[format_amount(receipt.amount, currency)], [amount_in_words(receipt.amount)]],
                           colWidths=[width])
        amount_box.setStyle(TableStyle([
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('FONTNAME', (0, 0), (0, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (0, 0), 18),
            ('TEXTCOLOR', (0, 0), (0, 0), GOOD),
            ('FONTSIZE', (0, 1), (0, 1), 9),
            ('TEXTCOLOR', (0, 1), (0, 1), DARK),
            ('BOX', (0, 0), (-1, -1), 1, GOLD),
            ('BACKGROUND', (0, 0), (-1, -1), LIGHT_GRAY),
            ('TOPPADDING', (0, 0), (-1, -1), 5),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
        ]))
        story = [
            details_table([
                ('Receipt No.', receipt.receipt_number),
                ('Payment Date', format_date(receipt.paid_on)),
                ('Student', receipt.student_name),
                ('Student ID', receipt.student_id),
                ("Father's Name", display(receipt.father_name)),
                ('Class', class_label(receipt.class_name, receipt.section)),
                ('Description', display(receipt.description, 'Fee Payment')),
                ('Invoice No.', display(receipt.invoice_number)),
                ('Payment Method', display(receipt.method, 'Cash')),
                ('Reference', display(receipt.reference)),
            ], width, columns=2),
            Spacer(1, 6 * mm),
            amount_box,
        ]
        if receipt.balance_after is not None:
            story.extend([Spacer(1, 3 * mm), Paragraph(
                f'Remaining balance: <b>{format_amount(receipt.balance_after, currency)}</b>', BODY_STYLE)])
        if receipt.received_by:
            story.append(Paragraph(f'Received by: {xml_escape(receipt.received_by)}', SMALL_STYLE))
        story.extend([Spacer(1, 4 * mm),
                      Paragraph('This is a computer generated receipt.', SMALL_STYLE)])
        pdf_bytes = document.build(story)
        filename = build_filename('Receipt', receipt.student_name, receipt.receipt_number)
        logger.info("Generated receipt %s", filename)
        return GeneratedArtifact('Receipt', filename, pdf_bytes, document.page_count)

    # ------------------------- Fee reports -------------------------
    @staticmethod
    def class_fee_totals(entries):
        """(net assigned, collected, outstanding, collection rate) over a class"""
        assigned = sum(max(0, entry.assigned - entry.discount) for entry in entries)
        collected = sum(entry.paid for entry in entries)
        outstanding = sum(entry.balance for entry in entries)
        return assigned, collected, outstanding, collection_rate(collected, assigned)

    @staticmethod
    async def generate_class_fee_report(request, assets=None, generated_on=None):
        """Generate the fee collection report for a class."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(request)
        logo = await assets.load_logo()
        currency = Config.CURRENCY

        label = class_label(request.class_name, request.section)
        subtitle = label + (f'  |  {request.period}' if request.period else '')
        document = PaginatedDocument(
            'FeeReport', pagesize=PORTRAIT, title=f'Fee Report - {label}',
            page_stamp=footer_stamp(generated_on, ('Accountant', 'Principal'), organization),
            header=lambda canv: draw_header(canv, 'FEE COLLECTION REPORT', subtitle, organization, logo),
        )
        width = document.body_width
        assigned, collected, outstanding, rate = FeeDocumentService.class_fee_totals(request.entries)
        cards = stat_cards([
            ('Total Assigned', format_amount(assigned, currency), PRIMARY),
            ('Collected', format_amount(collected, currency), GOOD),
            ('Outstanding', format_amount(outstanding, currency), DANGER),
            ('Collection Rate', f'{rate:.1f}%', percentage_color(rate, Config.COLLECTION_GOOD_THRESHOLD,
                                                               Config.COLLECTION_WARNING_THRESHOLD)),
        ], width)

        rows = []
        for roll_number, entry in SortingHelpers.assign_roll_numbers(request.entries):
            net = max(0, entry.assigned - entry.discount)
            rows.append([
                roll_number, entry.student_id, entry.name, format_amount(entry.assigned, ''),
                format_amount(entry.discount, ''), format_amount(entry.paid, ''), format_amount(entry.balance, ''),
                f'{collection_rate(entry.paid, net):.1f}%', entry.resolved_status().capitalize(),
            ])
        table = render_table(
            ['Roll No.', 'Student ID', 'Name', 'Assigned', 'Discount', 'Paid', 'Balance', 'Paid %', 'Status'], rows,
            [ColumnRule(7, 'CENTER', False), ColumnRule(11, 'CENTER', False), ColumnRule(20),
             ColumnRule(11, 'RIGHT', False), ColumnRule(10, 'RIGHT', False), ColumnRule(11, 'RIGHT', False),
             ColumnRule(11, 'RIGHT', False), ColumnRule(9, 'CENTER', False), ColumnRule(10, 'CENTER', False)],
            width, column_styler({7: collection_rate_cell_style, 8: fee_status_cell_style}), font_size=8,
        )
        story = [
            cards,
            Spacer(1, 5 * mm),
            Paragraph(f'Amounts in {currency}', SMALL_STYLE),
            table,
            Spacer(1, 3 * mm),
            Paragraph(f'<b>Total Students: {len(rows)}</b>', BODY_STYLE),
        ]
        pdf_bytes = document.build(story)
        filename = build_filename('FeeReport', request.class_name, request.period or request.section or 'All')
        logger.info("Generated class fee report %s (collection rate %.1f%%)", filename, rate)
        return GeneratedArtifact('FeeReport', filename, pdf_bytes, document.page_count, len(rows))

    @staticmethod
    async def generate_individual_fee_report(request, assets=None, generated_on=None):
        """Generate one student's fee statement with payments received."""
        assets = assets or AssetLoader()
        generated_on = generated_on or now()
        organization = resolve_organization(request)
        logo = await assets.load_logo()
        currency = Config.CURRENCY
        as_of = generated_on.date()

        document = PaginatedDocument(
            'FeeReport', pagesize=PORTRAIT, title=f'Fee Statement - {request.name}',
            page_stamp=footer_stamp(generated_on, ('Accountant', 'Principal'), organization),
            header=lambda canv: draw_header(canv, 'STUDENT FEE STATEMENT', request.period, organization, logo),
        )
        width = document.body_width
        total = sum(max(0, line.amount - line.discount) for line in request.lines)
        paid = sum(line.paid for line in request.lines)
        balance = sum(line.balance for line in request.lines)

        rows = [[line.description, format_amount(line.amount, ''), format_amount(line.discount, ''),
                 format_amount(line.paid, ''), format_amount(line.balance, ''), format_date(line.due_date),
                 line.resolved_status(as_of).capitalize()] for line in request.lines]
        table = render_table(
            ['Fee', 'Amount', 'Discount', 'Paid', 'Balance', 'Due Date', 'Status'], rows,
            [ColumnRule(26), ColumnRule(13, 'RIGHT', False), ColumnRule(12, 'RIGHT', False),
             ColumnRule(13, 'RIGHT', False), ColumnRule(13, 'RIGHT', False), ColumnRule(12, 'CENTER', False),
             ColumnRule(11, 'CENTER', False)],
            width, column_styler({6: fee_status_cell_style}), font_size=8.5,
        )
        story = [
            details_table([
                ('Student', request.name),
                ('Student ID', request.student_id),
                ("Father's Name", display(request.father_name)),
                ('Class', class_label(request.class_name, request.section)),
            ], width),
            Spacer(1, 4 * mm),
            stat_cards([
                ('Total Payable', format_amount(total, currency), PRIMARY),
                ('Paid', format_amount(paid, currency), GOOD),
                ('Balance', format_amount(balance, currency), DANGER if balance else GOOD),
            ], width),
            Spacer(1, 5 * mm),
            Paragraph('Fee Details', TITLE_STYLE),
            table,
        ]
        if request.payments:
            payment_rows = [[format_date(p.paid_on), format_amount(p.amount, currency), display(p.method),
                             display(p.reference)] for p in request.payments]
            story.extend([
                Spacer(1, 5 * mm),
                section_heading('PAYMENTS RECEIVED', width),
                render_table(['Date', 'Amount', 'Method', 'Reference'], payment_rows,
                             [ColumnRule(20, 'CENTER', False), ColumnRule(25, 'RIGHT', False),
                              ColumnRule(25, 'CENTER'), ColumnRule(30, 'CENTER')], width, font_size=8.5),
            ])
        pdf_bytes = document.build(story)
        filename = build_filename('FeeReport', request.name, request.period or request.student_id)
        logger.info("Generated fee statement %s", filename)
        return GeneratedArtifact('FeeReport', filename, pdf_bytes, document.page_count)
