"""
PDF Report Generator for Roofing Estimates
Renders an itemized estimate as a single-page letter-size PDF
"""

import io
import os
from datetime import datetime
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from roof_estimator.models.estimate import Estimate
from roof_estimator.utils import format_currency, format_estimate_range, format_number

DISCLAIMER = (
    "This estimate is based on the information provided and industry-average "
    "pricing. Final pricing requires an on-site inspection and may vary with "
    "roof condition, access and local code requirements."
)


class EstimatePDFGenerator:
    """Generates PDF documents for roofing estimates"""

    PRIMARY = colors.HexColor('#1E3A5F')
    LIGHT = colors.HexColor('#EEF2F7')
    BLACK = colors.black

    def __init__(self, estimate: Estimate,
                 company_name: Optional[str] = None,
                 company_phone: Optional[str] = None,
                 company_email: Optional[str] = None,
                 client_name: Optional[str] = None):
        self.estimate = estimate
        self.company_name = company_name or "Roofing Estimate"
        self.company_phone = company_phone
        self.company_email = company_email
        self.client_name = client_name
        self.styles = getSampleStyleSheet()

    def generate(self, output_path: str) -> str:
        """
        Generate PDF file at output_path and return the path
        """
        dir_path = os.path.dirname(output_path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)

        self._build(output_path)
        return output_path

    def generate_bytes(self) -> bytes:
        """Render the PDF in memory"""
        buffer = io.BytesIO()
        self._build(buffer)
        return buffer.getvalue()

    def _build(self, target):
        doc = SimpleDocTemplate(
            target,
            pagesize=letter,
            rightMargin=0.5*inch,
            leftMargin=0.5*inch,
            topMargin=0.4*inch,
            bottomMargin=0.4*inch,
            title=f"Roofing Estimate {self.estimate.id}",
        )

        story = []
        story.extend(self._build_header())
        story.extend(self._build_range())
        story.extend(self._build_project_summary())
        story.extend(self._build_itemized_table())
        story.extend(self._build_disclaimer())

        doc.build(story)

    def _section_title(self, text: str) -> Paragraph:
        style = ParagraphStyle(
            'SectionTitle',
            parent=self.styles['Normal'],
            fontSize=11,
            textColor=self.BLACK,
            spaceAfter=6,
            alignment=TA_LEFT,
            fontName='Helvetica-Bold'
        )
        return Paragraph(f"<b>{text}</b>", style)

    def _build_header(self):
        """Company name, title, date and estimate id"""
        elements = []

        header_table = Table([[self.company_name, 'Roofing Estimate']], colWidths=[4*inch, 3*inch])
        header_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, -1), self.PRIMARY),
            ('TEXTCOLOR', (0, 0), (-1, -1), colors.white),
            ('FONTNAME', (0, 0), (-1, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (0, 0), 16),
            ('FONTSIZE', (1, 0), (1, 0), 18),
            ('ALIGN', (0, 0), (0, 0), 'LEFT'),
            ('ALIGN', (1, 0), (1, 0), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('TOPPADDING', (0, 0), (-1, -1), 12),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 12),
            ('LEFTPADDING', (0, 0), (-1, -1), 12),
            ('RIGHTPADDING', (0, 0), (-1, -1), 12),
        ]))
        elements.append(header_table)

        contact = [value for value in (self.company_phone, self.company_email) if value]
        date_str = self.estimate.created_at.strftime("%B %d, %Y")
        meta_parts = [f"Generated: {date_str}", f"Estimate ID: {self.estimate.id}"]
        if self.client_name:
            meta_parts.insert(0, f"Prepared for: {self.client_name}")
        meta_parts.extend(contact)

        meta_table = Table([[" | ".join(meta_parts)]], colWidths=[7*inch])
        meta_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, -1), self.PRIMARY),
            ('TEXTCOLOR', (0, 0), (-1, -1), colors.white),
            ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('TOPPADDING', (0, 0), (-1, -1), 6),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
            ('LEFTPADDING', (0, 0), (-1, -1), 12),
        ]))
        elements.append(meta_table)
        elements.append(Spacer(1, 0.15*inch))

        return elements

    def _build_range(self):
        """Expected cost with the low-high range underneath"""
        elements = []

        value_style = ParagraphStyle(
            'RangeValue',
            parent=self.styles['Normal'],
            fontSize=22,
            leading=26,
            alignment=TA_CENTER,
            fontName='Helvetica-Bold',
            textColor=self.PRIMARY,
        )
        sub_style = ParagraphStyle(
            'RangeSub',
            parent=self.styles['Normal'],
            fontSize=9,
            alignment=TA_CENTER,
        )

        range_table = Table([
            [Paragraph("ESTIMATE RANGE", sub_style)],
            [Paragraph(format_currency(self.estimate.mid_estimate), value_style)],
            [Paragraph("Expected Cost", sub_style)],
            [Paragraph(
                f"Range: {format_estimate_range(self.estimate.low_estimate, self.estimate.high_estimate)}",
                sub_style,
            )],
        ], colWidths=[7*inch])
        range_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, -1), self.LIGHT),
            ('TOPPADDING', (0, 0), (-1, -1), 4),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
        ]))
        elements.append(range_table)
        elements.append(Spacer(1, 0.15*inch))

        return elements

    def _build_project_summary(self):
        elements = [self._section_title("Project Summary")]

        project = self.estimate.project
        summary_data = [
            ['Location', project.location_text, 'Roof Area', f"{format_number(self.estimate.roof_area_sqft)} sq ft"],
            ['Pitch', project.pitch_descriptor, 'Material', project.shingle_type.display_name],
            ['Stories', str(project.story_count), 'Roofing Squares', str(self.estimate.square_count)],
        ]

        summary_table = Table(summary_data, colWidths=[1.0*inch, 2.5*inch, 1.2*inch, 2.3*inch])
        summary_table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTNAME', (2, 0), (2, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('BACKGROUND', (0, 0), (0, -1), self.LIGHT),
            ('BACKGROUND', (2, 0), (2, -1), self.LIGHT),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('TOPPADDING', (0, 0), (-1, -1), 5),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ]))
        elements.append(summary_table)
        elements.append(Spacer(1, 0.15*inch))

        return elements

    def _build_itemized_table(self):
        """Line items in generation order followed by the subtotal"""
        elements = [self._section_title("Itemized Breakdown")]

        item_style = ParagraphStyle(
            'Item',
            parent=self.styles['Normal'],
            fontSize=8,
            leading=10,
        )

        table_data = [['Description', 'Qty', 'Unit', 'Total']]
        for item in self.estimate.line_items:
            text = f"<b>{escape(item.name)}</b>"
            if item.description:
                text += f"<br/>{escape(item.description)}"
            table_data.append([
                Paragraph(text, item_style),
                format_number(item.quantity),
                item.unit,
                format_currency(item.line_total),
            ])
        table_data.append(['Subtotal', '', '', format_currency(self.estimate.subtotal)])

        itemized_table = Table(table_data, colWidths=[4.2*inch, 0.9*inch, 0.7*inch, 1.2*inch])
        itemized_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), self.PRIMARY),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('ALIGN', (1, 0), (2, -1), 'CENTER'),
            ('ALIGN', (3, 0), (3, -1), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
            ('BACKGROUND', (0, -1), (-1, -1), self.LIGHT),
            ('TOPPADDING', (0, 0), (-1, -1), 5),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ]))
        elements.append(itemized_table)
        elements.append(Spacer(1, 0.15*inch))

        return elements

    def _build_disclaimer(self):
        note_style = ParagraphStyle(
            'Disclaimer',
            parent=self.styles['Normal'],
            fontSize=8,
            leading=10,
            textColor=colors.grey,
        )
        return [
            Paragraph(DISCLAIMER, note_style),
            Spacer(1, 0.1*inch),
            Paragraph("Generated by Roof Estimator", note_style),
        ]


def generate_pdf_for_estimate(estimate: Estimate, output_dir: str = "pdfs", **kwargs) -> str:
    """
    Convenience function to write an estimate PDF into output_dir
    """
    os.makedirs(output_dir, exist_ok=True)

    filename = f"estimate_{estimate.id}_{datetime.now().strftime('%Y%m%d')}.pdf"
    output_path = os.path.join(output_dir, filename)

    return EstimatePDFGenerator(estimate, **kwargs).generate(output_path)
