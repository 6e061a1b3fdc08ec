"""Render sample Certificate of Currency PDFs with reportlab."""

import io
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..engines.abn_validator import format_abn
from ..engines.insurer_catalog import DEFAULT_INSURER_CATALOG
from ..models.policy import ExtractedPolicyData, format_coverage_type
from ..models.verification import format_money


def render_certificate_pdf(
    data: ExtractedPolicyData,
    output: Optional[str] = None,
    creator: str = "Guidewire PolicyCenter",
    author: Optional[str] = None,
) -> bytes:
    """
    Render a one-page certificate for the given policy data.

    Args:
        data: Certificate contents
        output: Optional file path to write the PDF to
        creator: Authoring application recorded in the PDF /Creator field
        author: Optional /Author field; defaults to the insurer name

    Returns:
        The PDF bytes
    """
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        title="Certificate of Currency",
        author=author or data.insurer_name,
        creator=creator,
    )
    styles = getSampleStyleSheet()

    template = DEFAULT_INSURER_CATALOG.find(data.insurer_name)
    heading = template.header_format if template else f"{data.insurer_name} Certificate of Currency"
    brand = colors.HexColor(template.color_scheme[0]) if template and template.color_scheme else colors.black

    title_style = ParagraphStyle(
        'CertificateTitle',
        parent=styles['Heading1'],
        fontSize=16,
        textColor=brand,
        spaceAfter=20,
        alignment=TA_CENTER
    )

    story = [Paragraph(heading.upper(), title_style), Spacer(1, 0.2 * inch)]

    details = [
        ['Insured:', data.insured_party_name],
        ['ABN:', format_abn(data.insured_party_abn)],
        ['Address:', data.insured_party_address],
        ['Insurer:', data.insurer_name],
        ['Policy Number:', data.policy_number],
        ['Period of Insurance:', f"{data.period_of_insurance_start} to {data.period_of_insurance_end}"],
        ['Broker:', data.broker_name],
    ]
    details_table = Table(details, colWidths=[1.8 * inch, 4.2 * inch])
    details_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (0, -1), colors.lightgrey),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('GRID', (0, 0), (-1, -1), 1, colors.black),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ]))
    story.append(details_table)
    story.append(Spacer(1, 0.3 * inch))

    story.append(Paragraph("<b>COVERAGE SCHEDULE</b>", styles['Heading2']))
    rows = [['Coverage', 'Limit', 'Basis', 'Excess', 'Extensions']]
    for coverage in data.coverages:
        extensions = []
        if coverage.principal_indemnity:
            extensions.append('Principal Indemnity')
        if coverage.cross_liability:
            extensions.append('Cross Liability')
        if coverage.state:
            extensions.append(f'{coverage.state} scheme')
        rows.append([
            format_coverage_type(coverage.type),
            format_money(coverage.limit),
            coverage.limit_type.replace('_', ' ').title(),
            format_money(coverage.excess),
            ', '.join(extensions) or '-',
        ])
    coverage_table = Table(rows)
    coverage_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), brand),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
    ]))
    story.append(coverage_table)
    story.append(Spacer(1, 0.3 * inch))

    story.append(Paragraph(
        "This certificate is issued as a matter of information only and confers no "
        "rights upon the certificate holder.",
        styles['Italic']
    ))

    doc.build(story)
    pdf_bytes = buffer.getvalue()

    if output:
        with open(output, 'wb') as f:
            f.write(pdf_bytes)
    return pdf_bytes
