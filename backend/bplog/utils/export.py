"""
PDF summary report of the reading log.
"""
import io
import logging
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from bplog.utils.classification import classify_bp
from bplog.utils.ranges import local_datetime

logger = logging.getLogger(__name__)

RECENT_LIMIT = 20


def _format_average(averages):
    if averages is None or averages.count == 0:
        return 'Insufficient data'
    return f"{averages.systolic}/{averages.diastolic} mmHg"


def generate_readings_pdf(readings, averages, generated_at, range_label='All time', tz=None):
    """Generate a PDF report for the reading log.

    Args:
        readings: Reading records in the reported window
        averages: `Averages` for the same window
        generated_at: datetime shown in the header
        range_label: Human label for the window
        tz: Zone used to print reading times

    Returns:
        BytesIO object containing PDF data
    """
    output = io.BytesIO()
    doc = SimpleDocTemplate(output, pagesize=letter, topMargin=0.5*inch, bottomMargin=0.5*inch)

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'CustomTitle',
        parent=styles['Heading1'],
        fontSize=18,
        spaceAfter=20,
    )
    heading_style = ParagraphStyle(
        'CustomHeading',
        parent=styles['Heading2'],
        fontSize=14,
        spaceBefore=15,
        spaceAfter=10,
    )
    normal_style = styles['Normal']

    elements = []

    elements.append(Paragraph("Blood Pressure Report", title_style))
    elements.append(Paragraph(f"Generated: {generated_at.strftime('%B %d, %Y at %H:%M')}", normal_style))
    elements.append(Paragraph(f"Period: {range_label}", normal_style))
    elements.append(Spacer(1, 20))

    # Summary
    elements.append(Paragraph("Summary", heading_style))

    newest_first = sorted(readings, key=lambda r: r.timestamp, reverse=True)

    summary = []
    summary.append(['Total Readings:', str(len(newest_first))])
    summary.append(['Average:', _format_average(averages)])
    if averages is not None and averages.pulse is not None:
        summary.append(['Average Pulse:', f"{averages.pulse} bpm"])
    else:
        summary.append(['Average Pulse:', 'N/A'])

    if newest_first:
        latest = newest_first[0]
        category = classify_bp(latest.systolic, latest.diastolic).value
        summary.append(['Latest Reading:', f"{latest.systolic}/{latest.diastolic} mmHg ({category})"])
        summary.append(['Latest Date:', local_datetime(latest.timestamp, tz).strftime('%B %d, %Y')])

    summary_table = Table(summary, colWidths=[2*inch, 4*inch])
    summary_table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('ALIGN', (0, 0), (0, -1), 'RIGHT'),
        ('ALIGN', (1, 0), (1, -1), 'LEFT'),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
    ]))
    elements.append(summary_table)
    elements.append(Spacer(1, 15))

    if newest_first:
        elements.append(Paragraph(f"Recent Readings (Last {RECENT_LIMIT})", heading_style))

        reading_data = [['Date', 'Systolic', 'Diastolic', 'Pulse', 'Category']]
        for r in newest_first[:RECENT_LIMIT]:
            reading_data.append([
                local_datetime(r.timestamp, tz).strftime('%m/%d/%Y %H:%M'),
                str(r.systolic),
                str(r.diastolic),
                str(r.pulse) if r.pulse is not None else 'N/A',
                classify_bp(r.systolic, r.diastolic).value,
            ])

        reading_table = Table(reading_data, colWidths=[1.5*inch, 1*inch, 1*inch, 1*inch, 1*inch])
        reading_table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
            ('TOPPADDING', (0, 0), (-1, -1), 5),
        ]))
        elements.append(reading_table)
    else:
        elements.append(Paragraph("No readings recorded in this period.", normal_style))

    doc.build(elements)
    output.seek(0)
    logger.debug('Rendered PDF report with %d readings', len(newest_first))
    return output
