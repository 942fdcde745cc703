"""
PDF registration form for Bible Quiz groups.

The form is printed, signed by the group leader and the priest in
charge, stamped with the church seal and mailed back to the organisers.
Everything has to fit on a single A4 page.
"""
import io
import logging
from xml.sax.saxutils import escape

from django.conf import settings
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import KeepTogether, SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from .utils import format_dob

logger = logging.getLogger(__name__)

PRIMARY_COLOR = colors.HexColor('#dc2626')
DARK_COLOR = colors.HexColor('#7f1d1d')
MUTED_COLOR = colors.HexColor('#999999')

PAGE_MARGIN = 1.2 * cm
# Two-column blocks split the printable width in half around the page centre
COLUMN_WIDTH = 9 * cm
PARTICIPANT_ROWS = 8
PARTICIPANT_ROW_HEIGHT = 0.55 * cm
PARTICIPANT_COLUMNS = ['No.', 'Name', 'Gender', 'Date of Birth', 'Mobile Number']
SIGNATURE_LINE = '_____________________'
SEAL_PLACEHOLDER = '[PLEASE AFFIX OFFICIAL CHURCH STAMP HERE]'

INSTRUCTIONS = [
    "This form must be signed by the Group Leader and the Priest in Charge.",
    "Official church seal/stamp must be affixed on the designated area.",
    "Mail this completed and signed form to: {forms_email}",
    "Registration is only complete after we receive this signed form.",
    "All participants must carry valid ID proof on the quiz day.",
    "Late submissions will not be entertained.",
    "Minimum 2 participants required per team.",
]

LEADER_DECLARATION = (
    "I, {leader}, hereby declare that the above details are true as of my knowledge "
    "and belief. I hereby agree to follow the rules and regulations of {event}."
)

PRIEST_DECLARATION = (
    "I certify that the participants mentioned above are from the youth fellowship of "
    "my parish and the details provided above are genuine. I have verified their "
    "eligibility and approve their participation in {event}."
)


def registration_form_filename(group_number):
    return f"{settings.QUIZ_FILE_PREFIX}_Registration_Group{group_number}.pdf"


def _styles():
    styles = getSampleStyleSheet()
    return {
        'title': ParagraphStyle(
            'FormTitle',
            parent=styles['Heading1'],
            fontSize=18,
            leading=22,
            textColor=PRIMARY_COLOR,
            alignment=TA_CENTER,
            spaceBefore=0,
            spaceAfter=2,
        ),
        'subtitle': ParagraphStyle(
            'FormSubtitle',
            parent=styles['Heading2'],
            fontSize=12,
            leading=15,
            textColor=DARK_COLOR,
            alignment=TA_CENTER,
            spaceBefore=0,
            spaceAfter=2,
        ),
        'group': ParagraphStyle(
            'GroupNumber',
            parent=styles['Normal'],
            fontName='Helvetica-Bold',
            fontSize=11,
            leading=14,
            alignment=TA_CENTER,
            spaceAfter=4,
        ),
        'section': ParagraphStyle(
            'SectionHeading',
            parent=styles['Heading3'],
            fontSize=11,
            leading=13,
            textColor=PRIMARY_COLOR,
            spaceBefore=6,
            spaceAfter=3,
        ),
        'body': ParagraphStyle(
            'FormBody',
            parent=styles['Normal'],
            fontSize=9,
            leading=11,
        ),
        'small': ParagraphStyle(
            'FormSmall',
            parent=styles['Normal'],
            fontSize=8.5,
            leading=10.5,
        ),
        'cell': ParagraphStyle(
            'Cell',
            parent=styles['Normal'],
            fontSize=8.5,
            leading=10,
        ),
        'seal': ParagraphStyle(
            'Seal',
            parent=styles['Normal'],
            fontSize=9,
            textColor=MUTED_COLOR,
            alignment=TA_CENTER,
        ),
    }


def _two_columns(left, right, extra_style=()):
    table = Table([[left, right]], colWidths=[COLUMN_WIDTH, COLUMN_WIDTH])
    table.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')] + list(extra_style)))
    return table


def _leader_details(data, styles):
    def field(label, value):
        return Paragraph(f"<b>{label}:</b> {escape(str(value or 'N/A'))}", styles['body'])

    rows = [
        [field('Group Leader Name', data['group_leader_name']), field('Church', data['church'])],
        [field('Location', data['location']), field('Zone', data['zone'])],
        [field('Language of Quiz', data['lang_of_quiz']), field('Email Address', data['mail_id'])],
        [field('Contact No.', data['contact_no']), field('Alternate No.', data.get('alternate_no'))],
    ]
    table = Table(rows, colWidths=[COLUMN_WIDTH, COLUMN_WIDTH])
    table.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('TOPPADDING', (0, 0), (-1, -1), 1),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
    ]))
    return table


def _participants_table(participants, styles):
    rows = [list(PARTICIPANT_COLUMNS)]
    for index, participant in enumerate(participants, start=1):
        rows.append([
            str(index),
            Paragraph(escape(participant['name']), styles['cell']),
            participant['gender'],
            format_dob(participant['dob']),
            participant.get('mobile_no') or 'N/A',
        ])
    # Blank rows so the printed form always has eight slots
    for index in range(len(participants) + 1, PARTICIPANT_ROWS + 1):
        rows.append([str(index), '', '', '', ''])

    table = Table(
        rows,
        colWidths=[1.2 * cm, 7 * cm, 2.6 * cm, 3.2 * cm, 4 * cm],
        rowHeights=[PARTICIPANT_ROW_HEIGHT] * len(rows),
    )
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), PRIMARY_COLOR),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 8.5),
        ('ALIGN', (0, 0), (0, -1), 'CENTER'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('TOPPADDING', (0, 0), (-1, -1), 2),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
        ('GRID', (0, 0), (-1, -1), 0.75, DARK_COLOR),
    ]))
    return table


def _declarations(leader, event_name, styles):
    leader_cell = [
        Paragraph('<b>Declaration of Group Leader</b>', styles['body']),
        Spacer(1, 2),
        Paragraph(LEADER_DECLARATION.format(leader=escape(leader), event=escape(event_name)), styles['small']),
        Spacer(1, 8),
        Paragraph(f"Signature: {SIGNATURE_LINE}", styles['body']),
        Spacer(1, 5),
        Paragraph(f"Date: {SIGNATURE_LINE}", styles['body']),
    ]
    priest_cell = [
        Paragraph('<b>Declaration of Priest in Charge</b>', styles['body']),
        Spacer(1, 2),
        Paragraph(PRIEST_DECLARATION.format(event=escape(event_name)), styles['small']),
        Spacer(1, 5),
        Paragraph(f"Priest Name: {SIGNATURE_LINE}", styles['body']),
        Spacer(1, 5),
        Paragraph(f"Signature: {SIGNATURE_LINE}", styles['body']),
        Spacer(1, 5),
        Paragraph(f"Date: {SIGNATURE_LINE}", styles['body']),
    ]
    return _two_columns(leader_cell, priest_cell, [
        ('BOX', (0, 0), (0, 0), 0.75, DARK_COLOR),
        ('BOX', (1, 0), (1, 0), 0.75, DARK_COLOR),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ])


def _seal_box(styles):
    table = Table(
        [[Paragraph('<b>Church Seal:</b>', styles['body']), Paragraph(SEAL_PLACEHOLDER, styles['seal'])]],
        colWidths=[3 * cm, 2 * COLUMN_WIDTH - 3 * cm],
        rowHeights=[1.2 * cm],
    )
    table.setStyle(TableStyle([
        ('BOX', (0, 0), (-1, -1), 1, MUTED_COLOR),
        ('VALIGN', (0, 0), (0, 0), 'TOP'),
        ('VALIGN', (1, 0), (1, 0), 'MIDDLE'),
    ]))
    return table


def _instructions(forms_email, styles):
    items = [
        Paragraph(f"{number}. {escape(text.format(forms_email=forms_email))}", styles['small'])
        for number, text in enumerate(INSTRUCTIONS, start=1)
    ]
    return _two_columns(items[:4], items[4:], [
        ('TOPPADDING', (0, 0), (-1, -1), 1),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 1),
    ])


def render_registration_form(data, group_number, event_name=None, forms_email=None):
    """
    Render the printable registration form for one group.

    Args:
        data: cleaned registration data (see validate_quiz_registration)
        group_number: allocated group number
        event_name: title printed on the form, defaults to QUIZ_EVENT_NAME
        forms_email: address the signed form is mailed to, defaults to QUIZ_FORMS_EMAIL

    Returns:
        PDF document as bytes
    """
    event_name = event_name or settings.QUIZ_EVENT_NAME
    forms_email = forms_email or settings.QUIZ_FORMS_EMAIL
    styles = _styles()

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=PAGE_MARGIN,
        leftMargin=PAGE_MARGIN,
        topMargin=1 * cm,
        bottomMargin=1.3 * cm,
        title=f"{event_name} - Group {group_number}",
        author=settings.QUIZ_ORGANISER_NAME,
    )

    def draw_footer(canvas, document):
        canvas.saveState()
        canvas.setFont('Helvetica', 8)
        canvas.setFillColor(MUTED_COLOR)
        canvas.drawCentredString(
            A4[0] / 2, 0.6 * cm,
            f"© {event_name} - For queries, contact the organizing committee",
        )
        canvas.restoreState()

    content = [
        Paragraph(escape(event_name), styles['title']),
        Paragraph('Registration Form', styles['subtitle']),
        Paragraph(f"Group Number: {escape(str(group_number))}", styles['group']),
        Paragraph('Group Leader Details', styles['section']),
        _leader_details(data, styles),
        Paragraph('Participants Details', styles['section']),
        _participants_table(data['participants'], styles),
        Spacer(1, 6),
        _declarations(data['group_leader_name'], event_name, styles),
        Spacer(1, 6),
        _seal_box(styles),
        KeepTogether([
            Paragraph('Important Instructions', styles['section']),
            _instructions(forms_email, styles),
        ]),
    ]

    logger.info(f"Generating PDF for group {group_number}...")
    doc.build(content, onFirstPage=draw_footer, onLaterPages=draw_footer)

    pdf_bytes = buffer.getvalue()
    buffer.close()
    logger.info(f"PDF generated, size: {len(pdf_bytes)} bytes")
    return pdf_bytes
