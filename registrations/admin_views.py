"""
Staff views for exporting quiz registrations and re-downloading a
group's registration form.
"""
import csv
from django.shortcuts import redirect, get_object_or_404
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.db.models import Q
from django.utils import timezone
from django.http import HttpResponse
from .models import QuizRegistration
from .pdf import render_registration_form, registration_form_filename
from .utils import format_dob

EXPORT_HEADERS = [
    'Group Number', 'Group Leader', 'Church', 'Location', 'Zone', 'Language',
    'Contact No', 'Alternate No', 'Email', 'Total Participants',
    'Participant No', 'Participant Name', 'Gender', 'Date of Birth', 'Participant Mobile',
    'Registered At',
]


def _get_filtered_registrations_queryset(request):
    """
    Registrations filtered by the ?zone=, ?lang= and ?search= query parameters.
    """
    registrations = QuizRegistration.objects.prefetch_related('participants').order_by('created_at')

    zone = request.GET.get('zone', '')
    if zone:
        registrations = registrations.filter(zone=zone)

    lang = request.GET.get('lang', '')
    if lang:
        registrations = registrations.filter(lang_of_quiz=lang)

    search = request.GET.get('search', '').strip()
    if search:
        registrations = registrations.filter(
            Q(group_leader_name__icontains=search) |
            Q(church__icontains=search) |
            Q(mail_id__icontains=search) |
            Q(group_number=search)
        )
    return registrations


def write_registrations_csv(response, registrations):
    """
    Write one CSV row per participant, repeating the group columns.
    """
    writer = csv.writer(response)
    writer.writerow(EXPORT_HEADERS)
    for r in registrations:
        group_columns = [
            r.group_number,
            r.group_leader_name,
            r.church,
            r.location,
            r.get_zone_display(),
            r.lang_of_quiz,
            r.contact_no,
            r.alternate_no or '',
            r.mail_id,
            r.total_participants,
        ]
        registered_at = timezone.localtime(r.created_at).strftime('%Y-%m-%d %H:%M') if r.created_at else ''
        participants = list(r.participants.all())
        if not participants:
            writer.writerow(group_columns + ['', '', '', '', '', registered_at])
        for index, p in enumerate(participants, start=1):
            writer.writerow(group_columns + [
                index,
                p.name,
                p.gender,
                format_dob(p.dob),
                p.mobile_no or '',
                registered_at,
            ])
    return response


def registrations_csv_response(registrations):
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = (
        'attachment; filename="quiz_registrations_%s.csv"' % timezone.now().strftime('%Y-%m-%d_%H-%M')
    )
    return write_registrations_csv(response, registrations)


@login_required
def export_quiz_registrations(request):
    """
    Export quiz registrations with their participants as CSV.
    """
    if not request.user.is_staff:
        messages.error(request, 'You do not have permission to access this page.')
        return redirect('admin:login')
    return registrations_csv_response(_get_filtered_registrations_queryset(request))


@login_required
def download_registration_form(request, registration_id):
    """
    Re-render the printable registration form for a stored group.
    """
    if not request.user.is_staff:
        messages.error(request, 'You do not have permission to access this page.')
        return redirect('admin:login')

    registration = get_object_or_404(QuizRegistration, id=registration_id)
    pdf_bytes = render_registration_form(registration.to_form_data(), registration.group_number)

    response = HttpResponse(pdf_bytes, content_type='application/pdf')
    response['Content-Disposition'] = (
        f'attachment; filename="{registration_form_filename(registration.group_number)}"'
    )
    return response
