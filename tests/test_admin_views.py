"""
Tests for staff tooling: CSV export, form re-download, the Django admin
and the resend_quiz_confirmation management command.
"""
import csv
import io
import uuid

import pytest
from django.core import mail
from django.core.management import call_command
from django.core.management.base import CommandError
from django.urls import reverse

pytestmark = pytest.mark.django_db

EXPORT_URL = '/admin-panel/quiz-registrations/export/'


def _rows(response):
    return list(csv.reader(io.StringIO(response.content.decode())))


@pytest.fixture
def two_groups(make_registration):
    first = make_registration()
    second = make_registration(
        mailId='youth@grace.org', verificationEmail='youth@grace.org',
        church='Grace Church', zone='North',
    )
    return first, second


class TestAccess:

    def test_anonymous_redirected_to_login(self, client):
        response = client.get(EXPORT_URL)
        assert response.status_code == 302
        assert response.url.startswith('/admin/login/')

    def test_non_staff_redirected(self, client, django_user_model):
        user = django_user_model.objects.create_user(username='member', password='member-pass-123')
        client.force_login(user)
        response = client.get(EXPORT_URL)
        assert response.status_code == 302
        assert response.url == reverse('admin:login')


class TestCsvExport:

    def test_one_row_per_participant(self, staff_client, two_groups):
        response = staff_client.get(EXPORT_URL)
        assert response.status_code == 200
        assert response['Content-Type'] == 'text/csv'
        assert 'quiz_registrations_' in response['Content-Disposition']

        rows = _rows(response)
        assert rows[0][0] == 'Group Number'
        assert len(rows) == 1 + 4
        first = rows[1]
        assert first[0] == '1'
        assert first[2] == 'St. Paul Church'
        assert first[4] == 'South Zone'
        assert first[11] == 'Asha Thomas'
        assert first[13] == '12-04-2005'

    def test_filter_by_zone(self, staff_client, two_groups):
        rows = _rows(staff_client.get(EXPORT_URL, {'zone': 'North'}))
        assert {row[2] for row in rows[1:]} == {'Grace Church'}

    def test_search(self, staff_client, two_groups):
        rows = _rows(staff_client.get(EXPORT_URL, {'search': 'paul'}))
        assert {row[2] for row in rows[1:]} == {'St. Paul Church'}


class TestFormDownload:

    def test_pdf(self, staff_client, make_registration):
        registration = make_registration()
        response = staff_client.get(reverse('download_registration_form', args=[registration.id]))
        assert response.status_code == 200
        assert response['Content-Type'] == 'application/pdf'
        assert 'BibleQuiz2025_Registration_Group1.pdf' in response['Content-Disposition']
        assert response.content.startswith(b'%PDF')

    def test_unknown_registration(self, staff_client):
        response = staff_client.get(reverse('download_registration_form', args=[uuid.uuid4()]))
        assert response.status_code == 404


class TestDjangoAdmin:

    def test_changelist(self, admin_client, two_groups):
        response = admin_client.get(reverse('admin:registrations_quizregistration_changelist'))
        assert response.status_code == 200
        assert b'Grace Church' in response.content

    def test_change_page_shows_participants(self, admin_client, make_registration):
        registration = make_registration()
        response = admin_client.get(
            reverse('admin:registrations_quizregistration_change', args=[registration.id])
        )
        assert response.status_code == 200
        assert b'Asha Thomas' in response.content

    def test_export_action(self, admin_client, two_groups):
        first, _ = two_groups
        response = admin_client.post(
            reverse('admin:registrations_quizregistration_changelist'),
            {'action': 'export_as_csv', '_selected_action': [str(first.id)]},
        )
        assert response.status_code == 200
        rows = _rows(response)
        assert len(rows) == 1 + 2
        assert {row[2] for row in rows[1:]} == {'St. Paul Church'}


class TestResendCommand:

    def test_resends(self, make_registration):
        make_registration()
        out = io.StringIO()
        call_command('resend_quiz_confirmation', '1', stdout=out)
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ['leader@stpaul.org']
        assert mail.outbox[0].attachments[0][0] == 'BibleQuiz2025_Registration_Group1.pdf'
        assert 'sent to leader@stpaul.org' in out.getvalue()

    def test_override_recipient(self, make_registration):
        make_registration()
        call_command('resend_quiz_confirmation', '1', '--to', 'office@example.com', stdout=io.StringIO())
        assert mail.outbox[0].to == ['office@example.com']

    def test_unknown_group(self):
        with pytest.raises(CommandError):
            call_command('resend_quiz_confirmation', '42', stdout=io.StringIO())
