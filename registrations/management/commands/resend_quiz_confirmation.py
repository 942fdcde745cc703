"""
Management command to re-send a group's registration confirmation.
Usage: python manage.py resend_quiz_confirmation <group_number> [--to EMAIL]
"""
from django.core.management.base import BaseCommand, CommandError
from registrations.models import QuizRegistration
from registrations.pdf import render_registration_form
from registrations.emails import send_quiz_registration_email


class Command(BaseCommand):
    help = 'Re-renders the registration form PDF for a quiz group and emails it again'

    def add_arguments(self, parser):
        parser.add_argument('group_number', type=str, help='Group number to resend')
        parser.add_argument(
            '--to',
            dest='to',
            default='',
            help='Send to this address instead of the registered email',
        )

    def handle(self, *args, **options):
        group_number = options['group_number'].strip()
        try:
            registration = QuizRegistration.objects.get(group_number=group_number)
        except QuizRegistration.DoesNotExist:
            raise CommandError(f'No registration found for group {group_number}')

        data = registration.to_form_data()
        if options['to']:
            data['mail_id'] = options['to']

        self.stdout.write(f'Rendering form for group {group_number} ({registration.church})...')
        pdf_bytes = render_registration_form(data, registration.group_number)

        if not send_quiz_registration_email(data, registration.group_number, pdf_bytes):
            raise CommandError(f'Failed to send confirmation for group {group_number}, see the log for details')

        self.stdout.write(self.style.SUCCESS(f'✓ Confirmation for group {group_number} sent to {data["mail_id"]}'))
