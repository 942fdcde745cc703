"""
Email sending functions for quiz registration confirmations, OTP
verification and event confirmations.
"""
from django.core.mail import send_mail, EmailMultiAlternatives
from django.template.loader import render_to_string
from django.conf import settings
from django.utils import timezone
from django.utils.html import strip_tags
import logging
import requests

from .pdf import registration_form_filename
from .utils import format_dob

logger = logging.getLogger(__name__)


def send_quiz_registration_email(registration_data, group_number, pdf_bytes):
    """
    Send the registration confirmation with the printable form attached.

    Args:
        registration_data: cleaned registration data
        group_number: allocated group number
        pdf_bytes: rendered registration form

    Returns:
        True if the email was handed to the mail server, False otherwise
    """
    try:
        event_name = settings.QUIZ_EVENT_NAME
        participants = [
            dict(p, dob_display=format_dob(p['dob'])) for p in registration_data['participants']
        ]

        context = {
            'data': registration_data,
            'group_number': group_number,
            'participants': participants,
            'event_name': event_name,
            'organiser_name': settings.QUIZ_ORGANISER_NAME,
            'forms_email': settings.QUIZ_FORMS_EMAIL,
            'registration_date': timezone.localdate(),
        }

        # Render email templates
        subject = f'{event_name} - Registration Confirmed (Action Required)'
        html_message = render_to_string('registrations/emails/quiz_registration_confirmation.html', context)
        plain_message = strip_tags(html_message)

        email = EmailMultiAlternatives(
            subject=subject,
            body=plain_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[registration_data['mail_id']],
        )
        email.attach_alternative(html_message, 'text/html')
        email.attach(registration_form_filename(group_number), pdf_bytes, 'application/pdf')
        email.send(fail_silently=False)

        logger.info(f"Registration email sent to {registration_data['mail_id']} for group {group_number}")
        return True

    except Exception as e:
        logger.error(f"Failed to send registration email for group {group_number}: {str(e)}")
        # Don't raise exception - the registration is already stored
        return False


def send_otp_email(email, otp):
    """
    Send a one-time password for email verification.

    Unlike the confirmation emails this raises on failure: the caller has
    nothing to show the user unless the code actually went out.
    """
    event_name = settings.QUIZ_EVENT_NAME
    context = {
        'otp': otp,
        'event_name': event_name,
        'organiser_name': settings.QUIZ_ORGANISER_NAME,
        'valid_minutes': settings.OTP_TTL_SECONDS // 60,
    }

    subject = f'{event_name} - Email Verification OTP'
    html_message = render_to_string('registrations/emails/otp_verification.html', context)
    plain_message = strip_tags(html_message)

    send_mail(
        subject=subject,
        message=plain_message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[email],
        html_message=html_message,
        fail_silently=False,
    )

    logger.info(f"OTP email sent to {email}")


def _post_confirmation_webhook(payload):
    url = settings.EVENT_CONFIRMATION_WEBHOOK_URL
    if not url:
        return False

    try:
        response = requests.post(url, json=payload, timeout=settings.EVENT_CONFIRMATION_WEBHOOK_TIMEOUT)
    except requests.RequestException as e:
        logger.warning(f"Confirmation webhook request failed: {str(e)}")
        return False

    if not 200 <= response.status_code < 300:
        logger.warning(f"Confirmation webhook returned {response.status_code}: {response.text[:200]}")
        return False
    return True


def send_event_confirmation(email, church_name, topic_name, leader_name):
    """
    Confirm a registration for the sibling model-making event.

    Delivery goes through the workflow-automation webhook when one is
    configured, and falls back to sending the email directly.

    Returns:
        'webhook' or 'smtp', whichever delivered the confirmation

    Raises:
        Exception: from the mail backend if the SMTP fallback also fails
    """
    event_name = settings.EVENT_CONFIRMATION_EVENT_NAME
    payload = {
        'email': email,
        'churchName': church_name,
        'topicName': topic_name,
        'leaderName': leader_name,
        'eventName': event_name,
    }

    if _post_confirmation_webhook(payload):
        logger.info(f"Event confirmation for {email} delivered via webhook")
        return 'webhook'

    context = {
        'email': email,
        'church_name': church_name,
        'topic_name': topic_name,
        'leader_name': leader_name,
        'event_name': event_name,
        'registration_date': timezone.localdate(),
    }

    subject = f'{event_name} - Registration Confirmed'
    html_message = render_to_string('registrations/emails/event_confirmation.html', context)
    plain_message = strip_tags(html_message)

    send_mail(
        subject=subject,
        message=plain_message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[email],
        html_message=html_message,
        fail_silently=False,
    )

    logger.info(f"Event confirmation email sent to {email}")
    return 'smtp'
