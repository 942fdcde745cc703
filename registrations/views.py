"""
JSON API views for Bible Quiz registration, OTP email verification and
event confirmation mails.
"""
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from django.http import JsonResponse
from django.conf import settings
import base64
import json
import logging

from .forms import validate_quiz_registration, is_valid_email
from .otp import generate_otp, issue_otp_token, verify_otp as check_otp, check_verification_token
from .pdf import render_registration_form
from .emails import send_quiz_registration_email, send_otp_email, send_event_confirmation
from .utils import (
    RegistrationError, RegistrationValidationError,
    check_duplicate_registration, create_quiz_registration,
)

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = 'An unexpected error occurred. Please try again later.'
REGISTRATION_SUCCESS_MESSAGE = 'Registration completed successfully! PDF form has been sent to your email.'
REGISTRATION_EMAIL_FAILED_MESSAGE = (
    'Registration completed successfully! We could not email the PDF form, please download it below.'
)
REGISTRATION_PDF_FAILED_MESSAGE = (
    'Registration completed successfully! We could not generate the PDF form, please contact the organizing committee.'
)
EVENT_CONFIRMATION_FIELDS = ['email', 'churchName', 'topicName', 'leaderName']


class InvalidJSONBody(Exception):
    pass


def _parse_json_body(request):
    """Read the JSON object posted by the registration page."""
    try:
        body = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
        raise InvalidJSONBody() from e
    if not isinstance(body, dict):
        raise InvalidJSONBody()
    return body


def _error(message, status):
    return JsonResponse({'success': False, 'message': message}, status=status)


def _pdf_data_uri(pdf_bytes):
    return f"data:application/pdf;base64,{base64.b64encode(pdf_bytes).decode('ascii')}"


@csrf_exempt
@require_http_methods(["POST"])
def bible_quiz_registration(request):
    """
    Register a quiz group: validate, check for duplicates, store the
    group with its participants, render the printable form and email it.
    """
    try:
        payload = _parse_json_body(request)
    except InvalidJSONBody:
        return _error('Invalid JSON body', 400)

    try:
        logger.info("Received Bible Quiz registration request")
        data = validate_quiz_registration(payload)

        if settings.QUIZ_REQUIRE_EMAIL_VERIFICATION and not check_verification_token(
            payload.get('verificationToken'), data['verification_email']
        ):
            raise RegistrationValidationError('Please verify your email address with the OTP before registering')

        check_duplicate_registration(data['mail_id'], data['church'])
        registration = create_quiz_registration(data)
    except RegistrationError as e:
        logger.warning(f"Registration rejected: {e.message}")
        return _error(e.message, e.status_code)
    except Exception as e:
        logger.exception(f"Unexpected registration error: {str(e)}")
        return _error(UNEXPECTED_ERROR_MESSAGE, 500)

    group_number = registration.group_number
    message = REGISTRATION_SUCCESS_MESSAGE
    pdf_download = None

    # The group is stored at this point; later failures must not turn into an error response
    try:
        pdf_bytes = render_registration_form(data, group_number)
    except Exception as e:
        logger.exception(f"PDF generation failed for group {group_number}: {str(e)}")
        pdf_bytes = None
        message = REGISTRATION_PDF_FAILED_MESSAGE

    if pdf_bytes is not None:
        pdf_download = _pdf_data_uri(pdf_bytes)
        logger.info("Sending confirmation email with PDF...")
        if not send_quiz_registration_email(data, group_number, pdf_bytes):
            logger.warning(f"Group {group_number} registered but confirmation email was not sent")
            message = REGISTRATION_EMAIL_FAILED_MESSAGE

    return JsonResponse({
        'success': True,
        'message': message,
        'registrationId': str(registration.id),
        'groupNumber': group_number,
        'pdfDownload': pdf_download,
    })


@csrf_exempt
@require_http_methods(["POST"])
def send_otp(request):
    """
    Email a one-time password. The response carries a signed token for
    the code, never the code itself.
    """
    try:
        payload = _parse_json_body(request)
    except InvalidJSONBody:
        return _error('Invalid JSON body', 400)

    email = str(payload.get('email') or '').strip()
    if not email:
        return _error('Email is required', 400)
    if not is_valid_email(email):
        return _error('Invalid email format', 400)

    otp = generate_otp()
    try:
        send_otp_email(email, otp)
    except Exception as e:
        logger.error(f"OTP email sending failed for {email}: {str(e)}")
        return _error('Failed to send OTP. Please try again.', 500)

    return JsonResponse({
        'success': True,
        'message': 'OTP sent successfully',
        'token': issue_otp_token(email, otp),
    })


@csrf_exempt
@require_http_methods(["POST"])
def verify_otp(request):
    try:
        payload = _parse_json_body(request)
    except InvalidJSONBody:
        return _error('Invalid JSON body', 400)

    result = check_otp(payload.get('token'), payload.get('otp'))
    response = {
        'success': result.verified,
        'message': result.message,
        'state': result.state,
        'attemptsRemaining': result.attempts_remaining,
    }
    if result.verified:
        response['verificationToken'] = result.verification_token
    return JsonResponse(response, status=200 if result.verified else 400)


@csrf_exempt
@require_http_methods(["POST"])
def send_confirmation(request):
    """
    Send the model-making event confirmation, through the automation
    webhook if configured, otherwise by email.
    """
    try:
        payload = _parse_json_body(request)
    except InvalidJSONBody:
        return _error('Invalid JSON body', 400)

    for field in EVENT_CONFIRMATION_FIELDS:
        if not str(payload.get(field) or '').strip():
            return _error(f'{field} is required', 400)
    if not is_valid_email(str(payload['email']).strip()):
        return _error('Invalid email format', 400)

    try:
        channel = send_event_confirmation(
            str(payload['email']).strip(),
            payload['churchName'],
            payload['topicName'],
            payload['leaderName'],
        )
    except Exception as e:
        logger.error(f"Error sending event confirmation: {str(e)}")
        return _error('Failed to send confirmation email', 500)

    return JsonResponse({
        'success': True,
        'message': 'Confirmation email sent successfully',
        'channel': channel,
    })
