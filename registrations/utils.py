"""
Utility functions for the registrations app: duplicate checks,
group-number allocation and the registration writer.
"""
import datetime
import logging

from django.db import DatabaseError, IntegrityError, transaction

from .models import QuizRegistration, QuizParticipant

logger = logging.getLogger(__name__)

# Only the most recent rows are scanned when allocating a group number
GROUP_NUMBER_SCAN_LIMIT = 100
MAX_GROUP_NUMBER_ATTEMPTS = 3

DUPLICATE_MESSAGES = {
    'email': 'Registration already exists for this email address',
    'church': 'Registration already exists for this church',
}


class RegistrationError(Exception):
    """
    Base class for errors reported back to the registrant.
    `message` is shown to the user as-is.
    """
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class RegistrationValidationError(RegistrationError):
    pass


class DuplicateRegistrationError(RegistrationError):

    def __init__(self, field):
        super().__init__(DUPLICATE_MESSAGES[field])
        self.field = field


class RegistrationStorageError(RegistrationError):
    status_code = 500


class _GroupNumberTaken(Exception):
    pass


def format_dob(value):
    """Display a date of birth as DD-MM-YYYY; strings pass through unchanged."""
    if isinstance(value, datetime.date):
        return value.strftime('%d-%m-%Y')
    return value or ''


def check_duplicate_registration(mail_id, church):
    """
    Reject the submission if the email or the church is already registered.

    Raises:
        DuplicateRegistrationError: a registration with the same value exists
        RegistrationStorageError: the lookup itself failed
    """
    for field, lookup, value in (('email', 'mail_id', mail_id), ('church', 'church', church)):
        logger.info(f"Checking for duplicate {field}...")
        try:
            exists = QuizRegistration.objects.filter(**{lookup: value}).exists()
        except DatabaseError as e:
            logger.error(f"{field.title()} duplicate check error: {str(e)}")
            raise RegistrationStorageError(f"Error checking for duplicate {field}") from e
        if exists:
            raise DuplicateRegistrationError(field)


def get_next_group_number():
    """
    Return the next group number as a string.

    Scans the group numbers of the most recently created registrations,
    ignores anything that is not a plain integer and adds one to the
    highest value. Falls back to "1" if the lookup fails.
    """
    try:
        recent = list(
            QuizRegistration.objects.order_by('-created_at')
            .values_list('group_number', flat=True)[:GROUP_NUMBER_SCAN_LIMIT]
        )
    except DatabaseError as e:
        logger.error(f"Error getting last group number: {str(e)}")
        return '1'

    last_number = 0
    for value in recent:
        value = (value or '').strip()
        try:
            if value.isdigit():
                last_number = max(last_number, int(value))
        except ValueError:
            pass
    return str(last_number + 1)


def _raise_for_conflict(data, group_number):
    """Turn a unique-constraint failure on the parent row into a domain error."""
    if QuizRegistration.objects.filter(mail_id=data['mail_id']).exists():
        raise DuplicateRegistrationError('email')
    if QuizRegistration.objects.filter(church=data['church']).exists():
        raise DuplicateRegistrationError('church')
    if QuizRegistration.objects.filter(group_number=group_number).exists():
        raise _GroupNumberTaken(group_number)


def _write_registration(data, group_number):
    participants = data['participants']
    stage = 'registration'
    try:
        with transaction.atomic():
            logger.info("Creating registration record...")
            registration = QuizRegistration.objects.create(
                group_leader_name=data['group_leader_name'],
                church=data['church'],
                location=data['location'],
                lang_of_quiz=data['lang_of_quiz'],
                zone=data['zone'],
                contact_no=data['contact_no'],
                alternate_no=data.get('alternate_no') or None,
                mail_id=data['mail_id'],
                verification_email=data.get('verification_email', ''),
                total_participants=len(participants),
                group_number=group_number,
            )

            stage = 'participants'
            logger.info("Creating participant records...")
            QuizParticipant.objects.bulk_create([
                QuizParticipant(
                    registration=registration,
                    name=p['name'],
                    gender=p['gender'],
                    dob=p['dob'],
                    mobile_no=p.get('mobile_no') or None,
                )
                for p in participants
            ])
    except DatabaseError as e:
        if stage == 'participants':
            # The atomic block has already discarded the parent row
            logger.error(
                f"Participants creation error for group {group_number}, registration rolled back: {str(e)}"
            )
            raise RegistrationStorageError(f"Failed to register participants: {str(e)}") from e
        if isinstance(e, IntegrityError):
            _raise_for_conflict(data, group_number)
        logger.error(f"Registration creation error: {str(e)}")
        raise RegistrationStorageError(f"Registration failed: {str(e)}") from e

    logger.info(f"Registration {registration.id} created with group number {group_number}")
    return registration


def create_quiz_registration(data):
    """
    Persist a validated registration and its participants.

    The parent row and the participant batch are written in one
    transaction. If another submission claims the same group number
    first, a fresh number is allocated and the write is retried.

    Args:
        data: cleaned payload from validate_quiz_registration()

    Returns:
        QuizRegistration
    """
    for attempt in range(1, MAX_GROUP_NUMBER_ATTEMPTS + 1):
        logger.info("Getting next group number...")
        group_number = get_next_group_number()
        try:
            return _write_registration(data, group_number)
        except _GroupNumberTaken:
            logger.warning(
                f"Group number {group_number} was claimed concurrently (attempt {attempt}), re-allocating"
            )
    raise RegistrationStorageError('Registration failed: could not allocate a group number. Please try again.')
