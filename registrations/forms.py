"""
Django forms for validating Bible Quiz registration payloads.

The API accepts the camelCase JSON the registration page posts; the forms
below work on snake_case field names and the mapping between the two
lives in PAYLOAD_FIELDS / PARTICIPANT_FIELDS.
"""
import re

from django import forms

from .models import QuizRegistration, QuizParticipant
from .utils import RegistrationValidationError

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

MIN_PARTICIPANTS = 2
MAX_PARTICIPANTS = 8

DOB_INPUT_FORMATS = ['%Y-%m-%d', '%d-%m-%Y', '%d/%m/%Y']

# (payload key, form field) in the order they are checked
PAYLOAD_FIELDS = [
    ('groupLeaderName', 'group_leader_name'),
    ('church', 'church'),
    ('location', 'location'),
    ('langOfQuiz', 'lang_of_quiz'),
    ('zone', 'zone'),
    ('contactNo', 'contact_no'),
    ('alternateNo', 'alternate_no'),
    ('mailId', 'mail_id'),
    ('verificationEmail', 'verification_email'),
]

PARTICIPANT_FIELDS = [
    ('name', 'name'),
    ('gender', 'gender'),
    ('dob', 'dob'),
    ('mobileNo', 'mobile_no'),
]


def is_valid_email(value):
    return bool(value) and bool(EMAIL_PATTERN.match(value))


class QuizRegistrationForm(forms.Form):
    """
    Header fields of a group registration.
    """
    group_leader_name = forms.CharField(max_length=200)
    church = forms.CharField(max_length=255)
    location = forms.CharField(max_length=200)
    lang_of_quiz = forms.ChoiceField(choices=QuizRegistration.LANGUAGE_CHOICES)
    zone = forms.ChoiceField(choices=QuizRegistration.ZONE_CHOICES)
    contact_no = forms.CharField(max_length=20)
    alternate_no = forms.CharField(max_length=20, required=False)
    mail_id = forms.CharField(max_length=254)
    verification_email = forms.CharField(max_length=254)

    def clean_mail_id(self):
        mail_id = self.cleaned_data['mail_id']
        if not is_valid_email(mail_id):
            raise forms.ValidationError('Invalid email format', code='invalid_email')
        return mail_id

    def clean_verification_email(self):
        verification_email = self.cleaned_data['verification_email']
        if not is_valid_email(verification_email):
            raise forms.ValidationError('Invalid verification email format', code='invalid_email')
        return verification_email


class ParticipantForm(forms.Form):
    name = forms.CharField(max_length=200)
    gender = forms.ChoiceField(choices=QuizParticipant.GENDER_CHOICES)
    dob = forms.DateField(input_formats=DOB_INPUT_FORMATS)
    mobile_no = forms.CharField(max_length=20, required=False)


def _remap(payload, mapping):
    if not isinstance(payload, dict):
        return {}
    return {field: payload.get(key) for key, field in mapping if payload.get(key) is not None}


def _first_error(form, mapping):
    """
    Return (payload_key, ValidationError) for the first failing field.
    Missing values win over every other problem, then field order applies.
    """
    errors = form.errors.as_data()
    for key, field in mapping:
        for error in errors.get(field, []):
            if error.code == 'required':
                return key, error
    for key, field in mapping:
        if field in errors:
            return key, errors[field][0]
    return None, None


def _header_message(key, error):
    if error.code == 'required':
        return f"{key} is required"
    if error.code == 'invalid_choice':
        return f"{key} is not a valid option"
    if error.code == 'max_length':
        return f"{key} is too long"
    return error.messages[0]


def _participant_message(position, key, error):
    if key == 'gender':
        return f"Please select gender for participant {position}"
    if key == 'dob':
        return f"Please enter a valid date of birth for participant {position}"
    if key == 'name':
        return f"Participant {position} name is too long"
    return f"Please enter a valid mobile number for participant {position}"


def validate_quiz_registration(payload):
    """
    Validate a registration payload and return the cleaned data.

    Checks stop at the first problem: required header fields, email
    format, then the participant list (at least two named participants,
    each with a gender and date of birth). Rows without a name are
    treated as unused slots and dropped.

    Raises:
        RegistrationValidationError: with a message naming the failing field
    """
    form = QuizRegistrationForm(_remap(payload, PAYLOAD_FIELDS))
    if not form.is_valid():
        key, error = _first_error(form, PAYLOAD_FIELDS)
        raise RegistrationValidationError(_header_message(key, error))

    raw_participants = payload.get('participants')
    if not isinstance(raw_participants, list):
        raw_participants = []

    named = [
        (position, row)
        for position, row in enumerate(raw_participants, start=1)
        if isinstance(row, dict) and str(row.get('name') or '').strip()
    ]
    if len(named) < MIN_PARTICIPANTS:
        raise RegistrationValidationError(f"Minimum {MIN_PARTICIPANTS} participants are required")
    if len(named) > MAX_PARTICIPANTS:
        raise RegistrationValidationError(f"Maximum {MAX_PARTICIPANTS} participants are allowed")

    participants = []
    for position, row in named:
        participant_form = ParticipantForm(_remap(row, PARTICIPANT_FIELDS))
        if not participant_form.is_valid():
            key, error = _first_error(participant_form, PARTICIPANT_FIELDS)
            raise RegistrationValidationError(_participant_message(position, key, error))
        participants.append(participant_form.cleaned_data)

    cleaned = dict(form.cleaned_data)
    cleaned['participants'] = participants
    return cleaned
