"""
Shared pytest fixtures for the registrations tests.

Django settings come from pyproject.toml (pytest-django); the test
runner swaps in the locmem email backend so sent mail lands in
django.core.mail.outbox. OTP state lives in the database cache, so it is
rolled back with each test transaction.
"""
import copy

import pytest
from django.core import signing

from registrations.forms import validate_quiz_registration
from registrations.otp import VERIFICATION_TOKEN_SALT
from registrations.utils import create_quiz_registration


BASE_PAYLOAD = {
    'groupLeaderName': 'John Samuel',
    'church': 'St. Paul Church',
    'location': 'Mumbai',
    'langOfQuiz': 'English',
    'zone': 'South',
    'contactNo': '9876543210',
    'alternateNo': '',
    'mailId': 'leader@stpaul.org',
    'verificationEmail': 'leader@stpaul.org',
    'participants': [
        {'name': 'Asha Thomas', 'gender': 'Female', 'dob': '2005-04-12', 'mobileNo': '9000000001'},
        {'name': 'Ravi Kumar', 'gender': 'Male', 'dob': '2004-11-30', 'mobileNo': ''},
    ],
}


def verification_token_for(email):
    return signing.dumps({'email': email.strip().lower()}, salt=VERIFICATION_TOKEN_SALT)


def build_payload(**overrides):
    payload = copy.deepcopy(BASE_PAYLOAD)
    payload.update(overrides)
    if 'verificationToken' not in overrides:
        payload['verificationToken'] = verification_token_for(payload.get('verificationEmail') or '')
    return payload


@pytest.fixture
def make_payload():
    """Factory for a valid camelCase registration payload."""
    return build_payload


@pytest.fixture
def make_registration(db):
    """Factory that stores a registration through the normal writer."""
    def _make(**overrides):
        return create_quiz_registration(validate_quiz_registration(build_payload(**overrides)))
    return _make


@pytest.fixture
def staff_client(client, django_user_model):
    user = django_user_model.objects.create_user(username='staff', password='staff-pass-123', is_staff=True)
    client.force_login(user)
    return client
