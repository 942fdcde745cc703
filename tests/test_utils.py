"""
Database tests for the duplicate guard, group-number allocation and the
registration writer (utils.py).
"""
import datetime
from unittest import mock

import pytest
from django.db import DatabaseError, IntegrityError

from registrations.forms import validate_quiz_registration
from registrations.models import QuizRegistration, QuizParticipant
from registrations.utils import (
    DuplicateRegistrationError,
    RegistrationStorageError,
    check_duplicate_registration,
    create_quiz_registration,
    get_next_group_number,
)

pytestmark = pytest.mark.django_db


def _store(group_number, n):
    return QuizRegistration.objects.create(
        group_leader_name=f'Leader {n}',
        church=f'Church {n}',
        location='Pune',
        lang_of_quiz='Marathi',
        zone='West',
        contact_no='9000000000',
        mail_id=f'leader{n}@example.com',
        group_number=group_number,
    )


class TestGroupNumber:

    def test_first_group_is_one(self):
        assert get_next_group_number() == '1'

    def test_max_plus_one(self):
        for n, number in enumerate(['3', '1', '10', '2']):
            _store(number, n)
        assert get_next_group_number() == '11'

    def test_non_numeric_values_ignored(self):
        _store('7', 1)
        _store('legacy-9', 2)
        assert get_next_group_number() == '8'

    def test_lookup_failure_falls_back_to_one(self):
        _store('5', 1)
        with mock.patch.object(QuizRegistration.objects, 'order_by', side_effect=DatabaseError('db down')):
            assert get_next_group_number() == '1'


class TestDuplicateGuard:

    def test_no_duplicates(self):
        check_duplicate_registration('new@example.com', 'New Church')

    def test_duplicate_email(self, make_registration):
        make_registration()
        with pytest.raises(DuplicateRegistrationError) as exc:
            check_duplicate_registration('leader@stpaul.org', 'Another Church')
        assert exc.value.field == 'email'
        assert exc.value.message == 'Registration already exists for this email address'

    def test_duplicate_church(self, make_registration):
        make_registration()
        with pytest.raises(DuplicateRegistrationError) as exc:
            check_duplicate_registration('other@example.com', 'St. Paul Church')
        assert exc.value.message == 'Registration already exists for this church'

    def test_email_checked_before_church(self, make_registration):
        make_registration()
        with pytest.raises(DuplicateRegistrationError) as exc:
            check_duplicate_registration('leader@stpaul.org', 'St. Paul Church')
        assert exc.value.field == 'email'

    def test_lookup_failure_is_storage_error(self):
        with mock.patch.object(QuizRegistration.objects, 'filter', side_effect=DatabaseError('db down')):
            with pytest.raises(RegistrationStorageError) as exc:
                check_duplicate_registration('new@example.com', 'New Church')
        assert exc.value.message == 'Error checking for duplicate email'
        assert exc.value.status_code == 500


class TestCreateRegistration:

    def test_creates_group_and_participants(self, make_payload):
        registration = create_quiz_registration(validate_quiz_registration(make_payload()))
        assert registration.group_number == '1'
        assert registration.total_participants == 2
        assert list(registration.participants.values_list('name', flat=True)) == ['Asha Thomas', 'Ravi Kumar']
        assert registration.participants.get(name='Ravi Kumar').mobile_no is None

    def test_group_numbers_increase(self, make_registration):
        numbers = [
            make_registration(mailId=f'g{i}@example.com', verificationEmail=f'g{i}@example.com', church=f'Church {i}').group_number
            for i in range(3)
        ]
        assert numbers == ['1', '2', '3']

    def test_participant_failure_leaves_no_registration(self, make_payload):
        data = validate_quiz_registration(make_payload())
        with mock.patch.object(QuizParticipant.objects, 'bulk_create', side_effect=IntegrityError('bad row')):
            with pytest.raises(RegistrationStorageError) as exc:
                create_quiz_registration(data)
        assert exc.value.message.startswith('Failed to register participants:')
        assert QuizRegistration.objects.count() == 0
        assert QuizParticipant.objects.count() == 0

    def test_rejected_participant_row_rolls_back_registration(self, make_payload):
        data = validate_quiz_registration(make_payload())
        # dob is NOT NULL, so the database itself refuses the batch
        data['participants'][1]['dob'] = None
        with pytest.raises(RegistrationStorageError) as exc:
            create_quiz_registration(data)
        assert exc.value.message.startswith('Failed to register participants:')
        assert QuizRegistration.objects.count() == 0
        assert QuizParticipant.objects.count() == 0

        data['participants'][1]['dob'] = datetime.date(2004, 11, 30)
        registration = create_quiz_registration(data)
        assert registration.participants.count() == 2

    def test_unique_email_constraint_reports_duplicate(self, make_registration, make_payload):
        make_registration()
        data = validate_quiz_registration(make_payload(church='Different Church'))
        with pytest.raises(DuplicateRegistrationError) as exc:
            create_quiz_registration(data)
        assert exc.value.field == 'email'
        assert QuizRegistration.objects.count() == 1

    def test_taken_group_number_is_reallocated(self, make_payload):
        _store('1', 99)
        data = validate_quiz_registration(make_payload())
        with mock.patch('registrations.utils.get_next_group_number', side_effect=['1', '2']):
            registration = create_quiz_registration(data)
        assert registration.group_number == '2'

    def test_gives_up_after_repeated_collisions(self, make_payload):
        _store('1', 99)
        data = validate_quiz_registration(make_payload())
        with mock.patch('registrations.utils.get_next_group_number', return_value='1'):
            with pytest.raises(RegistrationStorageError):
                create_quiz_registration(data)
        assert QuizRegistration.objects.count() == 1
