"""
Tests for outgoing mail (emails.py). Mail goes to the locmem outbox; the
automation webhook is mocked.
"""
from unittest import mock

import pytest
import requests
from django.core import mail

from registrations.emails import send_event_confirmation, send_otp_email, send_quiz_registration_email
from registrations.forms import validate_quiz_registration

FAKE_PDF = b'%PDF-1.4 test document'


class TestRegistrationEmail:

    def test_sends_with_attachment(self, make_payload):
        data = validate_quiz_registration(make_payload())
        assert send_quiz_registration_email(data, '4', FAKE_PDF) is True

        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.to == ['leader@stpaul.org']
        assert message.subject == 'BDYFC Bible Quiz 2025 - Registration Confirmed (Action Required)'
        assert 'Your Group Number: 4' in message.body
        assert 'Asha Thomas' in message.body
        assert message.attachments == [('BibleQuiz2025_Registration_Group4.pdf', FAKE_PDF, 'application/pdf')]
        html, mimetype = message.alternatives[0]
        assert mimetype == 'text/html'
        assert 'cni.bdyfc@gmail.com' in html

    def test_failure_returns_false(self, make_payload):
        data = validate_quiz_registration(make_payload())
        with mock.patch('registrations.emails.EmailMultiAlternatives.send', side_effect=OSError('smtp down')):
            assert send_quiz_registration_email(data, '4', FAKE_PDF) is False
        assert mail.outbox == []


class TestOtpEmail:

    def test_code_in_body(self):
        send_otp_email('someone@example.com', '482913')
        assert len(mail.outbox) == 1
        assert 'OTP: 482913' in mail.outbox[0].body
        assert mail.outbox[0].subject == 'BDYFC Bible Quiz 2025 - Email Verification OTP'

    def test_failure_raises(self):
        with mock.patch('registrations.emails.send_mail', side_effect=OSError('smtp down')):
            with pytest.raises(OSError):
                send_otp_email('someone@example.com', '482913')


class TestEventConfirmation:

    ARGS = ('team@example.com', 'Grace Church', 'Noah\'s Ark', 'Mary Joseph')

    def test_smtp_when_no_webhook(self, settings):
        settings.EVENT_CONFIRMATION_WEBHOOK_URL = ''
        with mock.patch('registrations.emails.requests.post') as post:
            assert send_event_confirmation(*self.ARGS) == 'smtp'
        post.assert_not_called()
        assert len(mail.outbox) == 1
        assert 'Grace Church' in mail.outbox[0].body
        assert mail.outbox[0].attachments == []

    def test_webhook_delivery(self, settings):
        settings.EVENT_CONFIRMATION_WEBHOOK_URL = 'https://hooks.example.com/confirm'
        with mock.patch('registrations.emails.requests.post') as post:
            post.return_value = mock.Mock(status_code=200, text='ok')
            assert send_event_confirmation(*self.ARGS) == 'webhook'

        assert mail.outbox == []
        args, kwargs = post.call_args
        assert args == ('https://hooks.example.com/confirm',)
        assert kwargs['json']['churchName'] == 'Grace Church'
        assert kwargs['json']['leaderName'] == 'Mary Joseph'
        assert kwargs['timeout'] == settings.EVENT_CONFIRMATION_WEBHOOK_TIMEOUT

    def test_falls_back_on_error_status(self, settings):
        settings.EVENT_CONFIRMATION_WEBHOOK_URL = 'https://hooks.example.com/confirm'
        with mock.patch('registrations.emails.requests.post') as post:
            post.return_value = mock.Mock(status_code=502, text='bad gateway')
            assert send_event_confirmation(*self.ARGS) == 'smtp'
        assert len(mail.outbox) == 1

    def test_falls_back_on_connection_error(self, settings):
        settings.EVENT_CONFIRMATION_WEBHOOK_URL = 'https://hooks.example.com/confirm'
        with mock.patch('registrations.emails.requests.post', side_effect=requests.ConnectionError('refused')):
            assert send_event_confirmation(*self.ARGS) == 'smtp'
        assert len(mail.outbox) == 1

    def test_raises_when_both_channels_fail(self, settings):
        settings.EVENT_CONFIRMATION_WEBHOOK_URL = ''
        with mock.patch('registrations.emails.send_mail', side_effect=OSError('smtp down')):
            with pytest.raises(OSError):
                send_event_confirmation(*self.ARGS)
