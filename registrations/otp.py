"""
One-time password email verification.

The code never leaves the server in clear: the client holds a signed
token with a keyed digest of the code, and the only server-side state is
a failed-attempt counter and a "used" marker per token nonce, kept in
the Django cache. That cache has to be shared between worker processes
(the database cache by default), otherwise each worker counts attempts
on its own.
"""
import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.core import signing
from django.core.cache import cache
from django.utils.crypto import constant_time_compare, salted_hmac

logger = logging.getLogger(__name__)

OTP_LENGTH = 6
OTP_TOKEN_SALT = 'registrations.otp'
VERIFICATION_TOKEN_SALT = 'registrations.otp.verified'
# Time allowed between verifying the email and submitting the form
VERIFICATION_MAX_AGE = 60 * 60

NOT_SENT = 'not_sent'
SENT = 'sent'
VERIFIED = 'verified'

TOO_MANY_ATTEMPTS = 'Too many incorrect attempts. Please request a new OTP.'


@dataclass
class OTPResult:
    state: str
    message: str
    attempts_remaining: int
    verification_token: Optional[str] = None

    @property
    def verified(self):
        return self.state == VERIFIED


def _normalize_email(email):
    return (email or '').strip().lower()


def _code_digest(nonce, email, code):
    return salted_hmac(OTP_TOKEN_SALT, f"{nonce}:{email}:{code}").hexdigest()


def _attempts_key(nonce):
    return f"otp:attempts:{nonce}"


def _used_key(nonce):
    return f"otp:used:{nonce}"


def generate_otp():
    """Return a random 6-digit code (100000-999999)."""
    return str(100000 + secrets.randbelow(900000))


def issue_otp_token(email, code):
    """
    Sign a token for `code` sent to `email`. Valid for OTP_TTL_SECONDS.
    """
    nonce = secrets.token_urlsafe(16)
    email = _normalize_email(email)
    return signing.dumps(
        {'email': email, 'nonce': nonce, 'digest': _code_digest(nonce, email, code)},
        salt=OTP_TOKEN_SALT,
    )


def verify_otp(token, candidate):
    """
    Check a code typed by the user against an issued token.

    Every mismatch counts against the token; once OTP_MAX_ATTEMPTS is
    reached the token is dead and further calls are refused without
    comparing. A successful check also retires the token.

    Returns:
        OTPResult
    """
    max_attempts = settings.OTP_MAX_ATTEMPTS

    if not token or not isinstance(token, str):
        return OTPResult(NOT_SENT, 'Please request an OTP first.', 0)

    try:
        payload = signing.loads(token, salt=OTP_TOKEN_SALT, max_age=settings.OTP_TTL_SECONDS)
    except signing.SignatureExpired:
        return OTPResult(NOT_SENT, 'OTP has expired. Please request a new OTP.', 0)
    except signing.BadSignature:
        logger.warning("Rejected tampered OTP token")
        return OTPResult(NOT_SENT, 'Invalid OTP session. Please request a new OTP.', 0)

    nonce = payload['nonce']
    if cache.get(_used_key(nonce)):
        return OTPResult(NOT_SENT, 'This OTP has already been used. Please request a new OTP.', 0)

    failures = cache.get(_attempts_key(nonce), 0)
    if failures >= max_attempts:
        return OTPResult(NOT_SENT, TOO_MANY_ATTEMPTS, 0)
    remaining = max_attempts - failures

    candidate = str(candidate or '').strip()
    if not candidate:
        return OTPResult(SENT, 'Please enter the OTP', remaining)
    if len(candidate) != OTP_LENGTH or not candidate.isdigit():
        return OTPResult(SENT, f'OTP must be {OTP_LENGTH} digits', remaining)

    email = payload['email']
    if not constant_time_compare(payload['digest'], _code_digest(nonce, email, candidate)):
        cache.add(_attempts_key(nonce), 0, settings.OTP_TTL_SECONDS)
        failures = cache.incr(_attempts_key(nonce))
        remaining = max(max_attempts - failures, 0)
        logger.info(f"Incorrect OTP for {email}, {remaining} attempt(s) remaining")
        if remaining == 0:
            return OTPResult(NOT_SENT, TOO_MANY_ATTEMPTS, 0)
        return OTPResult(SENT, f'Incorrect OTP. {remaining} attempt(s) remaining.', remaining)

    cache.set(_used_key(nonce), True, settings.OTP_TTL_SECONDS)
    cache.delete(_attempts_key(nonce))
    logger.info(f"Email {email} verified")
    return OTPResult(
        VERIFIED,
        'OTP verified successfully!',
        remaining,
        verification_token=signing.dumps({'email': email}, salt=VERIFICATION_TOKEN_SALT),
    )


def check_verification_token(token, email):
    """Return True if `token` proves that `email` passed OTP verification."""
    if not token or not isinstance(token, str):
        return False
    try:
        payload = signing.loads(token, salt=VERIFICATION_TOKEN_SALT, max_age=VERIFICATION_MAX_AGE)
    except signing.BadSignature:
        return False
    return constant_time_compare(payload.get('email', ''), _normalize_email(email))
