"""Member authentication against the Airtable members table.

Members carrying a password hash are verified with scrypt in the
``hex(salt):hex(key)`` format Better-Auth writes (N=16384, r=16, p=1,
dkLen=64). Members without a hash fall back to the plaintext "temporary
password" field. That fallback is a known weakness of the current member
base, kept only until every member has a hash; see DESIGN.md.

Both "no member with that email" and "wrong password" raise the same
InvalidCredentialsError so callers cannot enumerate accounts.
"""

import hashlib
import hmac
import logging
import os

from portal.airtable_schema import MemberFields, Tables
from portal.errors import InvalidCredentialsError, RateLimitError
from portal.schemas.members import MemberAccount
from portal.services.airtable_client import AirtableClient
from portal.services.local_store import LOGIN_ATTEMPTS_KEY, KeyValueStore
from portal.services.query_builder import member_email_formula
from portal.services.record_mapper import field_str, map_member

logger = logging.getLogger(__name__)

MAX_LOGIN_ATTEMPTS = 5

SCRYPT_N = 16384
SCRYPT_R = 16
SCRYPT_P = 1
SCRYPT_DKLEN = 64


def _scrypt(password: str, salt_hex: str) -> bytes:
    # The hex string itself is the salt, not its decoded bytes
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt_hex.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=SCRYPT_DKLEN,
        maxmem=128 * SCRYPT_N * SCRYPT_R * 2,
    )


def hash_password(password: str, salt_hex: str | None = None) -> str:
    """Hash a password as ``hex(salt):hex(derived_key)``."""
    salt_hex = salt_hex or os.urandom(16).hex()
    return f"{salt_hex}:{_scrypt(password, salt_hex).hex()}"


def verify_password(password: str, stored_hash: str) -> bool:
    """Check a password against a ``salt:key`` hash. Malformed hashes never match."""
    salt_hex, sep, key_hex = stored_hash.partition(":")
    if not sep or not salt_hex or not key_hex:
        return False
    try:
        expected = bytes.fromhex(key_hex)
    except ValueError:
        return False
    return hmac.compare_digest(_scrypt(password, salt_hex), expected)


class MemberAuthenticator:
    def __init__(self, client: AirtableClient):
        self.client = client

    async def authenticate(self, email: str, password: str) -> MemberAccount:
        """Check an email/password pair against the members table.

        Raises:
            InvalidCredentialsError: Unknown email or password mismatch.
        """
        params = {"filterByFormula": member_email_formula(email), "maxRecords": 1}
        matches = await self.client.list_records(Tables.MEMBERS, params)
        if not matches:
            logger.info("Login rejected: no matching member")
            raise InvalidCredentialsError()

        record = matches[0]
        if not self._password_matches(record.fields, password):
            logger.info("Login rejected: password mismatch for member %s", record.id)
            raise InvalidCredentialsError()

        return map_member(record, fallback_email=email)

    @staticmethod
    def _password_matches(fields: dict, password: str) -> bool:
        stored_hash = field_str(fields, MemberFields.PASSWORD_HASH)
        if stored_hash:
            return verify_password(password, stored_hash)

        temporary = field_str(fields, MemberFields.TEMP_PASSWORD)
        if not temporary:
            return False
        logger.warning("Member has no password hash; comparing temporary password")
        return hmac.compare_digest(temporary.encode(), password.encode())


class LoginAttemptGate:
    """Client-local counter of consecutive failed logins.

    After ``max_attempts`` failures every attempt is refused with
    RateLimitError before the backend is contacted, until reset.
    """

    def __init__(self, store: KeyValueStore, max_attempts: int = MAX_LOGIN_ATTEMPTS):
        self.store = store
        self.max_attempts = max_attempts

    @property
    def attempts(self) -> int:
        raw = self.store.get(LOGIN_ATTEMPTS_KEY)
        try:
            return int(raw) if raw else 0
        except ValueError:
            return 0

    def check(self) -> None:
        if self.attempts >= self.max_attempts:
            raise RateLimitError("Too many attempts. Please try again later.")

    def record_failure(self) -> int:
        attempts = self.attempts + 1
        self.store.set(LOGIN_ATTEMPTS_KEY, str(attempts))
        return attempts

    def reset(self) -> None:
        self.store.set(LOGIN_ATTEMPTS_KEY, "0")
