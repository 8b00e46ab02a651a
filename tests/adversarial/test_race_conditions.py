"""
Adversarial tests for race condition attack prevention.

Verifies that concurrent verifications of the same email address leave
exactly one verified account, preventing attackers from exploiting
race conditions to:
- Own an address alongside its legitimate owner
- Keep a pending duplicate alive after the address was verified

Security rationale:
- An attacker can register an address they do not own and race the
  owner's verification link with their own
- The partial unique index on verified emails serializes the two
  transactions; the loser fails or finds its row already pruned
"""

import re
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from psycopg_pool import ConnectionPool

from accounts.adapters.repository.postgres import PostgresDatabase, PostgresUserQueries
from accounts.adapters.smtp.verifier import EmailNotifier
from accounts.domain.exceptions import AccountError
from accounts.domain.security import Argon2Hasher, UrlSafeTokenGenerator
from accounts.domain.users import AccountService, make_new_user
from tests.fakes import RecordingMailer

pytestmark = pytest.mark.adversarial

TOKEN_PATTERN = re.compile(r"/verify-email/([A-Za-z0-9_-]+)")


def build_service(pool: ConnectionPool, mailer: RecordingMailer) -> AccountService:
    return AccountService(
        db=PostgresDatabase(pool),
        queries=PostgresUserQueries(pool),
        hasher=Argon2Hasher(time_cost=1, memory_cost=1024, parallelism=1),
        token_generator=UrlSafeTokenGenerator(),
        email_verifier=EmailNotifier(mailer, "http://localhost:8080", "no-reply@localhost"),
    )


def issued_tokens(mailer: RecordingMailer) -> list[str]:
    return [TOKEN_PATTERN.search(message.body).group(1) for message in mailer.sent]


def verified_counts(pool: ConnectionPool, email: str) -> tuple[int, int]:
    with pool.connection() as conn, conn.cursor() as cursor:
        cursor.execute(
            "SELECT COUNT(*) FILTER (WHERE email_verified), COUNT(*) FILTER (WHERE NOT email_verified)"
            " FROM users WHERE email = %s",
            (email,),
        )
        return cursor.fetchone()


class TestRaceConditionAttacks:
    """
    Adversarial tests simulating concurrent verification attacks.

    Each attacker holds a valid token for a different pending
    registration of the same address.
    """

    @pytest.mark.parametrize("num_attackers", [2, 5])
    def test_concurrent_verifications_one_owner(
        self, clean_pool: ConnectionPool, num_attackers: int
    ) -> None:
        email = "contested@example.com"
        mailer = RecordingMailer()
        service = build_service(clean_pool, mailer)
        for i in range(num_attackers):
            service.register(make_new_user(email, f"password-{i}"))
        tokens = issued_tokens(mailer)
        assert len(tokens) == num_attackers

        failures: list[Exception] = []
        failures_lock = threading.Lock()

        def attack_verify(token: str) -> None:
            try:
                service.verify_email(token)
            except AccountError as e:
                # Deadlocks, unique violations and pruned tokens all surface here
                with failures_lock:
                    failures.append(e)

        with ThreadPoolExecutor(max_workers=num_attackers) as executor:
            futures = [executor.submit(attack_verify, token) for token in tokens]
            for f in futures:
                f.result()

        assert verified_counts(clean_pool, email) == (1, 0), (
            f"Race condition vulnerability: {len(failures)} of {num_attackers} "
            f"verifications failed but the address is not owned exactly once"
        )
        assert len(failures) < num_attackers

    def test_concurrent_registration_and_verification(self, clean_pool: ConnectionPool) -> None:
        """Registrations racing a verification never produce a second owner."""
        email = "busy@example.com"
        mailer = RecordingMailer()
        service = build_service(clean_pool, mailer)
        service.register(make_new_user(email, "original-password"))
        [token] = issued_tokens(mailer)

        def attack_register(i: int) -> None:
            service.register(make_new_user(email, f"attacker-{i}"))

        with ThreadPoolExecutor(max_workers=5) as executor:
            futures = [executor.submit(service.verify_email, token)]
            futures += [executor.submit(attack_register, i) for i in range(4)]
            for f in futures:
                f.result()

        verified, _ = verified_counts(clean_pool, email)
        assert verified == 1
        # Only the owner's password opens the account
        service.authenticate(email, "original-password")
