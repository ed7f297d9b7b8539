import unittest

from support import AuthHarness, RecordingMailer
from tokenauth.exceptions import ExpiredVerificationToken, InvalidVerificationToken, SubjectNotFound
from tokenauth.services.verification_service import VerificationOutcome, VerificationService


class TestVerificationService(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.harness = AuthHarness()
        self.verification = self.harness.verification
        self.user = await self.harness.create_user()

    async def test_consume_marks_subject_verified(self):
        token = self.verification.issue_verification_token(self.user["id"]).token

        self.assertEqual(await self.verification.consume(token), VerificationOutcome.VERIFIED)
        self.assertTrue((await self.harness.users.get_by_id(self.user["id"]))["is_verified"])

        # Still valid until expiry; a second use is a no-op
        self.assertEqual(
            await self.verification.consume(token), VerificationOutcome.ALREADY_VERIFIED
        )

    async def test_expired_token(self):
        token = self.verification.issue_verification_token(self.user["id"]).token
        self.harness.clock.advance(minutes=15)

        with self.assertRaises(ExpiredVerificationToken):
            await self.verification.consume(token)
        self.assertFalse((await self.harness.users.get_by_id(self.user["id"]))["is_verified"])

    async def test_invalid_tokens(self):
        token = self.verification.issue_verification_token(self.user["id"]).token

        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])

        for bad in (tampered, "garbage", "", None):
            with self.assertRaises(InvalidVerificationToken):
                await self.verification.consume(bad)

    async def test_other_purposes_rejected(self):
        tokens = await self.harness.manager.issue_session(self.user["id"])

        with self.assertRaises(InvalidVerificationToken):
            await self.verification.consume(tokens.refresh_token)
        with self.assertRaises(InvalidVerificationToken):
            await self.verification.consume(tokens.access_token)

    async def test_unknown_subject(self):
        token = self.verification.issue_verification_token("missing").token

        with self.assertRaises(SubjectNotFound):
            await self.verification.consume(token)

    async def test_verification_never_touches_sessions(self):
        tokens = await self.harness.manager.issue_session(self.user["id"])
        token = self.verification.issue_verification_token(self.user["id"]).token

        await self.verification.consume(token)

        self.assertEqual(
            await self.harness.sessions.list_tokens(self.user["id"]), {tokens.refresh_token}
        )

    async def test_send_verification_emails_a_working_token(self):
        sent = await self.verification.send_verification(self.user)

        self.assertTrue(sent)
        email, token, display_name = self.harness.mailer.sent[-1]
        self.assertEqual(email, "alice@example.com")
        self.assertEqual(display_name, "alice")
        self.assertEqual(await self.verification.consume(token), VerificationOutcome.VERIFIED)

    async def test_send_verification_reports_failed_delivery(self):
        service = VerificationService(
            self.harness.codec, self.harness.users, mailer=RecordingMailer(deliver=False)
        )

        with self.assertLogs("tokenauth.services.verification_service", level="WARNING"):
            self.assertFalse(await service.send_verification(self.user))

    async def test_send_verification_without_mailer(self):
        service = VerificationService(self.harness.codec, self.harness.users)

        self.assertFalse(await service.send_verification(self.user))


if __name__ == "__main__":
    unittest.main()
