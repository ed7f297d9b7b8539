import unittest
from datetime import timedelta

from jose import jwt

from support import FixedClock, make_config
from tokenauth.tokens import TokenCodec, TokenError, TokenPurpose


class TestTokenCodec(unittest.TestCase):
    def setUp(self):
        self.config = make_config()
        self.clock = FixedClock()
        self.codec = TokenCodec(self.config, clock=self.clock)

    def test_issued_token_verifies_for_its_purpose(self):
        signed = self.codec.issue("user-1", TokenPurpose.REFRESH, timedelta(days=30))

        result = self.codec.verify(signed.token, TokenPurpose.REFRESH)

        self.assertTrue(result.ok)
        self.assertEqual(result.subject_id, "user-1")
        self.assertEqual(signed.expires_at - signed.issued_at, 30 * 24 * 3600)

    def test_expiry_boundary(self):
        signed = self.codec.issue("user-1", TokenPurpose.ACCESS, timedelta(seconds=10))

        self.clock.advance(seconds=9)
        self.assertTrue(self.codec.verify(signed.token, TokenPurpose.ACCESS).ok)

        # expires_at == now
        self.clock.advance(seconds=1)
        result = self.codec.verify(signed.token, TokenPurpose.ACCESS)
        self.assertFalse(result.ok)
        self.assertEqual(result.error, TokenError.EXPIRED)

    def test_verification_token_rejected_as_refresh(self):
        signed = self.codec.issue_verification("user-1")

        result = self.codec.verify(signed.token, TokenPurpose.REFRESH)

        self.assertFalse(result.ok)
        self.assertIsNone(result.subject_id)

    def test_purpose_claim_checked_even_when_secrets_collide(self):
        shared = make_config(
            ACCESS_TOKEN_SECRET="same",
            REFRESH_TOKEN_SECRET="same",
            EMAIL_VERIFICATION_TOKEN_SECRET="same",
        )
        codec = TokenCodec(shared, clock=self.clock)
        signed = codec.issue_verification("user-1")

        result = codec.verify(signed.token, TokenPurpose.REFRESH)

        self.assertEqual(result.error, TokenError.PURPOSE_MISMATCH)

    def test_tampered_and_garbage_tokens_are_malformed(self):
        signed = self.codec.issue_access("user-1")
        header, payload, signature = signed.token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])

        self.assertEqual(self.codec.verify(tampered, TokenPurpose.ACCESS).error, TokenError.MALFORMED)
        self.assertEqual(self.codec.verify("not-a-token", TokenPurpose.ACCESS).error, TokenError.MALFORMED)
        self.assertEqual(self.codec.verify("", TokenPurpose.ACCESS).error, TokenError.MALFORMED)
        self.assertEqual(self.codec.verify(None, TokenPurpose.ACCESS).error, TokenError.MALFORMED)

    def test_token_without_subject_is_malformed(self):
        token = jwt.encode(
            {"purpose": "access", "iat": 0, "exp": 2**40},
            self.config.ACCESS_TOKEN_SECRET,
            algorithm="HS256",
        )

        self.assertEqual(self.codec.verify(token, TokenPurpose.ACCESS).error, TokenError.MALFORMED)

    def test_rotating_a_secret_invalidates_outstanding_tokens(self):
        signed = self.codec.issue_refresh("user-1")
        rotated = TokenCodec(make_config(REFRESH_TOKEN_SECRET="new-refresh-secret"), clock=self.clock)

        self.assertEqual(rotated.verify(signed.token, TokenPurpose.REFRESH).error, TokenError.MALFORMED)
        # Other purposes keep working
        access = self.codec.issue_access("user-1")
        self.assertTrue(rotated.verify(access.token, TokenPurpose.ACCESS).ok)

    def test_tokens_minted_in_the_same_second_differ(self):
        first = self.codec.issue_refresh("user-1")
        second = self.codec.issue_refresh("user-1")

        self.assertEqual(first.issued_at, second.issued_at)
        self.assertNotEqual(first.token, second.token)

    def test_issue_is_deterministic_with_fixed_clock_and_ids(self):
        codec_a = TokenCodec(self.config, clock=self.clock, token_id_factory=lambda: "fixed")
        codec_b = TokenCodec(self.config, clock=self.clock, token_id_factory=lambda: "fixed")

        self.assertEqual(
            codec_a.issue_access("user-1").token,
            codec_b.issue_access("user-1").token,
        )

    def test_configured_ttls(self):
        access = self.codec.issue_access("user-1")
        verification = self.codec.issue_verification("user-1")

        self.assertEqual(access.expires_at - access.issued_at, 15 * 60)
        self.assertEqual(verification.expires_at - verification.issued_at, 15 * 60)
        self.assertEqual(verification.purpose, TokenPurpose.EMAIL_VERIFICATION)


if __name__ == "__main__":
    unittest.main()
