import unittest

from support import make_config
from tokenauth.config import _GENERATED_SECRETS, AuthConfig


class TestAuthConfig(unittest.TestCase):
    def test_distinct_secrets_validate(self):
        make_config().validate()

    def test_shared_secret_rejected(self):
        config = make_config(REFRESH_TOKEN_SECRET="test-access-secret")
        with self.assertRaises(ValueError):
            config.validate()

    def test_empty_secret_rejected(self):
        with self.assertRaises(ValueError):
            make_config(EMAIL_VERIFICATION_TOKEN_SECRET="").validate()

    def test_production_requires_explicit_secrets(self):
        config = make_config(
            ENVIRONMENT="production",
            AUTH_STORE="sql",
            ACCESS_TOKEN_SECRET=_GENERATED_SECRETS["access"],
        )
        with self.assertRaises(ValueError):
            config.validate()

    def test_production_rejects_memory_store(self):
        with self.assertRaises(ValueError):
            make_config(ENVIRONMENT="production", AUTH_STORE="memory").validate()

    def test_unknown_store_rejected(self):
        with self.assertRaises(ValueError):
            make_config(AUTH_STORE="redis").validate()

    def test_ttls_must_be_positive(self):
        with self.assertRaises(ValueError):
            make_config(ACCESS_TOKEN_EXPIRE_MINUTES=0).validate()
        with self.assertRaises(ValueError):
            make_config(REFRESH_TOKEN_EXPIRE_DAYS=0).validate()

    def test_secret_for_purpose(self):
        config = make_config()
        self.assertEqual(config.secret_for("access"), "test-access-secret")
        self.assertEqual(config.secret_for("refresh"), "test-refresh-secret")
        self.assertEqual(config.secret_for("email-verification"), "test-verification-secret")
        with self.assertRaises(ValueError):
            config.secret_for("admin")

    def test_generated_defaults_are_independent(self):
        self.assertEqual(len(set(_GENERATED_SECRETS.values())), 3)
        self.assertIsInstance(AuthConfig().ACCESS_TOKEN_SECRET, str)


if __name__ == "__main__":
    unittest.main()
