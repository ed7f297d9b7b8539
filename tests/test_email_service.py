import json
import unittest

import httpx

from support import make_config
from tokenauth.services.email_service import RESEND_ENDPOINT, EmailService


class TestEmailService(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.requests = []
        self.status_code = 200

    def handler(self, request):
        self.requests.append(request)
        return httpx.Response(self.status_code, json={"id": "email-1"})

    def service(self, **overrides):
        config = make_config(RESEND_API_KEY="re_test", **overrides)
        return EmailService(config, transport=httpx.MockTransport(self.handler))

    def test_verification_link_encodes_token(self):
        link = self.service().verification_link("a.b+c")

        self.assertEqual(link, "http://testserver/api/v1/auth/verify-email?token=a.b%2Bc")

    async def test_sends_link_to_resend(self):
        sent = await self.service().send_verification_email("alice@example.com", "tok.en", "alice")

        self.assertTrue(sent)
        request = self.requests[0]
        self.assertEqual(str(request.url), RESEND_ENDPOINT)
        self.assertEqual(request.headers["Authorization"], "Bearer re_test")
        body = json.loads(request.content)
        self.assertEqual(body["to"], ["alice@example.com"])
        self.assertIn("verify-email?token=tok.en", body["html"])

    async def test_rejected_delivery(self):
        self.status_code = 422

        with self.assertLogs("tokenauth.services.email_service", level="WARNING"):
            sent = await self.service().send_verification_email("alice@example.com", "t", "alice")

        self.assertFalse(sent)

    async def test_transport_failure(self):
        def broken(request):
            raise httpx.ConnectError("unreachable", request=request)

        service = EmailService(make_config(RESEND_API_KEY="re_test"), transport=httpx.MockTransport(broken))

        with self.assertLogs("tokenauth.services.email_service", level="ERROR"):
            self.assertFalse(await service.send_verification_email("alice@example.com", "t", "alice"))

    async def test_missing_api_key(self):
        service = EmailService(make_config(), transport=httpx.MockTransport(self.handler))

        self.assertFalse(await service.send_verification_email("alice@example.com", "t", "alice"))
        self.assertEqual(self.requests, [])


if __name__ == "__main__":
    unittest.main()
