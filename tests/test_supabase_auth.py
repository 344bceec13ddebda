from __future__ import annotations

import unittest
from unittest import mock

import requests

from app.config import AuthSettings
from app.connectors.supabase_auth import AuthenticationError, AuthProviderError, SupabaseAuthClient


def _response(status_code: int, payload: object = None, *, invalid_json: bool = False) -> mock.Mock:
    response = mock.Mock(spec=requests.Response)
    response.status_code = status_code
    if invalid_json:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response


class TestSupabaseAuthClient(unittest.TestCase):
    def setUp(self) -> None:
        self.session = mock.Mock(spec=requests.Session)
        self.client = SupabaseAuthClient(
            settings=AuthSettings(
                supabase_url="https://project.supabase.test/",
                anon_key="anon",
                timeout_seconds=3.0,
            ),
            session=self.session,
        )

    def test_resolves_user_and_sends_provider_headers(self) -> None:
        self.session.get.return_value = _response(200, {"id": "user-1", "email": "ana@example.com"})

        user = self.client.get_user("token-123")

        self.assertEqual(user.id, "user-1")
        self.assertEqual(user.email, "ana@example.com")
        self.session.get.assert_called_once_with(
            "https://project.supabase.test/auth/v1/user",
            headers={"apikey": "anon", "Authorization": "Bearer token-123"},
            timeout=3.0,
        )

    def test_rejected_tokens_raise_authentication_error(self) -> None:
        for status_code in (401, 403):
            with self.subTest(status_code=status_code):
                self.session.get.return_value = _response(status_code)
                with self.assertRaises(AuthenticationError):
                    self.client.get_user("expired")

    def test_blank_token_is_rejected_without_request(self) -> None:
        with self.assertRaises(AuthenticationError):
            self.client.get_user("   ")
        self.session.get.assert_not_called()

    def test_provider_failures_raise_provider_error(self) -> None:
        cases = {
            "server error": _response(502),
            "invalid json": _response(200, invalid_json=True),
            "missing id": _response(200, {"email": "x@example.com"}),
        }
        for name, response in cases.items():
            with self.subTest(case=name):
                self.session.get.return_value = response
                with self.assertRaises(AuthProviderError):
                    self.client.get_user("token")

    def test_network_error_raises_provider_error(self) -> None:
        self.session.get.side_effect = requests.ConnectionError("down")

        with self.assertRaises(AuthProviderError):
            self.client.get_user("token")

    def test_requires_configuration(self) -> None:
        with self.assertRaises(AuthProviderError):
            SupabaseAuthClient(settings=AuthSettings(supabase_url=None, anon_key="anon"))


if __name__ == "__main__":
    unittest.main()
