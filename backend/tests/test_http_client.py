"""Unit tests for the urllib-backed HTTP client."""

from __future__ import annotations

import http.client
import unittest
from unittest.mock import MagicMock, patch
from urllib import error as urllib_error

from app.enrichment.http import HttpRequestError, UrllibHttpClient


def _response(body: bytes | None = None, read_error: Exception | None = None) -> MagicMock:
    resp = MagicMock()
    if read_error is not None:
        resp.__enter__.return_value.read.side_effect = read_error
    else:
        resp.__enter__.return_value.read.return_value = body
    return resp


class UrllibHttpClientTests(unittest.TestCase):
    def test_get_json_decodes_body(self) -> None:
        with patch("app.enrichment.http.urllib_request.urlopen", return_value=_response(b'{"ok": true}')) as urlopen:
            payload = UrllibHttpClient(user_agent="finchly-test").get_json("https://api.test/x")

        self.assertEqual(payload, {"ok": True})
        request = urlopen.call_args.args[0]
        self.assertEqual(request.get_header("User-agent"), "finchly-test")

    def test_failures_while_reading_body_are_transport_errors(self) -> None:
        for error in (
            http.client.IncompleteRead(b"{\"ok"),
            ConnectionResetError("peer reset"),
            TimeoutError("read timed out"),
        ):
            with self.subTest(error=error):
                with patch("app.enrichment.http.urllib_request.urlopen", return_value=_response(read_error=error)):
                    with self.assertRaises(HttpRequestError) as ctx:
                        UrllibHttpClient().get_text("https://api.test/x")

                self.assertIsNone(ctx.exception.status_code)

    def test_http_status_is_kept(self) -> None:
        error = urllib_error.HTTPError("https://api.test/x", 503, "unavailable", {}, None)
        with patch("app.enrichment.http.urllib_request.urlopen", side_effect=error):
            with self.assertRaises(HttpRequestError) as ctx:
                UrllibHttpClient().get_text("https://api.test/x")

        self.assertEqual(ctx.exception.status_code, 503)

    def test_non_json_body(self) -> None:
        with patch("app.enrichment.http.urllib_request.urlopen", return_value=_response(b"<html>")):
            with self.assertRaises(HttpRequestError):
                UrllibHttpClient().get_json("https://api.test/x")


if __name__ == "__main__":
    unittest.main()
