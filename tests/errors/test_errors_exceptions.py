import unittest

from teamstore.errors.exceptions import (
    AccessDeniedError,
    AuthError,
    ExternalStoreError,
    HttpErrorInfo,
    NotFoundError,
    RateLimitError,
    TeamStoreError,
    map_http_error,
)


class TestExceptions(unittest.TestCase):
    def test_base_error_keeps_details_and_cause(self) -> None:
        cause = RuntimeError("root")
        err = TeamStoreError("msg", details={"k": "v"}, cause=cause)
        self.assertEqual(str(err), "msg")
        self.assertEqual(err.details["k"], "v")
        self.assertIs(err.cause, cause)

    def test_details_default_to_empty_dict(self) -> None:
        self.assertEqual(TeamStoreError("msg").details, {})

    def test_external_subclasses(self) -> None:
        self.assertTrue(issubclass(AuthError, ExternalStoreError))
        self.assertTrue(issubclass(RateLimitError, ExternalStoreError))

    def test_map_http_error_basic(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=404, message="not found"))
        self.assertIsInstance(err, NotFoundError)
        self.assertEqual(str(err), "not found")

        err = map_http_error(HttpErrorInfo(status_code=429))
        self.assertIsInstance(err, RateLimitError)

        err = map_http_error(HttpErrorInfo(status_code=401, message="auth"))
        self.assertIsInstance(err, AuthError)

    def test_map_http_error_403_rate_limit_vs_denied(self) -> None:
        err = map_http_error(
            HttpErrorInfo(status_code=403, reason="userRateLimitExceeded", message="slow")
        )
        self.assertIsInstance(err, RateLimitError)

        err = map_http_error(
            HttpErrorInfo(status_code=403, reason="insufficientPermissions", message="x")
        )
        self.assertIsInstance(err, AccessDeniedError)

    def test_map_http_error_other_is_external_store_error(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=503))
        self.assertIs(type(err), ExternalStoreError)
        self.assertEqual(err.details["status_code"], 503)
        self.assertEqual(str(err), "HTTP error 503")


if __name__ == "__main__":
    unittest.main()
