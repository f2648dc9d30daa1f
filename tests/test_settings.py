# tests/test_settings.py

"""Tests for the Settings configuration class."""

import unittest
from pathlib import Path

from shopez.config.settings import Settings


class TestSettings(unittest.TestCase):
    """Verify Settings constants and the health endpoint registry."""

    def test_request_timeout_is_positive_int(self) -> None:
        """REQUEST_TIMEOUT must be a positive integer."""
        self.assertIsInstance(Settings.REQUEST_TIMEOUT, int)
        self.assertGreater(Settings.REQUEST_TIMEOUT, 0)

    def test_token_refresh_margin_positive(self) -> None:
        """TOKEN_REFRESH_MARGIN must be > 0."""
        self.assertGreater(Settings.TOKEN_REFRESH_MARGIN, 0)

    def test_urls_have_no_trailing_slash(self) -> None:
        """Base URLs are joined with '/', so they must not end in one."""
        for url in (
            Settings.CATALOG_BASE_URL,
            Settings.FIREBASE_DATABASE_URL,
            Settings.AUTH_BASE_URL,
            Settings.TOKEN_BASE_URL,
        ):
            with self.subTest(url=url):
                self.assertFalse(url.endswith("/"))

    def test_cart_root_is_carts(self) -> None:
        """Cart lines live under the 'carts' root key."""
        self.assertEqual(Settings.CART_ROOT, "carts")

    def test_all_categories_sentinel(self) -> None:
        """The unfiltered selection is spelled 'all'."""
        self.assertEqual(Settings.ALL_CATEGORIES, "all")

    def test_each_health_endpoint_has_required_keys(self) -> None:
        """Every endpoint must have id, label, and url keys."""
        for endpoint in Settings.HEALTH_ENDPOINTS:
            with self.subTest(endpoint=endpoint.get("id", "?")):
                self.assertIn("id", endpoint)
                self.assertIn("label", endpoint)
                self.assertTrue(endpoint["url"].startswith("https://"))

    def test_health_endpoint_ids_are_unique(self) -> None:
        """No duplicate endpoint ids."""
        ids = [e["id"] for e in Settings.HEALTH_ENDPOINTS]
        self.assertEqual(len(ids), len(set(ids)))

    def test_path_constants_are_paths(self) -> None:
        """Path-typed settings are Path instances."""
        self.assertIsInstance(Settings.BASE_DIR, Path)
        self.assertIsInstance(Settings.LOGS_DIR, Path)

    def test_impersonate_browser_is_string(self) -> None:
        """IMPERSONATE_BROWSER must be a non-empty string."""
        self.assertIsInstance(Settings.IMPERSONATE_BROWSER, str)
        self.assertTrue(len(Settings.IMPERSONATE_BROWSER) > 0)

    def test_default_headers_accept_json(self) -> None:
        """All service clients speak JSON."""
        self.assertEqual(
            Settings.DEFAULT_HEADERS["Accept"], "application/json"
        )


if __name__ == "__main__":
    unittest.main()
