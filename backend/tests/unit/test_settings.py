"""Unit tests for shared/settings.py"""

import unittest
from unittest.mock import patch

from pydantic import ValidationError

from shared.settings import DEFAULT_FRONTEND_BASE_URL, EmailSettings, NotificationSettings


class TestNotificationSettings(unittest.TestCase):
    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            settings = NotificationSettings.from_env()

        self.assertEqual(settings.frontend_base_url, DEFAULT_FRONTEND_BASE_URL)
        self.assertEqual(settings.delivery_mode, "at_least_once")
        self.assertEqual(settings.interval_seconds, 300)

    def test_reads_environment(self):
        env = {
            "FRONTEND_BASE_URL": "https://staging.example.com/",
            "NOTIFICATION_DELIVERY_MODE": "at_most_once",
            "NOTIFICATION_INITIAL_DELAY_SECONDS": "0",
            "NOTIFICATION_INTERVAL_SECONDS": "60",
        }
        with patch.dict("os.environ", env, clear=True):
            settings = NotificationSettings.from_env()

        self.assertEqual(settings.frontend_base_url, "https://staging.example.com")
        self.assertEqual(settings.delivery_mode, "at_most_once")
        self.assertEqual(settings.initial_delay_seconds, 0)
        self.assertEqual(settings.interval_seconds, 60)

    def test_unknown_delivery_mode_rejected(self):
        with patch.dict("os.environ", {"NOTIFICATION_DELIVERY_MODE": "exactly_once"}, clear=True):
            with self.assertRaises(ValidationError):
                NotificationSettings.from_env()


class TestEmailSettings(unittest.TestCase):
    def test_api_key_selects_resend(self):
        self.assertTrue(EmailSettings(resend_api_key="re_123").uses_resend)
        self.assertFalse(EmailSettings().uses_resend)

    def test_missing_smtp_fields(self):
        settings = EmailSettings(smtp_host="smtp.example.com", smtp_port=587)

        self.assertEqual(settings.missing_smtp_fields(), ["SMTP_USER", "SMTP_PASS", "SMTP_FROM"])


if __name__ == "__main__":
    unittest.main()
