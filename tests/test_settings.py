import os
import unittest
from dataclasses import replace
from datetime import timedelta
from unittest import mock

from config.settings import Settings
from main import _cleanup_stale_orders, create_app
from tests.support import TEST_SETTINGS


class TestSettings(unittest.TestCase):

    def test_validate_lists_missing_keys(self):
        settings = replace(TEST_SETTINGS, STRIPE_WEBHOOK_SECRET="", SECRET_KEY="")

        with self.assertRaises(RuntimeError) as ctx:
            settings.validate()

        self.assertIn("SECRET_KEY", str(ctx.exception))
        self.assertIn("STRIPE_WEBHOOK_SECRET", str(ctx.exception))

    def test_app_refuses_incomplete_config(self):
        with self.assertRaises(RuntimeError):
            create_app(replace(TEST_SETTINGS, STRIPE_SECRET_KEY=""))

    def test_from_env(self):
        env = {
            "SECRET_KEY": "k", "STRIPE_SECRET_KEY": "sk", "STRIPE_WEBHOOK_SECRET": "wh",
            "SELLER_EMAIL": "s@example.com", "SELLER_PASSWORD": "p",
            "CURRENCY": "EUR", "FRONTEND_URL": "https://front.example/",
            "COOKIE_SECURE": "true", "ORDER_SWEEP_ENABLED": "false", "STALE_ORDER_HOURS": "6",
        }
        with mock.patch.dict(os.environ, env):
            settings = Settings.from_env().validate()

        self.assertEqual(settings.CURRENCY, "eur")
        self.assertEqual(settings.FRONTEND_URL, "https://front.example")
        self.assertTrue(settings.COOKIE_SECURE)
        self.assertFalse(settings.ORDER_SWEEP_ENABLED)
        self.assertEqual(settings.STALE_ORDER_HOURS, 6)


class TestCleanupJob(unittest.TestCase):

    def test_errors_are_rolled_back_and_session_closed(self):
        session = mock.Mock()
        database = mock.Mock()
        database.session.return_value = session

        with mock.patch("modules.order.service.order_service.release_stale_online_orders",
                        side_effect=RuntimeError("db down")):
            _cleanup_stale_orders(database, mock.Mock(), timedelta(hours=24))

        session.rollback.assert_called_once()
        session.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
