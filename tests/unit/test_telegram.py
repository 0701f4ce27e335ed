import unittest
from unittest.mock import Mock, patch

import requests

from hrtests.utils.telegram import MAX_MESSAGE_LENGTH, TelegramNotifier, truncate


class TestTelegramNotifier(unittest.TestCase):

    def setUp(self):
        self.notifier = TelegramNotifier(bot_token="123:ABC", channel_id="@hr_channel", timeout=5)

    @patch("hrtests.utils.telegram.requests.post")
    def test_send_success(self, mock_post):
        mock_post.return_value = Mock(status_code=200, text="ok")

        result = self.notifier.send("*Привет*")

        self.assertTrue(result.ok)
        self.assertIsNone(result.error)
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], "https://api.telegram.org/bot123:ABC/sendMessage")
        self.assertEqual(kwargs["timeout"], 5)
        self.assertEqual(
            kwargs["json"],
            {
                "chat_id": "@hr_channel",
                "text": "*Привет*",
                "parse_mode": "Markdown",
                "disable_web_page_preview": True,
            },
        )

    @patch("hrtests.utils.telegram.requests.post")
    def test_api_error_is_reported(self, mock_post):
        mock_post.return_value = Mock(status_code=400, text="Bad Request: can't parse entities")

        result = self.notifier.send("*сломанная разметка")

        self.assertFalse(result.ok)
        self.assertIn("400", str(result.error))

    @patch("hrtests.utils.telegram.requests.post")
    def test_timeout_is_reported_without_token(self, mock_post):
        mock_post.side_effect = requests.Timeout("https://api.telegram.org/bot123:ABC/sendMessage timed out")

        result = self.notifier.send("текст")

        self.assertFalse(result.ok)
        self.assertNotIn("123:ABC", str(result.error))

    @patch("hrtests.utils.telegram.requests.post")
    def test_not_configured(self, mock_post):
        result = TelegramNotifier(bot_token=None, channel_id="@hr_channel").send("текст")

        self.assertFalse(result.ok)
        mock_post.assert_not_called()

    @patch("hrtests.utils.telegram.requests.post")
    def test_dry_run_does_not_send(self, mock_post):
        notifier = TelegramNotifier(bot_token=None, channel_id=None, dry_run=True)

        with self.assertLogs("hrtests.utils.telegram", level="INFO"):
            result = notifier.send("текст")

        self.assertTrue(result.ok)
        mock_post.assert_not_called()

    @patch("hrtests.utils.telegram.requests.post")
    def test_long_message_is_truncated(self, mock_post):
        mock_post.return_value = Mock(status_code=200, text="ok")

        self.notifier.send("а" * 5000)

        sent = mock_post.call_args.kwargs["json"]["text"]
        self.assertEqual(len(sent), MAX_MESSAGE_LENGTH)
        self.assertTrue(sent.endswith("..."))

    def test_short_text_untouched(self):
        self.assertEqual(truncate("текст"), "текст")


if __name__ == "__main__":
    unittest.main()
