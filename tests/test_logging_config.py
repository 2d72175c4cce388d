import json
import logging
import unittest

from config.logging_config import JsonFormatter


class JsonFormatterTests(unittest.TestCase):
    def _record(self, **extra) -> logging.LogRecord:
        record = logging.LogRecord("services.orchestrator", logging.WARNING, __file__, 1,
                                   "%s: provider %s failed", ("news", "NewsAPI"), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_emits_orchestrator_tags(self) -> None:
        line = JsonFormatter().format(self._record(dataset="news", provider="NewsAPI", data_quality=None))
        payload = json.loads(line)
        self.assertEqual(payload["message"], "news: provider NewsAPI failed")
        self.assertEqual(payload["level"], "WARNING")
        self.assertEqual(payload["dataset"], "news")
        self.assertEqual(payload["provider"], "NewsAPI")
        self.assertNotIn("data_quality", payload)

    def test_plain_records_have_no_tags(self) -> None:
        payload = json.loads(JsonFormatter().format(self._record()))
        self.assertNotIn("provider", payload)


if __name__ == "__main__":
    unittest.main()
