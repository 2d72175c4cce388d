import unittest

from services.sentiment.metrics import sentiment_metrics
from services.sentiment.topics import EUROPEAN_TOPICS, MARKET_TOPICS, extract_topics


def _article(title, description="", sentiment=50):
    return {"title": title, "description": description, "sentiment": sentiment}


class TopicExtractionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.articles = [
            _article("Fed holds interest rate steady", "Powell flags inflation risk", 40),
            _article("Nvidia earnings beat estimates", "AI demand lifts revenue", 80),
            _article("Oil prices climb", "OPEC trims output", 60),
            _article("Local bakery opens", "Fresh bread daily", 50),
        ]

    def test_never_emits_empty_topics(self) -> None:
        topics = extract_topics(self.articles, MARKET_TOPICS)
        self.assertTrue(topics)
        self.assertTrue(all(t["count"] > 0 for t in topics))

    def test_counts_cover_matching_articles(self) -> None:
        topics = extract_topics(self.articles, MARKET_TOPICS, limit=len(MARKET_TOPICS))
        matching = sum(
            1
            for a in self.articles
            if any(
                k in f"{a['title']} {a['description']}".lower()
                for keywords in MARKET_TOPICS.values()
                for k in keywords
            )
        )
        self.assertGreaterEqual(sum(t["count"] for t in topics), matching)

    def test_sorted_by_count_and_averaged(self) -> None:
        topics = extract_topics(self.articles, MARKET_TOPICS)
        counts = [t["count"] for t in topics]
        self.assertEqual(counts, sorted(counts, reverse=True))
        by_name = {t["topic"]: t for t in topics}
        self.assertEqual(by_name["Interest Rates"]["averageSentiment"], 40)

    def test_limit(self) -> None:
        self.assertLessEqual(len(extract_topics(self.articles, MARKET_TOPICS, limit=2)), 2)

    def test_european_topics(self) -> None:
        topics = extract_topics([_article("ECB's Lagarde warns on eurozone growth", "", 45)], EUROPEAN_TOPICS)
        names = [t["topic"] for t in topics]
        self.assertIn("ECB Policy", names)
        self.assertIn("Eurozone", names)

    def test_no_articles(self) -> None:
        self.assertEqual(extract_topics([], MARKET_TOPICS), [])


class SentimentMetricsTests(unittest.TestCase):
    def test_buckets(self) -> None:
        metrics = sentiment_metrics([70, 30, 50, 61]).to_dict()
        self.assertEqual(metrics["averageSentiment"], 53)
        self.assertEqual(metrics["bullishPercentage"], 50)
        self.assertEqual(metrics["bearishPercentage"], 25)
        self.assertEqual(metrics["neutralPercentage"], 25)

    def test_thresholds_are_exclusive(self) -> None:
        metrics = sentiment_metrics([60, 40]).to_dict()
        self.assertEqual(metrics["neutralPercentage"], 100)

    def test_empty(self) -> None:
        self.assertEqual(
            sentiment_metrics([]).to_dict(),
            {"averageSentiment": 50, "bullishPercentage": 0, "bearishPercentage": 0, "neutralPercentage": 0},
        )


if __name__ == "__main__":
    unittest.main()
