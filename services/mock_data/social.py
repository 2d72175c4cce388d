from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from services.reddit.client import RedditPost
from services.twitter.client import Tweet

# (id, title, selftext, score, comments, seconds ago, subreddit)
_REDDIT_POSTS = (
    ("mock1", "Market rally continues as tech stocks surge",
     "Seeing strong momentum in AAPL and MSFT. Bullish sentiment across the board.", 245, 67, 3600, "investing"),
    ("mock2", "Concerns about market valuation at current levels",
     "P/E ratios seem stretched. Might be time to take some profits.", 189, 43, 7200, "stocks"),
    ("mock3", "AI stocks showing incredible growth potential",
     "NVDA earnings beat expectations. This sector is on fire!", 312, 89, 1800, "investing"),
    ("mock4", "Fed policy impact on market sentiment",
     "Interest rate decisions creating uncertainty in the markets.", 156, 34, 5400, "SecurityAnalysis"),
    ("mock5", "Long-term investment strategy discussion",
     "Dollar cost averaging into index funds remains solid approach.", 203, 56, 9000, "investing"),
)

# (id, text, seconds ago, likes, retweets, replies)
_TWEETS = (
    ("mock_tweet_1", "$SPY breaking out to new highs! This bull market has legs #stocks #investing", 1800, 45, 12, 8),
    ("mock_tweet_2", "Market looking overextended here. Time to take some profits? $QQQ $SPY #trading", 3600, 23, 6, 15),
    ("mock_tweet_3", "AI revolution is just getting started. $NVDA $MSFT leading the charge!", 900, 67, 28, 12),
    ("mock_tweet_4", "Fed meeting next week could shake things up. Stay cautious #Fed #markets", 5400, 34, 9, 21),
    ("mock_tweet_5", "Long term investing in index funds never goes out of style $VTI $VOO", 7200, 56, 18, 7),
)


def mock_reddit_posts(now: Optional[float] = None) -> List[RedditPost]:
    now = time.time() if now is None else now
    return [
        {
            "id": post_id,
            "title": title,
            "selftext": selftext,
            "score": score,
            "num_comments": comments,
            "created_utc": float(int(now) - ago),
            "subreddit": subreddit,
            "url": None,
            "author": None,
        }
        for post_id, title, selftext, score, comments, ago, subreddit in _REDDIT_POSTS
    ]


def mock_tweets(now: Optional[datetime] = None) -> List[Tweet]:
    now = now or datetime.now(timezone.utc)
    return [
        {
            "id": tweet_id,
            "text": text,
            "created_at": (now - timedelta(seconds=ago)).isoformat().replace("+00:00", "Z"),
            "public_metrics": {"like_count": likes, "retweet_count": retweets, "reply_count": replies},
        }
        for tweet_id, text, ago, likes, retweets, replies in _TWEETS
    ]
