"""
Unit Tests for the comment explorer
"""

import pytest

from yt_sentiment.domain.models import (
    ChannelAnalysisResult,
    Comment,
    Sentiment,
    VideoAnalysisResult,
    VideoRecord,
)
from yt_sentiment.services.comment_filter import (
    filter_comments,
    flatten_comments,
    sentiment_breakdown,
)


@pytest.fixture
def video_result():
    return VideoAnalysisResult(
        overall_sentiment=Sentiment.POSITIVE,
        comments=[
            Comment(author="alice", text="Great editing", sentiment=Sentiment.POSITIVE),
            Comment(author="bob", text="Bad audio", sentiment=Sentiment.NEGATIVE),
            Comment(author="Carol", text="first", sentiment=Sentiment.NEUTRAL),
            Comment(author="dave", text="Great pacing too", sentiment=Sentiment.POSITIVE),
        ],
    )


@pytest.fixture
def channel_result():
    return ChannelAnalysisResult(
        channel_id="UCabcdefghijklmnopqrstuv",
        videos=[
            VideoRecord(
                video_id="vid00000001",
                video_title="Python Basics",
                comments=[
                    Comment(author="alice", text="Clear", sentiment=Sentiment.POSITIVE),
                    Comment(author="bob", text="Too slow", sentiment=Sentiment.NEGATIVE),
                ],
            ),
            VideoRecord(
                video_id="vid00000002",
                video_title="Async Deep Dive",
                comments=[
                    Comment(author="carol", text="Mind blown", sentiment=Sentiment.POSITIVE)
                ],
            ),
        ],
        total_comments=3,
        total_videos=2,
    )


class TestFlattenComments:
    """Test flattening results into one list"""

    def test_video_result(self, video_result):
        """Test video comments carry no video annotation"""
        comments = flatten_comments(video_result)

        assert len(comments) == 4
        assert all(c.video_id is None for c in comments)

    def test_channel_result_annotated(self, channel_result):
        """Test channel comments carry their video's ID and title"""
        comments = flatten_comments(channel_result)

        assert [c.video_id for c in comments] == [
            "vid00000001",
            "vid00000001",
            "vid00000002",
        ]
        assert comments[2].video_title == "Async Deep Dive"

    def test_result_left_untouched(self, channel_result):
        """Test annotation does not leak into the stored result"""
        flatten_comments(channel_result)

        dumped = channel_result.videos[0].comments[0].model_dump(by_alias=True)
        assert set(dumped) == {"author", "text", "sentiment"}


class TestFilterComments:
    """Test search and filters"""

    def test_no_filters(self, video_result):
        """Test no filters returns everything"""
        assert len(filter_comments(video_result)) == 4

    def test_search_text_case_insensitive(self, video_result):
        """Test search matches comment text regardless of case"""
        comments = filter_comments(video_result, search="GREAT")
        assert [c.author for c in comments] == ["alice", "dave"]

    def test_search_author(self, video_result):
        """Test search matches author names"""
        comments = filter_comments(video_result, search="carol")
        assert [c.text for c in comments] == ["first"]

    def test_search_video_title(self, channel_result):
        """Test search matches the video title on channel results"""
        comments = filter_comments(channel_result, search="async")
        assert [c.author for c in comments] == ["carol"]

    def test_blank_search_ignored(self, video_result):
        """Test whitespace search is treated as no search"""
        assert len(filter_comments(video_result, search="   ")) == 4

    def test_sentiment_filter(self, video_result):
        """Test exact sentiment match"""
        comments = filter_comments(video_result, sentiment=Sentiment.NEGATIVE)
        assert [c.author for c in comments] == ["bob"]

    def test_sentiment_filter_by_value(self, video_result):
        """Test sentiment filter accepts the label string"""
        comments = filter_comments(video_result, sentiment="Positive")
        assert len(comments) == 2

    def test_video_filter(self, channel_result):
        """Test video filter on channel results"""
        comments = filter_comments(channel_result, video_id="vid00000002")
        assert [c.text for c in comments] == ["Mind blown"]

    def test_combined_filters(self, channel_result):
        """Test filters combine with AND"""
        comments = filter_comments(
            channel_result,
            search="python",
            sentiment=Sentiment.NEGATIVE,
            video_id="vid00000001",
        )
        assert [c.author for c in comments] == ["bob"]


class TestSentimentBreakdown:
    """Test sentiment counts and percentages"""

    def test_breakdown(self, video_result):
        """Test counts and one-decimal percentages"""
        breakdown = sentiment_breakdown(flatten_comments(video_result))

        assert breakdown.total == 4
        assert breakdown.counts == {"Positive": 2, "Negative": 1, "Neutral": 1}
        assert breakdown.percentages == {"Positive": 50.0, "Negative": 25.0, "Neutral": 25.0}

    def test_empty(self):
        """Test empty input gives zeros"""
        breakdown = sentiment_breakdown([])

        assert breakdown.total == 0
        assert breakdown.counts == {"Positive": 0, "Negative": 0, "Neutral": 0}
        assert breakdown.percentages == {"Positive": 0.0, "Negative": 0.0, "Neutral": 0.0}

    def test_rounding(self, channel_result):
        """Test percentages are rounded to one decimal"""
        breakdown = sentiment_breakdown(flatten_comments(channel_result))

        assert breakdown.percentages["Positive"] == 66.7
        assert breakdown.percentages["Negative"] == 33.3
