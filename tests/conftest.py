"""
Shared test fixtures
"""

import pytest

from yt_sentiment.app.config import reset_config
from yt_sentiment.app.shared_cache import reset_result_cache
from yt_sentiment.domain.models import (
    ChannelComments,
    ChannelInfo,
    SourceComment,
    VideoComments,
    VideoInfo,
)


class FakeClock:
    """Manually advanced clock for TTL tests"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_singletons():
    """Give every test a fresh config and result cache"""
    reset_config()
    reset_result_cache()
    yield
    reset_config()
    reset_result_cache()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def source_comments():
    return [
        SourceComment(author="alice", text="Loved this video, great editing!"),
        SourceComment(author="bob", text="Audio was terrible in the second half"),
        SourceComment(author="carol", text="First"),
    ]


@pytest.fixture
def channel_source():
    """Channel with two commented videos"""
    return ChannelComments(
        channel=ChannelInfo(
            id="UCabcdefghijklmnopqrstuv",
            title="Test Channel",
            subscriber_count="12000",
            video_count="42",
        ),
        videos=[
            VideoComments(
                video=VideoInfo(
                    id="vid00000001",
                    title="First Video",
                    published_at="2024-01-01T00:00:00+00:00",
                    view_count="1000",
                    comment_count="2",
                ),
                comments=[
                    SourceComment(author="alice", text="Amazing tutorial"),
                    SourceComment(author="bob", text="Too long"),
                ],
            ),
            VideoComments(
                video=VideoInfo(
                    id="vid00000002",
                    title="Second Video",
                    published_at="2024-02-01T00:00:00+00:00",
                    view_count="500",
                    comment_count="1",
                ),
                comments=[SourceComment(author="carol", text="Helpful, thanks")],
            ),
        ],
    )
