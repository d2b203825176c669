"""
Domain models for comment sentiment analysis.

Field names follow the camelCase JSON contract shared with the web client;
Python code may use either the snake_case attribute or the alias when
constructing models.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Sentiment(str, enum.Enum):
    """Sentiment label assigned to a comment or an aggregate"""

    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"


class AnalysisKind(str, enum.Enum):
    """Kind of analysis subject, also used as the cache key namespace"""

    VIDEO = "video"
    CHANNEL = "channel"


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# Comments Provider shapes
# ============================================================================


class SourceComment(CamelModel):
    """A comment as fetched from YouTube, before classification"""

    author: str
    text: str


class ChannelInfo(CamelModel):
    id: str
    title: str
    subscriber_count: str = Field(alias="subscriberCount", default="0")
    video_count: str = Field(alias="videoCount", default="0")


class VideoInfo(CamelModel):
    id: str
    title: str
    published_at: str = Field(alias="publishedAt", default="")
    view_count: str = Field(alias="viewCount", default="0")
    comment_count: str = Field(alias="commentCount", default="0")


class VideoComments(CamelModel):
    video: VideoInfo
    comments: List[SourceComment] = Field(default_factory=list)


class ChannelComments(CamelModel):
    """Channel metadata plus comments of every video that has any"""

    channel: ChannelInfo
    videos: List[VideoComments] = Field(default_factory=list)


# ============================================================================
# Analysis results
# ============================================================================


class Comment(CamelModel):
    """A classified comment. Carries exactly author, text and sentiment."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    author: str
    text: str
    sentiment: Sentiment = Sentiment.NEUTRAL


class VideoAnalysisResult(CamelModel):
    overall_sentiment: Sentiment = Field(
        alias="overallSentiment", default=Sentiment.NEUTRAL
    )
    positive_keywords: List[str] = Field(alias="positiveKeywords", default_factory=list)
    negative_keywords: List[str] = Field(alias="negativeKeywords", default_factory=list)
    comments: List[Comment] = Field(default_factory=list)


class VideoRecord(CamelModel):
    """Per-video analysis inside a channel result"""

    video_id: str = Field(alias="videoId", min_length=1)
    video_title: str = Field(alias="videoTitle", default="")
    published_at: str = Field(alias="publishedAt", default="")
    view_count: str = Field(alias="viewCount", default="0")
    comment_count: str = Field(alias="commentCount", default="0")
    overall_sentiment: Sentiment = Field(
        alias="overallSentiment", default=Sentiment.NEUTRAL
    )
    positive_keywords: List[str] = Field(alias="positiveKeywords", default_factory=list)
    negative_keywords: List[str] = Field(alias="negativeKeywords", default_factory=list)
    comments: List[Comment] = Field(default_factory=list)


class ChannelAnalysisResult(CamelModel):
    channel_id: str = Field(alias="channelId")
    channel_title: str = Field(alias="channelTitle", default="")
    subscriber_count: str = Field(alias="subscriberCount", default="0")
    video_count: str = Field(alias="videoCount", default="0")
    overall_sentiment: Sentiment = Field(
        alias="overallSentiment", default=Sentiment.NEUTRAL
    )
    positive_keywords: List[str] = Field(alias="positiveKeywords", default_factory=list)
    negative_keywords: List[str] = Field(alias="negativeKeywords", default_factory=list)
    videos: List[VideoRecord] = Field(default_factory=list)
    total_comments: int = Field(alias="totalComments", default=0)
    total_videos: int = Field(alias="totalVideos", default=0)


# ============================================================================
# Progress reporting
# ============================================================================


class AnalysisStage(str, enum.Enum):
    FETCHING = "fetching"
    ANALYZING = "analyzing"
    PROCESSING = "processing"
    COMPLETE = "complete"


@dataclass(frozen=True)
class AnalysisProgress:
    """Snapshot handed to progress callbacks while an analysis runs"""

    stage: AnalysisStage
    message: str
    percentage: int
    entity_id: Optional[str] = None


__all__ = [
    "Sentiment",
    "AnalysisKind",
    "SourceComment",
    "ChannelInfo",
    "VideoInfo",
    "VideoComments",
    "ChannelComments",
    "Comment",
    "VideoAnalysisResult",
    "VideoRecord",
    "ChannelAnalysisResult",
    "AnalysisStage",
    "AnalysisProgress",
]
