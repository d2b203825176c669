"""
Normalization of untrusted model output.

The inference provider is asked for a specific JSON shape but nothing
guarantees it delivers one. Everything here is a total function: whatever
the provider returned, the caller gets a well-formed result model back.

Channel output is first classified as ``ValidShape`` or ``NeedsRepair``;
both go through the same repair pass so that counts are always recomputed
and stray comment fields are always dropped.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from yt_sentiment.domain.models import (
    ChannelAnalysisResult,
    ChannelComments,
    Comment,
    Sentiment,
    SourceComment,
    VideoAnalysisResult,
    VideoComments,
    VideoRecord,
)

UNMATCHED_VIDEO_ID_PREFIX = "unmatched-"

_COMMENT_FIELDS = ("author", "text", "sentiment")


@dataclass(frozen=True)
class ValidShape:
    output: Dict[str, Any]


@dataclass(frozen=True)
class NeedsRepair:
    output: Any
    issues: List[str] = field(default_factory=list)


InferenceOutput = Union[ValidShape, NeedsRepair]


# ============================================================================
# Canonical results
# ============================================================================


def empty_video_result() -> VideoAnalysisResult:
    return VideoAnalysisResult(
        overall_sentiment=Sentiment.NEUTRAL,
        positive_keywords=[],
        negative_keywords=[],
        comments=[],
    )


def empty_channel_result(source: ChannelComments) -> ChannelAnalysisResult:
    """Channel metadata with zero counts and nothing analyzed"""
    channel = source.channel
    return ChannelAnalysisResult(
        channel_id=channel.id,
        channel_title=channel.title,
        subscriber_count=channel.subscriber_count,
        video_count=channel.video_count,
        overall_sentiment=Sentiment.NEUTRAL,
        positive_keywords=[],
        negative_keywords=[],
        videos=[],
        total_comments=0,
        total_videos=0,
    )


def neutral_comments(comments: List[SourceComment]) -> List[Comment]:
    return [
        Comment(author=c.author, text=c.text, sentiment=Sentiment.NEUTRAL)
        for c in comments
    ]


def neutral_video_result(comments: List[SourceComment]) -> VideoAnalysisResult:
    """Fetched comments passed through unclassified"""
    return VideoAnalysisResult(
        overall_sentiment=Sentiment.NEUTRAL,
        positive_keywords=[],
        negative_keywords=[],
        comments=neutral_comments(comments),
    )


def neutral_video_record(source: VideoComments) -> VideoRecord:
    video = source.video
    return VideoRecord(
        video_id=video.id,
        video_title=video.title,
        published_at=video.published_at,
        view_count=video.view_count,
        comment_count=video.comment_count,
        overall_sentiment=Sentiment.NEUTRAL,
        positive_keywords=[],
        negative_keywords=[],
        comments=neutral_comments(source.comments),
    )


def neutral_channel_result(source: ChannelComments) -> ChannelAnalysisResult:
    """Every fetched video passed through unclassified"""
    result = empty_channel_result(source)
    result.videos = [neutral_video_record(v) for v in source.videos]
    return with_counts(result)


def with_counts(result: ChannelAnalysisResult) -> ChannelAnalysisResult:
    """Recompute ``totalVideos`` and ``totalComments`` from ``videos``"""
    result.total_videos = len(result.videos)
    result.total_comments = sum(len(v.comments) for v in result.videos)
    return result


# ============================================================================
# Field-level normalization
# ============================================================================


def normalize_sentiment(value: Any) -> Sentiment:
    if isinstance(value, Sentiment):
        return value
    if isinstance(value, str):
        cleaned = value.strip().capitalize()
        for sentiment in Sentiment:
            if sentiment.value == cleaned:
                return sentiment
    return Sentiment.NEUTRAL


def normalize_keywords(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(k) for k in value if isinstance(k, (str, int, float)) and str(k)]


def normalize_comments(value: Any) -> List[Comment]:
    """Keep only author, text and sentiment of well-formed comment entries"""
    if not isinstance(value, list):
        return []

    comments = []
    for entry in value:
        if not isinstance(entry, dict):
            continue
        cleaned = {k: entry[k] for k in _COMMENT_FIELDS if k in entry}
        text = cleaned.get("text")
        if not isinstance(text, str):
            continue
        comments.append(
            Comment(
                author=str(cleaned.get("author") or "Unknown"),
                text=text,
                sentiment=normalize_sentiment(cleaned.get("sentiment")),
            )
        )
    return comments


def _text(value: Any, fallback: str) -> str:
    if value is None or value == "":
        return fallback
    return str(value)


def fallback_video_id() -> str:
    """Placeholder for a video the model returned without a matchable ID"""
    return f"{UNMATCHED_VIDEO_ID_PREFIX}{uuid.uuid4().hex[:12]}"


# ============================================================================
# Video output
# ============================================================================


def repair_video_output(raw: Any) -> VideoAnalysisResult:
    """Normalize a video-shaped model response; falsy input is the empty result"""
    if not raw or not isinstance(raw, dict):
        return empty_video_result()

    return VideoAnalysisResult(
        overall_sentiment=normalize_sentiment(raw.get("overallSentiment")),
        positive_keywords=normalize_keywords(raw.get("positiveKeywords")),
        negative_keywords=normalize_keywords(raw.get("negativeKeywords")),
        comments=normalize_comments(raw.get("comments")),
    )


# ============================================================================
# Channel output
# ============================================================================


def classify_channel_output(raw: Any) -> InferenceOutput:
    """Tell apart responses that match the channel schema from ones that do not"""
    if not raw or not isinstance(raw, dict):
        return NeedsRepair(raw, ["response is empty or not an object"])

    issues = []
    videos = raw.get("videos")
    if not isinstance(videos, list):
        issues.append("videos is not a list")
        videos = []

    for index, video in enumerate(videos):
        if not isinstance(video, dict):
            issues.append(f"videos[{index}] is not an object")
            continue
        video_id = video.get("videoId")
        if not isinstance(video_id, str) or not video_id:
            issues.append(f"videos[{index}] is missing videoId")
        comments = video.get("comments")
        if not isinstance(comments, list):
            issues.append(f"videos[{index}].comments is not a list")
            continue
        if any(isinstance(c, dict) and "videoId" in c for c in comments):
            issues.append(f"videos[{index}].comments carry videoId")

    for key in ("overallSentiment", "positiveKeywords", "negativeKeywords"):
        if key not in raw:
            issues.append(f"{key} is missing")

    if issues:
        return NeedsRepair(raw, issues)
    return ValidShape(raw)


def _repair_video_record(
    raw_video: Dict[str, Any], source: Optional[VideoComments]
) -> VideoRecord:
    """Fetched metadata wins over whatever the model echoed back"""
    video_id = raw_video.get("videoId")
    if not isinstance(video_id, str) or not video_id:
        video_id = source.video.id if source is not None else fallback_video_id()

    if source is not None:
        info = source.video
        video_title, published_at = info.title, info.published_at
        view_count, comment_count = info.view_count, info.comment_count
    else:
        video_title = _text(raw_video.get("videoTitle"), "")
        published_at = _text(raw_video.get("publishedAt"), "")
        view_count = _text(raw_video.get("viewCount"), "0")
        comment_count = _text(raw_video.get("commentCount"), "0")

    return VideoRecord(
        video_id=video_id,
        video_title=video_title,
        published_at=published_at,
        view_count=view_count,
        comment_count=comment_count,
        overall_sentiment=normalize_sentiment(raw_video.get("overallSentiment")),
        positive_keywords=normalize_keywords(raw_video.get("positiveKeywords")),
        negative_keywords=normalize_keywords(raw_video.get("negativeKeywords")),
        comments=normalize_comments(raw_video.get("comments")),
    )


def _fetched_counterpart(
    raw_video: Dict[str, Any], index: int, source: ChannelComments
) -> Optional[VideoComments]:
    """Match by the model's videoId, or by position when it gave none"""
    video_id = raw_video.get("videoId")
    if isinstance(video_id, str) and video_id:
        for fetched in source.videos:
            if fetched.video.id == video_id:
                return fetched
        return None
    return source.videos[index] if index < len(source.videos) else None


def repair_channel_output(
    output: Union[InferenceOutput, Any], source: ChannelComments
) -> ChannelAnalysisResult:
    """
    Turn a channel-shaped model response into a ChannelAnalysisResult

    Videos without ``videoId`` take the ID of the fetched video at the same
    position, or a sentinel when the model returned more videos than were
    fetched. Fetched videos the model left out are appended as neutral
    records. Channel and video metadata always come from the fetched data
    when it exists, and the totals are always recomputed.

    Args:
        output: A classified response or the raw provider output
        source: The data that was sent to the model
    """
    if not isinstance(output, (ValidShape, NeedsRepair)):
        output = classify_channel_output(output)

    raw = output.output
    if not raw or not isinstance(raw, dict):
        return empty_channel_result(source)

    raw_videos = raw.get("videos")
    if not isinstance(raw_videos, list):
        raw_videos = []

    videos = []
    for index, raw_video in enumerate(raw_videos):
        if not isinstance(raw_video, dict):
            continue
        fetched = _fetched_counterpart(raw_video, index, source)
        videos.append(_repair_video_record(raw_video, fetched))

    covered = {v.video_id for v in videos}
    videos.extend(
        neutral_video_record(fetched)
        for fetched in source.videos
        if fetched.video.id not in covered
    )

    result = empty_channel_result(source)
    result.overall_sentiment = normalize_sentiment(raw.get("overallSentiment"))
    result.positive_keywords = normalize_keywords(raw.get("positiveKeywords"))
    result.negative_keywords = normalize_keywords(raw.get("negativeKeywords"))
    result.videos = videos
    return with_counts(result)
