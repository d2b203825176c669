"""
Comment Explorer
Flattening, filtering and sentiment breakdown over analysis results
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import Field

from yt_sentiment.domain.models import (
    CamelModel,
    ChannelAnalysisResult,
    Comment,
    Sentiment,
    VideoAnalysisResult,
)


class ExplorerComment(Comment):
    """A classified comment annotated with the video it belongs to"""

    video_id: Optional[str] = Field(alias="videoId", default=None)
    video_title: Optional[str] = Field(alias="videoTitle", default=None)


class SentimentBreakdown(CamelModel):
    total: int = 0
    counts: Dict[str, int] = Field(default_factory=dict)
    percentages: Dict[str, float] = Field(default_factory=dict)


def flatten_comments(
    result: Union[VideoAnalysisResult, ChannelAnalysisResult],
) -> List[ExplorerComment]:
    """
    All comments of a result as one list

    Channel comments carry the ID and title of their video. The annotation
    exists only in this view; the result itself is left untouched.
    """
    if isinstance(result, ChannelAnalysisResult):
        return [
            ExplorerComment(
                author=c.author,
                text=c.text,
                sentiment=c.sentiment,
                video_id=video.video_id,
                video_title=video.video_title,
            )
            for video in result.videos
            for c in video.comments
        ]

    return [
        ExplorerComment(author=c.author, text=c.text, sentiment=c.sentiment)
        for c in result.comments
    ]


def _matches_search(comment: ExplorerComment, needle: str) -> bool:
    haystacks = (comment.text, comment.author, comment.video_title or "")
    return any(needle in h.lower() for h in haystacks)


def filter_comments(
    result: Union[VideoAnalysisResult, ChannelAnalysisResult],
    search: Optional[str] = None,
    sentiment: Optional[Union[Sentiment, str]] = None,
    video_id: Optional[str] = None,
) -> List[ExplorerComment]:
    """
    Filter the comments of a result

    Args:
        result: Video or channel analysis result
        search: Case-insensitive substring of text, author or video title
        sentiment: Exact sentiment to keep
        video_id: Keep only comments of this video (channel results)

    Returns:
        Matching comments in result order
    """
    comments = flatten_comments(result)

    if search:
        needle = search.strip().lower()
        if needle:
            comments = [c for c in comments if _matches_search(c, needle)]

    if sentiment:
        wanted = Sentiment(sentiment)
        comments = [c for c in comments if c.sentiment == wanted]

    if video_id:
        comments = [c for c in comments if c.video_id == video_id]

    return comments


def sentiment_breakdown(comments: List[Any]) -> SentimentBreakdown:
    """Counts and percentages (one decimal) per sentiment"""
    counts = {s.value: 0 for s in Sentiment}
    for comment in comments:
        counts[Sentiment(comment.sentiment).value] += 1

    total = len(comments)
    percentages = {
        label: (round(count * 100.0 / total, 1) if total else 0.0)
        for label, count in counts.items()
    }
    return SentimentBreakdown(total=total, counts=counts, percentages=percentages)
