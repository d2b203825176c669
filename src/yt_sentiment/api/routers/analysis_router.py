"""
Sentiment Analysis API Router
REST endpoints for video and channel comment analysis
"""

import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field

from yt_sentiment.app.dependencies import get_analysis_service
from yt_sentiment.domain.models import (
    AnalysisKind,
    CamelModel,
    ChannelAnalysisResult,
    Sentiment,
    VideoAnalysisResult,
)
from yt_sentiment.services import (
    SentimentAnalysisService,
    ServiceError,
    error_to_http_status,
    filter_comments,
    sentiment_breakdown,
)
from yt_sentiment.services.comment_filter import ExplorerComment, SentimentBreakdown

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/analysis", tags=["Sentiment Analysis"])


# ============================================================================
# Request/Response Models
# ============================================================================


class VideoAnalysisRequest(CamelModel):
    """Request to analyze a video's comments"""

    video_url: str = Field(..., alias="videoUrl", description="YouTube video URL or ID")


class ChannelAnalysisRequest(CamelModel):
    """Request to analyze a channel's recent videos"""

    channel_url: str = Field(
        ..., alias="channelUrl", description="YouTube channel URL, handle or ID"
    )


class CommentSearchRequest(CamelModel):
    """Request to explore the analyzed comments of a video or channel"""

    url: str = Field(..., description="Video or channel URL")
    kind: AnalysisKind = Field(default=AnalysisKind.VIDEO, description="video or channel")
    search: Optional[str] = Field(default=None, description="Text, author or title search")
    sentiment: Optional[Sentiment] = Field(default=None, description="Sentiment filter")
    video_id: Optional[str] = Field(
        default=None, alias="videoId", description="Video filter (channel only)"
    )


class CommentSearchResponse(CamelModel):
    """Filtered comments with their sentiment breakdown"""

    kind: AnalysisKind
    total: int
    comments: List[ExplorerComment]
    breakdown: SentimentBreakdown


def _http_error(error: ServiceError) -> HTTPException:
    status_code = error_to_http_status(error)
    logger.error(f"Analysis request failed ({status_code}): {error}")
    return HTTPException(status_code=status_code, detail=error.to_dict())


# ============================================================================
# Analysis Endpoints
# ============================================================================


@router.post("/video", response_model=VideoAnalysisResult)
async def analyze_video(
    request: VideoAnalysisRequest,
    service: SentimentAnalysisService = Depends(get_analysis_service),
):
    """
    Analyze the top comments of a video

    - **videoUrl**: watch, youtu.be, shorts or embed URL, or a bare video ID
    """
    try:
        return await service.analyze_sentiment(request.video_url)
    except ServiceError as e:
        raise _http_error(e) from e


@router.post("/channel", response_model=ChannelAnalysisResult)
async def analyze_channel(
    request: ChannelAnalysisRequest,
    service: SentimentAnalysisService = Depends(get_analysis_service),
):
    """
    Analyze the comments of a channel's recent videos

    - **channelUrl**: /channel/, /@handle, /c/ or /user/ URL, or a bare channel ID
    """
    try:
        return await service.analyze_channel_sentiment(request.channel_url)
    except ServiceError as e:
        raise _http_error(e) from e


@router.post("/comments", response_model=CommentSearchResponse)
async def search_comments(
    request: CommentSearchRequest,
    service: SentimentAnalysisService = Depends(get_analysis_service),
):
    """
    Search and filter analyzed comments

    Runs (or reuses the cached) analysis, then filters its comments.

    - **url**: Video or channel URL
    - **kind**: video or channel
    - **search**: Case-insensitive search in text, author and video title
    - **sentiment**: Positive, Negative or Neutral
    - **videoId**: Restrict a channel result to one video
    """
    try:
        result: Union[VideoAnalysisResult, ChannelAnalysisResult]
        if request.kind == AnalysisKind.CHANNEL:
            result = await service.analyze_channel_sentiment(request.url)
        else:
            result = await service.analyze_sentiment(request.url)
    except ServiceError as e:
        raise _http_error(e) from e

    comments = filter_comments(
        result,
        search=request.search,
        sentiment=request.sentiment,
        video_id=request.video_id,
    )
    return CommentSearchResponse(
        kind=request.kind,
        total=len(comments),
        comments=comments,
        breakdown=sentiment_breakdown(comments),
    )
