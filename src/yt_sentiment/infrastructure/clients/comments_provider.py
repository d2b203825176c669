# src/yt_sentiment/infrastructure/clients/comments_provider.py
"""
YouTube Comments Provider
Async adapter that turns YouTube API calls into analysis input.

The blocking API client runs in a worker thread via ``asyncio.to_thread``.
Channel comment fetches go through a SequentialPipeline so videos are
processed one at a time with a fixed pause between them.
"""

import asyncio
import logging
from typing import List, Optional

from yt_sentiment.app.config import YouTubeAPISettings, get_config
from yt_sentiment.domain.models import (
    ChannelComments,
    ChannelInfo,
    SourceComment,
    VideoComments,
    VideoInfo,
)
from yt_sentiment.infrastructure.clients.rate_limiter import SequentialPipeline
from yt_sentiment.infrastructure.clients.youtube_api import (
    CommentResponse,
    VideoResponse,
    YouTubeAPIClient,
)

logger = logging.getLogger(__name__)


def to_source_comments(comments: List[CommentResponse]) -> List[SourceComment]:
    """Keep author and text, dropping comments without text"""
    return [
        SourceComment(
            author=c.snippet.author_display_name or "Unknown",
            text=c.snippet.text_original,
        )
        for c in comments
        if c.snippet.text_original
    ]


def to_video_info(video: VideoResponse) -> VideoInfo:
    return VideoInfo(
        id=video.id,
        title=video.snippet.title,
        published_at=video.snippet.published_at.isoformat(),
        view_count=str(video.statistics.view_count),
        comment_count=str(video.statistics.comment_count),
    )


class YouTubeCommentsProvider:
    """Comments provider backed by the YouTube Data API"""

    def __init__(
        self,
        client: YouTubeAPIClient,
        settings: Optional[YouTubeAPISettings] = None,
        pipeline: Optional[SequentialPipeline] = None,
    ):
        """
        Args:
            client: YouTube API client
            settings: YouTube settings (global config if not provided)
            pipeline: Per-video fetch pipeline (defaults to the configured
                inter-video delay)
        """
        self.client = client
        self.settings = settings or get_config().youtube_api
        self.pipeline = pipeline or SequentialPipeline(
            delay_seconds=self.settings.inter_video_delay_seconds
        )

    async def get_comments(self, video_id: str) -> List[SourceComment]:
        """
        Fetch the top comments of a video

        Args:
            video_id: YouTube video ID

        Returns:
            Comments with author and text; empty when there are none
        """
        comments = await asyncio.to_thread(
            self.client.get_video_comments,
            video_id,
            self.settings.max_comments_per_video,
            self.settings.comment_order,
        )
        logger.info(f"💬 Fetched {len(comments)} comments for video {video_id}")
        return to_source_comments(comments)

    async def get_channel_comments(self, channel_id: str) -> ChannelComments:
        """
        Fetch channel metadata and the comments of its recent videos

        Args:
            channel_id: Channel ID, handle, custom name or username

        Returns:
            ChannelComments with only the videos that have comments
        """
        resolved_id = await asyncio.to_thread(self.client.resolve_channel_id, channel_id)
        channel = await asyncio.to_thread(self.client.get_channel, resolved_id)

        video_ids = await asyncio.to_thread(
            self.client.get_channel_video_ids,
            channel,
            self.settings.max_channel_videos,
        )
        videos = await asyncio.to_thread(self.client.get_videos_batch, video_ids)
        logger.info(f"📺 Channel {resolved_id}: {len(videos)} recent videos")

        async def fetch_video(video: VideoResponse) -> VideoComments:
            comments = await self.get_comments(video.id)
            return VideoComments(video=to_video_info(video), comments=comments)

        fetched = await self.pipeline.run(videos, fetch_video)

        return ChannelComments(
            channel=ChannelInfo(
                id=channel.id,
                title=channel.snippet.title,
                subscriber_count=str(channel.statistics.subscriber_count),
                video_count=str(channel.statistics.video_count),
            ),
            videos=[v for v in fetched if v.comments],
        )
