# src/yt_sentiment/infrastructure/clients/youtube_api.py
"""
YouTube Data API v3 Client
Handles authentication, quota management, retry logic, and structured data fetching.

Features:
- Automatic quota tracking and warnings
- Token-bucket request limiting
- Exponential backoff retry on server and network errors
- Type-safe response parsing with Pydantic
"""

import logging
import os
import time
from typing import List, Dict, Any, Optional, Literal
from datetime import datetime, timedelta
from dataclasses import dataclass, field

import httpx
from pydantic import BaseModel, ConfigDict, Field

from yt_sentiment.app.config import YouTubeAPISettings, get_config
from yt_sentiment.domain.identifiers import is_channel_id
from yt_sentiment.infrastructure.clients.rate_limiter import RateLimiter
from yt_sentiment.services.exceptions import ConfigurationError, YouTubeAPIError

logger = logging.getLogger(__name__)


# ============================================================================
# Response Models (Type-Safe Data Containers)
# ============================================================================


class _APIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class VideoSnippet(_APIModel):
    """Video metadata snippet"""

    title: str
    published_at: datetime = Field(alias="publishedAt")
    channel_id: str = Field(alias="channelId", default="")
    channel_title: str = Field(alias="channelTitle", default="")


class VideoStatistics(_APIModel):
    """Video engagement statistics"""

    view_count: int = Field(alias="viewCount", default=0)
    like_count: int = Field(alias="likeCount", default=0)
    comment_count: int = Field(alias="commentCount", default=0)


class VideoResponse(_APIModel):
    """Video data response"""

    id: str
    snippet: VideoSnippet
    statistics: VideoStatistics = Field(default_factory=VideoStatistics)


class ChannelSnippet(_APIModel):
    """Channel metadata snippet"""

    title: str
    custom_url: Optional[str] = Field(alias="customUrl", default=None)
    published_at: Optional[datetime] = Field(alias="publishedAt", default=None)


class ChannelStatistics(_APIModel):
    """Channel statistics"""

    view_count: int = Field(alias="viewCount", default=0)
    subscriber_count: int = Field(alias="subscriberCount", default=0)
    video_count: int = Field(alias="videoCount", default=0)


class ChannelResponse(_APIModel):
    """Channel data response"""

    id: str
    snippet: ChannelSnippet
    statistics: ChannelStatistics = Field(default_factory=ChannelStatistics)
    content_details: Dict[str, Any] = Field(alias="contentDetails", default_factory=dict)

    @property
    def uploads_playlist_id(self) -> Optional[str]:
        return self.content_details.get("relatedPlaylists", {}).get("uploads")


class CommentSnippet(_APIModel):
    """Top-level comment metadata"""

    author_display_name: str = Field(alias="authorDisplayName", default="Unknown")
    text_original: str = Field(alias="textOriginal", default="")
    like_count: int = Field(alias="likeCount", default=0)
    published_at: Optional[datetime] = Field(alias="publishedAt", default=None)


class CommentResponse(_APIModel):
    """Top-level comment of a comment thread"""

    id: str
    snippet: CommentSnippet


# ============================================================================
# Quota Management
# ============================================================================


@dataclass
class QuotaTracker:
    """Tracks API quota usage with daily reset"""

    daily_limit: int = 10000  # YouTube API default quota
    used_quota: int = 0
    reset_time: datetime = field(
        default_factory=lambda: datetime.now() + timedelta(days=1)
    )

    # Quota costs per operation (YouTube API v3 costs)
    COSTS = {
        "search": 100,
        "videos": 1,
        "channels": 1,
        "comment_threads": 1,
        "playlist_items": 1,
    }

    def check_quota(self, operation: str, count: int = 1) -> bool:
        """Check if sufficient quota available"""
        self._reset_if_needed()
        cost = self.COSTS.get(operation, 1) * count
        return (self.used_quota + cost) <= self.daily_limit

    def consume_quota(self, operation: str, count: int = 1) -> None:
        """Consume quota for an operation"""
        self._reset_if_needed()
        cost = self.COSTS.get(operation, 1) * count
        self.used_quota += cost

        remaining = self.daily_limit - self.used_quota
        if remaining < 1000:
            logger.warning(f"⚠️ Low quota remaining: {remaining} units")

    def _reset_if_needed(self) -> None:
        """Reset quota counter if daily limit expired"""
        if datetime.now() >= self.reset_time:
            logger.info("🔄 Daily quota reset")
            self.used_quota = 0
            self.reset_time = datetime.now() + timedelta(days=1)

    def get_status(self) -> Dict[str, Any]:
        """Get current quota status"""
        self._reset_if_needed()
        return {
            "used": self.used_quota,
            "limit": self.daily_limit,
            "remaining": self.daily_limit - self.used_quota,
            "reset_at": self.reset_time.isoformat(),
            "percentage_used": round((self.used_quota / self.daily_limit) * 100, 2),
        }


def _error_reason(response: httpx.Response) -> Optional[str]:
    """Pull ``error.errors[0].reason`` out of a YouTube error body"""
    try:
        errors = response.json().get("error", {}).get("errors", [])
    except ValueError:
        return None
    if errors and isinstance(errors[0], dict):
        return errors[0].get("reason")
    return None


# ============================================================================
# Main API Client
# ============================================================================


class YouTubeAPIClient:
    """
    YouTube Data API v3 Client

    Handles:
    - Video metadata retrieval
    - Channel lookup (by ID, handle, custom name or username)
    - Upload listing
    - Comment thread fetching with pagination
    """

    BASE_URL = "https://www.googleapis.com/youtube/v3"

    def __init__(
        self,
        api_key: Optional[str] = None,
        max_retries: int = 3,
        timeout: int = 30,
        settings: Optional[YouTubeAPISettings] = None,
    ):
        """
        Initialize YouTube API client

        Args:
            api_key: YouTube Data API key (reads from env if not provided)
            max_retries: Maximum retry attempts for failed requests
            timeout: Request timeout in seconds
            settings: YouTube settings (global config if not provided)
        """
        self.settings = settings or get_config().youtube_api

        self.api_key = api_key or self._get_api_key()
        if not self.api_key:
            raise ConfigurationError(
                "YouTube API key not found. Set YOUTUBE_API_KEY in .env or pass to constructor"
            )

        self.max_retries = max_retries
        self.timeout = timeout

        # HTTP client with connection pooling
        self.client = httpx.Client(
            timeout=timeout, limits=httpx.Limits(max_keepalive_connections=5)
        )

        self.quota_tracker = QuotaTracker(daily_limit=self.settings.daily_quota_limit)
        self.rate_limiter = RateLimiter(
            calls_per_second=self.settings.requests_per_second,
            burst_capacity=self.settings.burst_capacity,
        )

        logger.info("✅ YouTube API client initialized")

    def _get_api_key(self) -> Optional[str]:
        """Load API key from settings or environment"""
        return self.settings.api_key or os.getenv("YOUTUBE_API_KEY")

    def _request(
        self, endpoint: str, params: Dict[str, Any], operation: str = "videos"
    ) -> Dict[str, Any]:
        """
        Make API request with retry logic and quota management

        Args:
            endpoint: API endpoint path (e.g., 'videos', 'commentThreads')
            params: Query parameters
            operation: Operation type for quota tracking

        Returns:
            Parsed JSON response

        Raises:
            YouTubeAPIError: quota exhausted, client error, or retries exhausted
        """
        if not self.quota_tracker.check_quota(operation):
            raise YouTubeAPIError(
                f"Quota exceeded. Status: {self.quota_tracker.get_status()}",
                status_code=403,
                reason="quotaExceeded",
            )

        url = f"{self.BASE_URL}/{endpoint}"
        params = {**params, "key": self.api_key}
        last_error: Optional[Exception] = None

        # Exponential backoff retry
        for attempt in range(self.max_retries):
            self.rate_limiter.acquire(timeout=self.timeout)

            try:
                response = self.client.get(url, params=params)
                response.raise_for_status()

                self.quota_tracker.consume_quota(operation)

                return response.json()

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                last_error = e

                if status >= 500:
                    self._backoff(attempt, f"Server error {status}")
                    continue

                # Client error - don't retry
                reason = _error_reason(e.response)
                logger.error(f"❌ Client error {status} ({reason}) on {endpoint}")
                raise YouTubeAPIError(
                    f"YouTube API error {status} on {endpoint}: {reason or e.response.text}",
                    status_code=status,
                    reason=reason,
                    original_error=e,
                ) from e

            except httpx.RequestError as e:
                last_error = e
                self._backoff(attempt, f"Network error: {e}")

        raise YouTubeAPIError(
            f"YouTube API request to {endpoint} failed after {self.max_retries} retries: {last_error}",
            original_error=last_error,
        )

    def _backoff(self, attempt: int, problem: str) -> None:
        """Sleep 2**attempt seconds before the next try, not after the last one"""
        if attempt >= self.max_retries - 1:
            logger.warning(f"⚠️ {problem}, giving up (attempt {attempt + 1}/{self.max_retries})")
            return

        wait_time = 2**attempt
        logger.warning(
            f"⚠️ {problem}, "
            f"retrying in {wait_time}s (attempt {attempt + 1}/{self.max_retries})"
        )
        time.sleep(wait_time)

    # ========================================================================
    # Video Operations
    # ========================================================================

    def get_videos_batch(self, video_ids: List[str]) -> List[VideoResponse]:
        """
        Fetch multiple videos in a single request (up to 50 IDs)

        Args:
            video_ids: List of video IDs (max 50 per batch)

        Returns:
            List of VideoResponse objects, in API order
        """
        if not video_ids:
            return []
        if len(video_ids) > 50:
            raise ValueError("Maximum 50 video IDs per batch request")

        params = {"part": "snippet,statistics", "id": ",".join(video_ids)}

        response = self._request("videos", params, operation="videos")

        return [VideoResponse(**item) for item in response.get("items", [])]

    # ========================================================================
    # Channel Operations
    # ========================================================================

    def get_channel(self, channel_id: str) -> ChannelResponse:
        """
        Fetch channel information

        Args:
            channel_id: YouTube channel ID

        Returns:
            ChannelResponse with snippet, statistics and uploads playlist
        """
        params = {"part": "snippet,statistics,contentDetails", "id": channel_id}

        response = self._request("channels", params, operation="channels")

        if not response.get("items"):
            raise YouTubeAPIError(
                f"Channel not found: {channel_id}",
                status_code=404,
                reason="channelNotFound",
            )

        return ChannelResponse(**response["items"][0])

    def resolve_channel_id(self, token: str) -> str:
        """
        Resolve a handle, custom name or username to a channel ID

        Tries ``forHandle``, then ``forUsername``, then a channel search
        (search costs 100 quota units). Canonical IDs are returned unchanged.
        """
        if is_channel_id(token):
            return token

        handle = token if token.startswith("@") else f"@{token}"
        for lookup in ({"forHandle": handle}, {"forUsername": token}):
            response = self._request(
                "channels", {"part": "id", **lookup}, operation="channels"
            )
            items = response.get("items", [])
            if items:
                logger.info(f"🔎 Resolved channel {token} -> {items[0]['id']}")
                return items[0]["id"]

        response = self._request(
            "search",
            {"part": "snippet", "q": token, "type": "channel", "maxResults": 1},
            operation="search",
        )
        items = response.get("items", [])
        if items:
            channel_id = items[0].get("snippet", {}).get("channelId") or items[0].get(
                "id", {}
            ).get("channelId")
            if channel_id:
                logger.info(f"🔎 Resolved channel {token} via search -> {channel_id}")
                return channel_id

        raise YouTubeAPIError(
            f"Channel not found: {token}", status_code=404, reason="channelNotFound"
        )

    def get_channel_video_ids(self, channel: ChannelResponse, max_results: int = 10) -> List[str]:
        """
        Get the most recent video IDs from a channel's uploads playlist

        Args:
            channel: Channel fetched with contentDetails
            max_results: Maximum videos to return (1-50)

        Returns:
            List of video IDs, newest first
        """
        playlist_id = channel.uploads_playlist_id
        if not playlist_id:
            logger.warning(f"⚠️ Channel {channel.id} has no uploads playlist")
            return []

        params = {
            "part": "contentDetails",
            "playlistId": playlist_id,
            "maxResults": min(max_results, 50),
        }

        response = self._request("playlistItems", params, operation="playlist_items")

        return [
            item["contentDetails"]["videoId"]
            for item in response.get("items", [])
            if item.get("contentDetails", {}).get("videoId")
        ]

    # ========================================================================
    # Comment Operations
    # ========================================================================

    def get_video_comments(
        self,
        video_id: str,
        max_results: int = 20,
        order: Literal["time", "relevance"] = "relevance",
    ) -> List[CommentResponse]:
        """
        Fetch top-level comments for a video with pagination

        Args:
            video_id: YouTube video ID
            max_results: Maximum comments to fetch
            order: Comment ordering (time or relevance)

        Returns:
            List of CommentResponse objects; empty when comments are disabled

        Raises:
            YouTubeAPIError: any failure other than disabled comments
        """
        comments: List[CommentResponse] = []
        page_token = None

        while len(comments) < max_results:
            params = {
                "part": "snippet",
                "videoId": video_id,
                "maxResults": min(100, max_results - len(comments)),
                "order": order,
                "textFormat": "plainText",
            }

            if page_token:
                params["pageToken"] = page_token

            try:
                response = self._request(
                    "commentThreads", params, operation="comment_threads"
                )
            except YouTubeAPIError as e:
                if e.reason == "commentsDisabled":
                    logger.info(f"💬 Comments disabled for {video_id}")
                    break
                raise

            items = response.get("items", [])
            if not items:
                break

            for item in items:
                comment_data = item["snippet"]["topLevelComment"]
                comments.append(CommentResponse(**comment_data))

            page_token = response.get("nextPageToken")
            if not page_token:
                break

        return comments[:max_results]

    # ========================================================================
    # Utility Methods
    # ========================================================================

    def get_quota_status(self) -> Dict[str, Any]:
        """Get current quota usage status"""
        return self.quota_tracker.get_status()

    def close(self) -> None:
        """Close HTTP client connection pool"""
        self.client.close()
        logger.info("🔌 YouTube API client closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


# ============================================================================
# Convenience Functions
# ============================================================================


def create_youtube_client(api_key: Optional[str] = None) -> YouTubeAPIClient:
    """
    Factory function to create YouTube API client

    Args:
        api_key: Optional API key (reads from config/env if not provided)

    Returns:
        Configured YouTubeAPIClient instance
    """
    settings = get_config().youtube_api
    return YouTubeAPIClient(
        api_key=api_key,
        max_retries=settings.max_retries,
        timeout=settings.request_timeout,
        settings=settings,
    )
