"""
Sentiment Analysis Service
Orchestrates fetch, inference, repair and caching for videos and channels
"""

import inspect
import json
from typing import Any, Awaitable, Callable, Optional, Union

from yt_sentiment.domain.identifiers import extract_channel_id, extract_video_id
from yt_sentiment.domain.interfaces import CommentsProvider, InferenceProvider
from yt_sentiment.domain.models import (
    AnalysisKind,
    AnalysisProgress,
    AnalysisStage,
    ChannelAnalysisResult,
    ChannelComments,
    VideoAnalysisResult,
)
from yt_sentiment.services.base_service import BaseService
from yt_sentiment.services.exceptions import InvalidURLError, RetryExhaustedError
from yt_sentiment.services.output_repair import (
    NeedsRepair,
    classify_channel_output,
    empty_channel_result,
    empty_video_result,
    neutral_channel_result,
    neutral_video_result,
    repair_channel_output,
    repair_video_output,
)
from yt_sentiment.services.retry import RetryPolicy, linear_backoff, overload_predicate

ProgressCallback = Callable[[AnalysisProgress], Union[None, Awaitable[None]]]


class SentimentAnalysisService(BaseService):
    """
    Comment sentiment analysis service

    Handles:
    - URL to identifier extraction
    - Cache short-circuit per video/channel
    - Comment fetching through the comments provider
    - Inference with bounded retry on overload errors
    - Repair of model output and degradation to neutral results
    - Progress reporting
    """

    def __init__(
        self,
        comments_provider: CommentsProvider,
        inference_provider: InferenceProvider,
        cache=None,
        config=None,
        retry_policy: Optional[RetryPolicy] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        super().__init__(cache=cache, config=config)
        self.comments = comments_provider
        self.inference = inference_provider
        self.retry_policy = retry_policy or self._retry_policy_from_config()
        self.progress_callback = progress_callback

    def get_service_name(self) -> str:
        return "analysis"

    def _retry_policy_from_config(self) -> RetryPolicy:
        settings = getattr(self.config, "analysis", None)
        if settings is None:
            return RetryPolicy()
        return RetryPolicy(
            max_attempts=settings.max_attempts,
            is_retryable=overload_predicate(settings.overload_markers),
            backoff=linear_backoff(settings.backoff_step_seconds),
        )

    # ========================================================================
    # Caller surface
    # ========================================================================

    async def analyze_sentiment(self, video_url: str) -> VideoAnalysisResult:
        """
        Analyze the comments of a video given its URL

        Raises:
            InvalidURLError: No video ID could be extracted
        """
        video_id = extract_video_id(video_url)
        if not video_id:
            raise InvalidURLError(video_url, kind="video")
        return await self.analyze_video(video_id)

    async def analyze_channel_sentiment(self, channel_url: str) -> ChannelAnalysisResult:
        """
        Analyze the comments of a channel's recent videos given its URL

        Raises:
            InvalidURLError: No channel identifier could be extracted
        """
        channel_id = extract_channel_id(channel_url)
        if not channel_id:
            raise InvalidURLError(channel_url, kind="channel")
        return await self.analyze_channel(channel_id)

    # ========================================================================
    # Video analysis
    # ========================================================================

    async def analyze_video(self, video_id: str) -> VideoAnalysisResult:
        """
        Analyze the top comments of a video

        Args:
            video_id: YouTube video ID

        Returns:
            Video analysis result, from cache when a fresh one exists

        Raises:
            YouTubeAPIError: Comments could not be fetched
            InferenceServiceError: Inference failed with a non-retryable error
            AnalysisError: Any other failure while producing the result
        """
        self.validate_required(video_id, "video_id")
        cache_key = self.get_cache_key(AnalysisKind.VIDEO.value, video_id)

        cached = self.get_from_cache(cache_key)
        if cached is not None:
            self.log_info(f"📦 Cache hit: {cache_key}")
            await self._report(AnalysisStage.COMPLETE, "Loaded from cache", 100, video_id)
            return cached

        try:
            return await self._analyze_video_uncached(video_id, cache_key)
        except Exception as e:
            raise self.handle_error(e, "analyze_video", {"video_id": video_id})

    async def _analyze_video_uncached(
        self, video_id: str, cache_key: str
    ) -> VideoAnalysisResult:
        await self._report(AnalysisStage.FETCHING, "Fetching comments...", 25, video_id)
        comments = await self.comments.get_comments(video_id)

        if not comments:
            self.log_info(f"No comments for video {video_id}")
            result = empty_video_result()
            self.set_in_cache(cache_key, result)
            await self._report(AnalysisStage.COMPLETE, "No comments found", 100, video_id)
            return result

        await self._report(
            AnalysisStage.ANALYZING,
            f"Analyzing {len(comments)} comments...",
            50,
            video_id,
        )
        payload = json.dumps(
            [c.model_dump(by_alias=True) for c in comments], ensure_ascii=False
        )

        try:
            raw = await self.retry_policy.execute(
                lambda: self.inference.generate(payload, VideoAnalysisResult),
                description=f"video analysis {video_id}",
            )
        except RetryExhaustedError as e:
            self.log_warning(
                f"⚠️ Inference unavailable for video {video_id} after {e.attempts} "
                f"attempts, returning neutral result"
            )
            result = neutral_video_result(comments)
        else:
            await self._report(AnalysisStage.PROCESSING, "Processing results...", 75, video_id)
            result = repair_video_output(raw)

        self.set_in_cache(cache_key, result)
        self.log_info(
            f"✅ Video {video_id}: {result.overall_sentiment.value}, "
            f"{len(result.comments)} comments"
        )
        await self._report(AnalysisStage.COMPLETE, "Analysis complete", 100, video_id)
        return result

    # ========================================================================
    # Channel analysis
    # ========================================================================

    async def analyze_channel(self, channel_id: str) -> ChannelAnalysisResult:
        """
        Analyze the comments of a channel's recent videos

        Args:
            channel_id: Channel ID, handle, custom name or username

        Returns:
            Channel analysis result, from cache when a fresh one exists

        Raises:
            YouTubeAPIError: Channel data could not be fetched
            InferenceServiceError: Inference failed with a non-retryable error
            AnalysisError: Any other failure while producing the result
        """
        self.validate_required(channel_id, "channel_id")
        cache_key = self.get_cache_key(AnalysisKind.CHANNEL.value, channel_id)

        cached = self.get_from_cache(cache_key)
        if cached is not None:
            self.log_info(f"📦 Cache hit: {cache_key}")
            await self._report(AnalysisStage.COMPLETE, "Loaded from cache", 100, channel_id)
            return cached

        try:
            return await self._analyze_channel_uncached(channel_id, cache_key)
        except Exception as e:
            raise self.handle_error(e, "analyze_channel", {"channel_id": channel_id})

    async def _analyze_channel_uncached(
        self, channel_id: str, cache_key: str
    ) -> ChannelAnalysisResult:
        await self._report(
            AnalysisStage.FETCHING, "Fetching channel videos and comments...", 25, channel_id
        )
        source = await self.comments.get_channel_comments(channel_id)

        if not source.videos:
            self.log_info(f"No commented videos for channel {channel_id}")
            result = empty_channel_result(source)
            self.set_in_cache(cache_key, result)
            await self._report(AnalysisStage.COMPLETE, "No comments found", 100, channel_id)
            return result

        await self._report(
            AnalysisStage.ANALYZING,
            f"Analyzing {len(source.videos)} videos...",
            50,
            channel_id,
        )
        payload = self._channel_payload(source)

        try:
            raw = await self.retry_policy.execute(
                lambda: self.inference.generate(payload, ChannelAnalysisResult),
                description=f"channel analysis {channel_id}",
            )
        except RetryExhaustedError as e:
            self.log_warning(
                f"⚠️ Inference unavailable for channel {channel_id} after {e.attempts} "
                f"attempts, returning neutral result"
            )
            result = neutral_channel_result(source)
        else:
            await self._report(
                AnalysisStage.PROCESSING, "Processing results...", 75, channel_id
            )
            output = classify_channel_output(raw)
            if isinstance(output, NeedsRepair):
                self.log_debug(f"Repairing channel output: {', '.join(output.issues)}")
            result = repair_channel_output(output, source)

        self.set_in_cache(cache_key, result)
        self.log_info(
            f"✅ Channel {channel_id}: {result.overall_sentiment.value}, "
            f"{result.total_videos} videos, {result.total_comments} comments"
        )
        await self._report(AnalysisStage.COMPLETE, "Analysis complete", 100, channel_id)
        return result

    def _channel_payload(self, source: ChannelComments) -> str:
        """Channel metadata with a flat list of videos and their comments"""
        channel = source.channel.model_dump(by_alias=True)
        data = {
            "channelId": channel["id"],
            "channelTitle": channel["title"],
            "subscriberCount": channel["subscriberCount"],
            "videoCount": channel["videoCount"],
            "videos": [
                {
                    "videoId": v.video.id,
                    "videoTitle": v.video.title,
                    "publishedAt": v.video.published_at,
                    "viewCount": v.video.view_count,
                    "commentCount": v.video.comment_count,
                    "comments": [c.model_dump(by_alias=True) for c in v.comments],
                }
                for v in source.videos
            ],
        }
        return json.dumps(data, ensure_ascii=False)

    # ========================================================================
    # Progress
    # ========================================================================

    async def _report(
        self,
        stage: AnalysisStage,
        message: str,
        percentage: int,
        entity_id: Optional[str] = None,
    ) -> None:
        if self.progress_callback is None:
            return
        outcome: Any = self.progress_callback(
            AnalysisProgress(
                stage=stage, message=message, percentage=percentage, entity_id=entity_id
            )
        )
        if inspect.isawaitable(outcome):
            await outcome
