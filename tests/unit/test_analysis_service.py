"""
Unit Tests for SentimentAnalysisService
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, Mock

from yt_sentiment.app.shared_cache import ResultCache
from yt_sentiment.domain.models import (
    AnalysisStage,
    ChannelAnalysisResult,
    ChannelComments,
    ChannelInfo,
    Comment,
    Sentiment,
    SourceComment,
    VideoAnalysisResult,
)
from yt_sentiment.services.analysis_service import SentimentAnalysisService
from yt_sentiment.services.exceptions import (
    AnalysisError,
    InferenceServiceError,
    InvalidURLError,
    YouTubeAPIError,
)
from yt_sentiment.services.output_repair import UNMATCHED_VIDEO_ID_PREFIX
from yt_sentiment.services.retry import RetryPolicy

VIDEO_ID = "dQw4w9WgXcQ"
CHANNEL_ID = "UCabcdefghijklmnopqrstuv"

VIDEO_OUTPUT = {
    "overallSentiment": "Positive",
    "positiveKeywords": ["editing", "great"],
    "negativeKeywords": ["audio"],
    "comments": [
        {"author": "alice", "text": "Loved this video, great editing!", "sentiment": "Positive"},
        {"author": "bob", "text": "Audio was terrible in the second half", "sentiment": "Negative"},
        {"author": "carol", "text": "First", "sentiment": "Neutral"},
    ],
}


@pytest.fixture
def comments_provider(source_comments, channel_source):
    """Mock comments provider"""
    provider = Mock()
    provider.get_comments = AsyncMock(return_value=source_comments)
    provider.get_channel_comments = AsyncMock(return_value=channel_source)
    return provider


@pytest.fixture
def inference_provider():
    """Mock inference provider"""
    provider = Mock()
    provider.generate = AsyncMock(return_value=VIDEO_OUTPUT)
    return provider


@pytest.fixture
def fake_sleep():
    return AsyncMock()


@pytest.fixture
def cache(clock):
    return ResultCache(ttl_seconds=1800, clock=clock)


@pytest.fixture
def progress():
    return Mock()


@pytest.fixture
def service(comments_provider, inference_provider, cache, fake_sleep, progress):
    """Create service with mocked collaborators and a fake sleep"""
    return SentimentAnalysisService(
        comments_provider=comments_provider,
        inference_provider=inference_provider,
        cache=cache,
        retry_policy=RetryPolicy(sleep=fake_sleep),
        progress_callback=progress,
    )


class TestAnalyzeSentiment:
    """Test URL entry points"""

    @pytest.mark.asyncio
    async def test_invalid_video_url(self, service, comments_provider, inference_provider):
        """Test an unparseable URL fails before any I/O"""
        with pytest.raises(InvalidURLError) as exc_info:
            await service.analyze_sentiment("https://example.com/not-youtube")

        assert exc_info.value.kind == "video"
        comments_provider.get_comments.assert_not_awaited()
        inference_provider.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_channel_url(self, service, comments_provider):
        """Test an unparseable channel URL fails before any I/O"""
        with pytest.raises(InvalidURLError) as exc_info:
            await service.analyze_channel_sentiment("https://youtu.be/dQw4w9WgXcQ")

        assert exc_info.value.kind == "channel"
        comments_provider.get_channel_comments.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_video_url_routes_to_id(self, service, comments_provider):
        """Test the extracted ID is what gets fetched"""
        await service.analyze_sentiment(f"https://youtu.be/{VIDEO_ID}?t=3")

        comments_provider.get_comments.assert_awaited_once_with(VIDEO_ID)

    @pytest.mark.asyncio
    async def test_channel_handle_routes_to_token(self, service, comments_provider):
        """Test a handle URL passes the handle to the provider"""
        await service.analyze_channel_sentiment("https://www.youtube.com/@somechannel")

        comments_provider.get_channel_comments.assert_awaited_once_with("somechannel")


class TestVideoAnalysis:
    """Test the video path"""

    @pytest.mark.asyncio
    async def test_success(self, service, inference_provider):
        """Test a normal run returns the normalized model output"""
        result = await service.analyze_video(VIDEO_ID)

        assert isinstance(result, VideoAnalysisResult)
        assert result.overall_sentiment == Sentiment.POSITIVE
        assert result.positive_keywords == ["editing", "great"]
        assert len(result.comments) == 3

        payload, schema = inference_provider.generate.await_args.args
        assert schema is VideoAnalysisResult
        assert "Loved this video" in payload

    @pytest.mark.asyncio
    async def test_cache_short_circuit(self, service, comments_provider, inference_provider):
        """Test a second call within the TTL makes no external calls"""
        first = await service.analyze_video(VIDEO_ID)
        second = await service.analyze_video(VIDEO_ID)

        assert second == first
        assert second is not first
        assert comments_provider.get_comments.await_count == 1
        assert inference_provider.generate.await_count == 1

    @pytest.mark.asyncio
    async def test_cache_expiry(self, service, clock, comments_provider, inference_provider):
        """Test a call after the TTL runs the full flow again"""
        await service.analyze_video(VIDEO_ID)

        clock.advance(1801)
        await service.analyze_video(VIDEO_ID)

        assert comments_provider.get_comments.await_count == 2
        assert inference_provider.generate.await_count == 2

    @pytest.mark.asyncio
    async def test_no_comments(self, service, comments_provider, inference_provider, cache):
        """Test zero comments skips inference and caches the empty result"""
        comments_provider.get_comments.return_value = []

        result = await service.analyze_video(VIDEO_ID)

        assert result.overall_sentiment == Sentiment.NEUTRAL
        assert result.positive_keywords == []
        assert result.negative_keywords == []
        assert result.comments == []
        inference_provider.generate.assert_not_awaited()
        assert cache.lookup(f"video_{VIDEO_ID}") == result

    @pytest.mark.asyncio
    async def test_retry_exhausted_degrades(
        self, service, inference_provider, fake_sleep, source_comments, cache
    ):
        """Test persistent overload yields neutral pass-through after 3 attempts"""
        inference_provider.generate.side_effect = InferenceServiceError(
            "503 The model is overloaded. Please try again later."
        )

        result = await service.analyze_video(VIDEO_ID)

        assert inference_provider.generate.await_count == 3
        assert [c.args[0] for c in fake_sleep.await_args_list] == [2.0, 4.0]
        assert result.overall_sentiment == Sentiment.NEUTRAL
        assert result.positive_keywords == []
        assert [c.text for c in result.comments] == [c.text for c in source_comments]
        assert all(c.sentiment == Sentiment.NEUTRAL for c in result.comments)
        assert cache.lookup(f"video_{VIDEO_ID}") == result

    @pytest.mark.asyncio
    async def test_retry_then_success(self, service, inference_provider, fake_sleep):
        """Test a transient overload is retried once"""
        inference_provider.generate.side_effect = [
            InferenceServiceError("503 overloaded"),
            VIDEO_OUTPUT,
        ]

        result = await service.analyze_video(VIDEO_ID)

        assert result.overall_sentiment == Sentiment.POSITIVE
        fake_sleep.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_non_retryable_propagates(
        self, service, inference_provider, fake_sleep, cache
    ):
        """Test other inference errors surface at once and nothing is cached"""
        inference_provider.generate.side_effect = InferenceServiceError(
            "400 API key not valid"
        )

        with pytest.raises(InferenceServiceError):
            await service.analyze_video(VIDEO_ID)

        assert inference_provider.generate.await_count == 1
        fake_sleep.assert_not_awaited()
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates(
        self, service, comments_provider, inference_provider, cache
    ):
        """Test provider failures are fatal and nothing is cached"""
        comments_provider.get_comments.side_effect = YouTubeAPIError(
            "YouTube API error 403", status_code=403, reason="forbidden"
        )

        with pytest.raises(YouTubeAPIError):
            await service.analyze_video(VIDEO_ID)

        inference_provider.generate.assert_not_awaited()
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_falsy_payload(self, service, inference_provider):
        """Test an empty model answer becomes the canonical empty result"""
        inference_provider.generate.return_value = None

        result = await service.analyze_video(VIDEO_ID)

        assert result.overall_sentiment == Sentiment.NEUTRAL
        assert result.comments == []

    @pytest.mark.asyncio
    async def test_progress_reported(self, service, progress):
        """Test stages are reported in order with their percentages"""
        await service.analyze_video(VIDEO_ID)

        reported = [(p.stage, p.percentage) for p in (c.args[0] for c in progress.call_args_list)]
        assert reported == [
            (AnalysisStage.FETCHING, 25),
            (AnalysisStage.ANALYZING, 50),
            (AnalysisStage.PROCESSING, 75),
            (AnalysisStage.COMPLETE, 100),
        ]

    @pytest.mark.asyncio
    async def test_async_progress_callback(self, comments_provider, inference_provider, cache):
        """Test coroutine callbacks are awaited"""
        callback = AsyncMock()
        service = SentimentAnalysisService(
            comments_provider, inference_provider, cache=cache, progress_callback=callback
        )

        await service.analyze_video(VIDEO_ID)

        assert callback.await_count == 4


class TestChannelAnalysis:
    """Test the channel path"""

    @pytest.fixture
    def channel_output(self):
        return {
            "channelId": CHANNEL_ID,
            "channelTitle": "Test Channel",
            "subscriberCount": "12000",
            "videoCount": "42",
            "overallSentiment": "Positive",
            "positiveKeywords": ["helpful"],
            "negativeKeywords": ["long"],
            "videos": [
                {
                    "overallSentiment": "Positive",
                    "comments": [
                        {"author": "alice", "text": "Amazing tutorial", "sentiment": "Positive", "videoId": "x"},
                        {"author": "bob", "text": "Too long", "sentiment": "Negative"},
                    ],
                },
                {
                    "videoId": "vid00000002",
                    "overallSentiment": "Positive",
                    "comments": [{"author": "carol", "text": "Helpful, thanks", "sentiment": "Positive"}],
                },
            ],
            "totalComments": 0,
            "totalVideos": 0,
        }

    @pytest.mark.asyncio
    async def test_success_with_repair(self, service, inference_provider, channel_output):
        """Test output is repaired and counts recomputed"""
        inference_provider.generate.return_value = channel_output

        result = await service.analyze_channel(CHANNEL_ID)

        assert isinstance(result, ChannelAnalysisResult)
        assert [v.video_id for v in result.videos] == ["vid00000001", "vid00000002"]
        assert result.total_videos == 2
        assert result.total_comments == 3
        assert result.total_comments == sum(len(v.comments) for v in result.videos)
        dumped = result.videos[0].comments[0].model_dump(by_alias=True)
        assert "videoId" not in dumped

        payload, schema = inference_provider.generate.await_args.args
        assert schema is ChannelAnalysisResult
        assert "vid00000001" in payload

    @pytest.mark.asyncio
    async def test_extra_model_video_gets_sentinel(
        self, service, inference_provider, channel_output
    ):
        """Test a video the model invented gets a non-empty sentinel ID"""
        channel_output["videos"].append({"comments": []})
        inference_provider.generate.return_value = channel_output

        result = await service.analyze_channel(CHANNEL_ID)

        assert result.videos[2].video_id.startswith(UNMATCHED_VIDEO_ID_PREFIX)
        assert result.total_videos == 3

    @pytest.mark.asyncio
    async def test_cache_short_circuit(
        self, service, comments_provider, inference_provider, channel_output
    ):
        """Test channel results are cached under the channel namespace"""
        inference_provider.generate.return_value = channel_output

        first = await service.analyze_channel(CHANNEL_ID)
        second = await service.analyze_channel(CHANNEL_ID)

        assert second == first
        assert second is not first
        assert comments_provider.get_channel_comments.await_count == 1

    @pytest.mark.asyncio
    async def test_namespace_isolation(self, service, cache, inference_provider, channel_output):
        """Test a video and a channel with the same ID do not share an entry"""
        inference_provider.generate.return_value = channel_output
        await service.analyze_channel(VIDEO_ID)

        assert cache.lookup(f"channel_{VIDEO_ID}") is not None
        assert cache.lookup(f"video_{VIDEO_ID}") is None

    @pytest.mark.asyncio
    async def test_no_commented_videos(
        self, service, comments_provider, inference_provider, cache
    ):
        """Test a channel without comments returns metadata and zero counts"""
        comments_provider.get_channel_comments.return_value = ChannelComments(
            channel=ChannelInfo(
                id=CHANNEL_ID, title="Quiet", subscriber_count="5", video_count="1"
            ),
            videos=[],
        )

        result = await service.analyze_channel(CHANNEL_ID)

        assert result.channel_title == "Quiet"
        assert result.subscriber_count == "5"
        assert result.videos == []
        assert result.total_videos == 0
        assert result.total_comments == 0
        inference_provider.generate.assert_not_awaited()
        assert cache.lookup(f"channel_{CHANNEL_ID}") == result

    @pytest.mark.asyncio
    async def test_retry_exhausted_degrades(
        self, service, inference_provider, fake_sleep
    ):
        """Test overload exhaustion yields one neutral record per fetched video"""
        inference_provider.generate.side_effect = InferenceServiceError(
            "The model is overloaded"
        )

        result = await service.analyze_channel(CHANNEL_ID)

        assert inference_provider.generate.await_count == 3
        assert fake_sleep.await_count == 2
        assert [v.video_id for v in result.videos] == ["vid00000001", "vid00000002"]
        assert result.total_comments == 3
        assert all(v.overall_sentiment == Sentiment.NEUTRAL for v in result.videos)

    @pytest.mark.asyncio
    async def test_non_retryable_propagates(self, service, inference_provider, cache):
        """Test non-transient inference errors are not cached"""
        inference_provider.generate.side_effect = InferenceServiceError(
            "403 permission denied"
        )

        with pytest.raises(InferenceServiceError):
            await service.analyze_channel(CHANNEL_ID)

        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_falsy_payload(self, service, inference_provider):
        """Test an empty model answer keeps channel metadata and zero counts"""
        inference_provider.generate.return_value = {}

        result = await service.analyze_channel(CHANNEL_ID)

        assert result.channel_id == CHANNEL_ID
        assert result.videos == []
        assert result.total_videos == 0


class TestRetryPolicyFromConfig:
    """Test retry policy built from configuration"""

    def test_configured_policy(self, comments_provider, inference_provider):
        """Test attempts and backoff come from AnalysisSettings"""
        config = Mock()
        config.analysis.max_attempts = 5
        config.analysis.backoff_step_seconds = 0.5
        config.analysis.overload_markers = ["429"]

        service = SentimentAnalysisService(
            comments_provider, inference_provider, config=config
        )

        assert service.retry_policy.max_attempts == 5
        assert service.retry_policy.backoff(2) == 1.0
        assert service.retry_policy.is_retryable(Exception("429")) is True
        assert service.retry_policy.is_retryable(Exception("503")) is False


class TestCachedResultIsolation:
    """Test callers cannot corrupt cached results"""

    @pytest.mark.asyncio
    async def test_mutated_channel_result_not_cached(self, service, inference_provider):
        """Test mutating a returned channel result leaves the next hit intact"""
        inference_provider.generate.side_effect = InferenceServiceError(
            "503 The model is overloaded."
        )

        first = await service.analyze_channel(CHANNEL_ID)
        first.videos[0].comments.append(Comment(author="mallory", text="injected"))
        first.total_comments = 0

        second = await service.analyze_channel(CHANNEL_ID)

        assert inference_provider.generate.await_count == 3
        assert second.total_comments == 3
        assert second.total_comments == sum(len(v.comments) for v in second.videos)

    @pytest.mark.asyncio
    async def test_mutated_cache_hit_not_cached(self, service):
        """Test mutating a cache hit leaves the following hit intact"""
        await service.analyze_video(VIDEO_ID)

        hit = await service.analyze_video(VIDEO_ID)
        hit.comments.clear()
        hit.positive_keywords.append("injected")

        again = await service.analyze_video(VIDEO_ID)

        assert len(again.comments) == 3
        assert again.positive_keywords == ["editing", "great"]


class TestUnexpectedErrors:
    """Test failures outside the service taxonomy"""

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self, service, inference_provider, cache):
        """Test a foreign exception surfaces as AnalysisError and nothing is cached"""
        inference_provider.generate.side_effect = RuntimeError("socket closed")

        with pytest.raises(AnalysisError) as exc_info:
            await service.analyze_video(VIDEO_ID)

        assert exc_info.value.details == {
            "operation": "analyze_video",
            "video_id": VIDEO_ID,
        }
        assert "socket closed" in exc_info.value.message
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_unexpected_channel_error_wrapped(
        self, service, comments_provider, cache
    ):
        """Test channel fetch bugs are wrapped too"""
        comments_provider.get_channel_comments.side_effect = KeyError("items")

        with pytest.raises(AnalysisError) as exc_info:
            await service.analyze_channel(CHANNEL_ID)

        assert exc_info.value.details["channel_id"] == CHANNEL_ID
        assert len(cache) == 0


class TestConcurrentRequests:
    """Test independent requests do not wait on each other"""

    @pytest.mark.asyncio
    async def test_backoff_suspends_only_its_request(
        self, comments_provider, inference_provider, cache, source_comments
    ):
        """Test a healthy request finishes while another one is backing off"""
        busy_video = "busyVideo01"
        gate = asyncio.Event()
        finished = []
        busy_calls = []

        async def gated_sleep(seconds):
            await gate.wait()

        async def get_comments(video_id):
            if video_id == busy_video:
                return [SourceComment(author="dave", text="Model is busy today")]
            return source_comments

        async def generate(payload, schema):
            if "Model is busy today" in payload:
                busy_calls.append(payload)
                if len(busy_calls) == 1:
                    raise InferenceServiceError("503 The model is overloaded.")
            return VIDEO_OUTPUT

        comments_provider.get_comments.side_effect = get_comments
        inference_provider.generate.side_effect = generate
        service = SentimentAnalysisService(
            comments_provider=comments_provider,
            inference_provider=inference_provider,
            cache=cache,
            retry_policy=RetryPolicy(sleep=gated_sleep),
        )

        async def run(video_id):
            result = await service.analyze_video(video_id)
            finished.append(video_id)
            gate.set()
            return result

        busy, healthy = await asyncio.wait_for(
            asyncio.gather(run(busy_video), run(VIDEO_ID)), timeout=5
        )

        assert finished == [VIDEO_ID, busy_video]
        assert len(busy_calls) == 2
        assert busy.overall_sentiment == Sentiment.POSITIVE
        assert healthy.overall_sentiment == Sentiment.POSITIVE
