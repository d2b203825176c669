"""
Service Dependency Injection
FastAPI dependency providers for services
"""

from typing import Generator
from functools import lru_cache

from yt_sentiment.services import SentimentAnalysisService
from yt_sentiment.infrastructure.clients.youtube_api import create_youtube_client
from yt_sentiment.infrastructure.clients.comments_provider import YouTubeCommentsProvider
from yt_sentiment.infrastructure.clients.gemini_client import create_inference_provider
from yt_sentiment.app.shared_cache import get_result_cache
from yt_sentiment.app.config import get_config


# ============================================================================
# Service Factories
# ============================================================================


@lru_cache()
def get_youtube_client():
    """
    Get or create YouTube API client (Singleton)

    Returns:
        YouTubeAPIClient instance
    """
    return create_youtube_client()


@lru_cache()
def get_inference_provider():
    """
    Get or create Gemini inference provider (Singleton)

    Returns:
        GeminiInferenceProvider instance
    """
    return create_inference_provider()


def get_analysis_service() -> Generator[SentimentAnalysisService, None, None]:
    """
    Dependency provider for SentimentAnalysisService

    Usage in FastAPI:
        @router.post("/video")
        async def analyze_video(
            request: VideoAnalysisRequest,
            service: SentimentAnalysisService = Depends(get_analysis_service),
        ):
            return await service.analyze_sentiment(request.video_url)

    Yields:
        SentimentAnalysisService instance
    """
    config = get_config()

    service = SentimentAnalysisService(
        comments_provider=YouTubeCommentsProvider(get_youtube_client()),
        inference_provider=get_inference_provider(),
        cache=get_result_cache(),
        config=config,
    )

    yield service
