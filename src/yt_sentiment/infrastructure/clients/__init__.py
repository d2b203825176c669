"""API Clients"""

from .youtube_api import YouTubeAPIClient, create_youtube_client
from .rate_limiter import RateLimiter, SequentialPipeline
from .comments_provider import YouTubeCommentsProvider
from .gemini_client import GeminiInferenceProvider, create_inference_provider

__all__ = [
    "YouTubeAPIClient",
    "create_youtube_client",
    "RateLimiter",
    "SequentialPipeline",
    "YouTubeCommentsProvider",
    "GeminiInferenceProvider",
    "create_inference_provider",
]
