"""
Domain-facing collaborator interfaces (Protocols).

These reflect only what the analysis service actually uses. Concrete
providers satisfy them via duck typing; there is no inheritance requirement,
so tests can pass plain fakes or mocks.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Type, Union, runtime_checkable

from pydantic import BaseModel

from yt_sentiment.domain.models import (
    ChannelAnalysisResult,
    ChannelComments,
    SourceComment,
    VideoAnalysisResult,
)

AnalysisResult = Union[VideoAnalysisResult, ChannelAnalysisResult]


@runtime_checkable
class CommentsProvider(Protocol):
    """Source of raw comments for videos and channels."""

    async def get_comments(self, video_id: str) -> List[SourceComment]:
        """Top comments of a video. Empty when the video has none."""
        ...

    async def get_channel_comments(self, channel_id: str) -> ChannelComments:
        """Channel metadata plus comments of each video that has comments."""
        ...


@runtime_checkable
class InferenceProvider(Protocol):
    """Hosted model that turns a serialized corpus into structured output."""

    async def generate(
        self, payload: str, schema: Type[BaseModel]
    ) -> Optional[Dict[str, Any]]:
        """
        Run the prompt for ``schema`` over ``payload``.

        Returns the decoded output (which may not match ``schema`` exactly)
        or None when the model produced nothing usable.
        """
        ...


@runtime_checkable
class ResultStore(Protocol):
    """Keyed store for finished analyses."""

    def lookup(self, key: str) -> Optional[AnalysisResult]: ...

    def store(self, key: str, result: AnalysisResult) -> None: ...
