"""
Domain layer: analysis data model, collaborator protocols and URL parsing.
"""
from .interfaces import (
    AnalysisResult,
    CommentsProvider,
    InferenceProvider,
    ResultStore,
)
from .models import (
    AnalysisKind,
    AnalysisProgress,
    AnalysisStage,
    ChannelAnalysisResult,
    ChannelComments,
    ChannelInfo,
    Comment,
    Sentiment,
    SourceComment,
    VideoAnalysisResult,
    VideoComments,
    VideoInfo,
    VideoRecord,
)
from .identifiers import extract_channel_id, extract_video_id

__all__ = [
    "AnalysisResult",
    "CommentsProvider",
    "InferenceProvider",
    "ResultStore",
    "AnalysisKind",
    "AnalysisProgress",
    "AnalysisStage",
    "ChannelAnalysisResult",
    "ChannelComments",
    "ChannelInfo",
    "Comment",
    "Sentiment",
    "SourceComment",
    "VideoAnalysisResult",
    "VideoComments",
    "VideoInfo",
    "VideoRecord",
    "extract_channel_id",
    "extract_video_id",
]
