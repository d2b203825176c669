"""Prompt templates for comment sentiment inference."""

import json
from typing import Type

from pydantic import BaseModel

from yt_sentiment.domain.models import ChannelAnalysisResult, VideoAnalysisResult

VIDEO_ANALYSIS_PROMPT = """You are a sentiment analysis expert. Analyze the YouTube comments below.

Here are the comments as JSON (a list of objects with "author" and "text"):
{payload}

Please perform the following actions:
1. Determine the overall sentiment of the comments (Positive, Negative or Neutral).
2. Extract 5-8 key positive keywords that appear in the comments.
3. Extract 5-8 key negative keywords that appear in the comments.
4. Classify every comment as Positive, Negative or Neutral. Keep author and text exactly as given.

Respond with JSON only, using this structure:
{{
  "overallSentiment": "Positive/Negative/Neutral",
  "positiveKeywords": ["keyword1", "keyword2"],
  "negativeKeywords": ["keyword1", "keyword2"],
  "comments": [
    {{"author": "author_name", "text": "comment_text", "sentiment": "Positive/Negative/Neutral"}}
  ]
}}"""

CHANNEL_ANALYSIS_PROMPT = """You are a YouTube channel analysis expert. Analyze the channel data below, which includes the channel's recent videos and their comments.

Here is the channel data:
{payload}

Please perform the following actions:
1. Determine the overall channel sentiment from all comments of all videos.
2. Extract 5-8 key positive keywords from all comments.
3. Extract 5-8 key negative keywords from all comments.
4. For each video, in the same order as the input, determine its sentiment, extract keywords and classify each of its comments.
5. Copy channel and video metadata exactly as given. Comments contain only author, text and sentiment.

Respond with JSON only, using this structure:
{{
  "channelId": "channel_id",
  "channelTitle": "Channel Name",
  "subscriberCount": "subscriber_count",
  "videoCount": "video_count",
  "overallSentiment": "Positive/Negative/Neutral",
  "positiveKeywords": ["keyword1", "keyword2"],
  "negativeKeywords": ["keyword1", "keyword2"],
  "videos": [
    {{
      "videoId": "video_id",
      "videoTitle": "Video Title",
      "publishedAt": "publish_date",
      "viewCount": "view_count",
      "commentCount": "comment_count",
      "overallSentiment": "Positive/Negative/Neutral",
      "positiveKeywords": ["keyword1", "keyword2"],
      "negativeKeywords": ["keyword1", "keyword2"],
      "comments": [
        {{"author": "author_name", "text": "comment_text", "sentiment": "Positive/Negative/Neutral"}}
      ]
    }}
  ],
  "totalComments": 0,
  "totalVideos": 0
}}"""

GENERIC_PROMPT = """Analyze the following data:
{payload}

Respond with JSON only, matching this JSON schema:
{schema}"""


def build_prompt(payload: str, schema: Type[BaseModel]) -> str:
    """Render the prompt that asks for ``schema`` over ``payload``"""
    if schema is VideoAnalysisResult:
        return VIDEO_ANALYSIS_PROMPT.format(payload=payload)
    if schema is ChannelAnalysisResult:
        return CHANNEL_ANALYSIS_PROMPT.format(payload=payload)
    return GENERIC_PROMPT.format(
        payload=payload,
        schema=json.dumps(schema.model_json_schema(by_alias=True), indent=2),
    )
