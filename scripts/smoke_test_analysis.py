# scripts/smoke_test_analysis.py
"""
Sentiment Analysis Smoke Test
Validates configuration, API keys and a live end-to-end video analysis

Run: python scripts/smoke_test_analysis.py [VIDEO_URL]
"""

import asyncio
import os
import sys
import time
from pathlib import Path
from datetime import datetime

# ✅ Load .env file explicitly
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parent.parent
dotenv_path = ROOT_DIR / ".env"
if dotenv_path.exists():
    load_dotenv(dotenv_path)
    print(f"✅ Loaded .env from: {dotenv_path}")
else:
    print(f"⚠️  .env file not found at: {dotenv_path}")

from yt_sentiment.app.config import get_config, validate_config
from yt_sentiment.app.shared_cache import get_result_cache
from yt_sentiment.domain.models import AnalysisProgress
from yt_sentiment.infrastructure.clients.comments_provider import YouTubeCommentsProvider
from yt_sentiment.infrastructure.clients.gemini_client import create_inference_provider
from yt_sentiment.infrastructure.clients.youtube_api import create_youtube_client
from yt_sentiment.services import SentimentAnalysisService, sentiment_breakdown

DEFAULT_VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def print_section(title: str):
    """Print formatted section header"""
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}")


def test_config():
    """Test configuration loading"""
    print_section("1️⃣  Configuration Test")

    try:
        config = get_config()
        print("✅ Configuration loaded successfully")
        print(f"   Comments/video: {config.youtube_api.max_comments_per_video}")
        print(f"   Channel videos: {config.youtube_api.max_channel_videos}")
        print(f"   Gemini model: {config.gemini.model}")
        print(f"   Cache TTL: {config.cache.analysis_ttl_seconds}s")

        result = validate_config(config)
        for warning in result["warnings"]:
            print(f"   ⚠️  {warning}")
        return result["valid"]
    except Exception as e:
        print(f"❌ Configuration test failed: {e}")
        return False


def test_api_keys():
    """Test API key availability"""
    print_section("2️⃣  API Key Test")

    ok = True
    for name in ("YOUTUBE_API_KEY", "GEMINI_API_KEY"):
        key = os.getenv(name)
        if not key:
            print(f"❌ {name} not found in environment")
            ok = False
        else:
            print(f"✅ {name} found ({len(key)} characters)")

    if not ok:
        print("\n   To fix:")
        print("   1. Create a .env file in the project root")
        print("   2. Add YOUTUBE_API_KEY and GEMINI_API_KEY")
    return ok


def test_comment_fetch(video_url: str):
    """Test fetching comments through the comments provider"""
    print_section("3️⃣  Comment Fetch Test")

    if not os.getenv("YOUTUBE_API_KEY"):
        print("⏭️  Skipping (no YouTube API key)")
        return None

    from yt_sentiment.domain.identifiers import extract_video_id

    try:
        with create_youtube_client() as client:
            provider = YouTubeCommentsProvider(client)
            comments = asyncio.run(provider.get_comments(extract_video_id(video_url)))

            print(f"✅ Fetched {len(comments)} comments")
            for comment in comments[:3]:
                print(f"   • {comment.author}: {comment.text[:60]}")

            quota_status = client.get_quota_status()
            print(f"\n   Quota Used: {quota_status['used']} / {quota_status['limit']}")
            return True
    except Exception as e:
        print(f"❌ Comment fetch failed: {e}")
        return False


def test_full_analysis(video_url: str):
    """Run a full video analysis twice (second run hits the cache)"""
    print_section("4️⃣  End-to-End Analysis Test")

    if not (os.getenv("YOUTUBE_API_KEY") and os.getenv("GEMINI_API_KEY")):
        print("⏭️  Skipping (API keys missing)")
        return None

    def on_progress(progress: AnalysisProgress):
        print(f"   [{progress.percentage:3d}%] {progress.stage.value}: {progress.message}")

    try:
        with create_youtube_client() as client:
            service = SentimentAnalysisService(
                comments_provider=YouTubeCommentsProvider(client),
                inference_provider=create_inference_provider(),
                cache=get_result_cache(),
                config=get_config(),
                progress_callback=on_progress,
            )

            start = time.time()
            result = asyncio.run(service.analyze_sentiment(video_url))
            elapsed = time.time() - start

            breakdown = sentiment_breakdown(result.comments)
            print(f"\n✅ Analysis finished in {elapsed:.1f}s")
            print(f"   Overall: {result.overall_sentiment.value}")
            print(f"   Positive keywords: {', '.join(result.positive_keywords) or '-'}")
            print(f"   Negative keywords: {', '.join(result.negative_keywords) or '-'}")
            print(f"   Breakdown: {breakdown.counts}")

            start = time.time()
            cached = asyncio.run(service.analyze_sentiment(video_url))
            print(f"\n   Cached re-run: {time.time() - start:.3f}s")
            return cached == result
    except Exception as e:
        print(f"❌ Analysis failed: {e}")
        return False


def generate_report(results: dict):
    """Generate final test report"""
    print_section("📊 Test Summary")

    total_tests = len(results)
    passed = sum(1 for v in results.values() if v is True)
    failed = sum(1 for v in results.values() if v is False)
    skipped = sum(1 for v in results.values() if v is None)

    print(f"\n   Total Tests: {total_tests}")
    print(f"   ✅ Passed: {passed}")
    print(f"   ❌ Failed: {failed}")
    print(f"   ⏭️  Skipped: {skipped}")

    if failed == 0:
        print("\n   🎉 All tests passed! Sentiment analysis is ready to use.")
        return True
    else:
        print("\n   ⚠️  Some tests failed. Check errors above.")
        return False


def main():
    """Run all smoke tests"""
    video_url = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_VIDEO_URL

    print("\n" + "=" * 60)
    print("  🧪 Sentiment Analysis - Smoke Test")
    print("  " + datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
    print("=" * 60)

    results = {
        "Configuration": test_config(),
        "API Keys": test_api_keys(),
        "Comment Fetch": test_comment_fetch(video_url),
        "End-to-End": test_full_analysis(video_url),
    }

    success = generate_report(results)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
