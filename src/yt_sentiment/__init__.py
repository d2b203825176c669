"""
YouTube Comment Sentiment Analysis
Comment fetching, Gemini-backed sentiment inference and a FastAPI surface
"""

__version__ = "0.1.0"
