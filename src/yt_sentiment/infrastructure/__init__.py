"""Infrastructure: YouTube Data API and Gemini clients"""
