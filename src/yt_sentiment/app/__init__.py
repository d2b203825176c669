"""Application wiring: configuration, result cache, FastAPI app"""
