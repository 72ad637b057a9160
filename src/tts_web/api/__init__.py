"""
FastAPI HTTP Layer for tts-web.

    - routes.py: Form handler (/, /synthesize), JSON API (/v1/speech),
      /health and /metrics
    - schemas.py: Request/response Pydantic models
    - dependencies.py: FastAPI dependency injection
"""
