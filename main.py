"""
Application Entry Point
Run with: python main.py or uvicorn main:app --reload
"""

import uvicorn

from shopsearch.api.main import app
from shopsearch.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "shopsearch.api.main:app",
        host="0.0.0.0",
        port=8080,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
