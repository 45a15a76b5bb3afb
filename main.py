"""
Job Board API - Server Entry Point.

Usage: python main.py [--reload]
"""

import sys

from dotenv import load_dotenv

load_dotenv()

import uvicorn

from jobboard.config import get_settings


def main():
    """Run the API server."""
    settings = get_settings()
    reload = "--reload" in sys.argv[1:]

    print("Job Board API")
    print("=" * 40)
    print(f"Environment: {settings.environment}")
    print(f"Database: {settings.database_url.split('@')[-1]}")  # Hide credentials
    print(f"AI evaluator: {'deepseek' if settings.deepseek_api_key else 'disabled (heuristic scoring)'}")
    print(f"Listening on http://{settings.host}:{settings.port}")
    print("-" * 40)

    uvicorn.run(
        "jobboard.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
