"""Main entry point for the chat API server."""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from chat_core.api import create_fastapi_app
from chat_core.app import Application
from chat_core.config import load_settings
from chat_core.logging_config import setup_logging


def main():
    """Run the application."""
    project_root = Path(__file__).resolve().parent
    load_dotenv(project_root / ".env")
    setup_logging()

    settings = load_settings()
    app = create_fastapi_app(Application(settings=settings))

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
