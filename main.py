"""Main entry point for ethblocks."""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from ethblocks.api import create_fastapi_app
from ethblocks.app import Application
from ethblocks.config import Settings
from ethblocks.logging_config import setup_logging
from sim import Sim


def main():
    """Run the application."""
    project_root = Path(__file__).resolve().parent
    load_dotenv(project_root / ".env")
    setup_logging()

    settings = Settings.from_env()
    api_url = f"http://{settings.api_host}:{settings.api_port}"

    # Create SIM instance
    sim = Sim(api_url=api_url)

    # Set SIM instance for control router
    from ethblocks.api.routes import control
    control.set_sim_instance(sim)

    app = create_fastapi_app(Application(settings))

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
