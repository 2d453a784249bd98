# ABOUTME: Command line entry point for running the gateway with uvicorn
# ABOUTME: Configures structured logging from Settings and serves the FastAPI app on Settings.port
import uvicorn

from music_gateway.config import get_settings
from music_gateway.logging_config import configure_logging


def main() -> None:
    settings = get_settings()
    configure_logging(log_level=settings.log_level, enable_json=settings.log_json)
    uvicorn.run(
        "music_gateway.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
