"""Run the HTTP service: ``python -m agentchat``."""

import uvicorn

from agentchat.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "agentchat.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
