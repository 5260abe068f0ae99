"""Backend process entrypoint."""

from __future__ import annotations

import uvicorn

from shared import config


def run() -> None:
    """Serve the wallet API on the configured host and port."""
    uvicorn.run(
        "backend.api:app",
        host=config.host(),
        port=config.port(),
        log_level=config.log_level(),
    )


if __name__ == "__main__":
    run()
