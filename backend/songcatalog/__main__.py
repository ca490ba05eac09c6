"""Run the API server: `python -m songcatalog` or the `songcatalog` script."""

import uvicorn

from songcatalog.config import settings


def main() -> None:
    uvicorn.run(
        "songcatalog.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
