"""Run the API with uvicorn: ``python -m mint``."""

import uvicorn

from mint.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "mint.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
