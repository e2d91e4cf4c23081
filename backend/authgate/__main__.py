"""Run the gateway with uvicorn: `python -m authgate`."""
import logging

import uvicorn

from authgate.config import get_settings


def main() -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if get_settings().debug else logging.INFO,
    )
    settings = get_settings()
    uvicorn.run("authgate.main:app", host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
