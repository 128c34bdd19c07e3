"""Server entry point: ``python -m affiliate_signup`` or ``affiliate-signup``."""

import uvicorn

from affiliate_signup.config.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "affiliate_signup.api.main:app",
        host=settings.host,
        port=settings.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
