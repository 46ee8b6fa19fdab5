from __future__ import annotations

import uvicorn

from mailstats.core.config import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run("mailstats.main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
