# quack_companion/run.py
import uvicorn

from .core.config import settings


def main():
    print(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")
    print(f"Quack endpoint: {settings.ENDPOINT or '(not configured)'}")
    print(f"API Version: {settings.API_V1_PREFIX}")

    uvicorn.run(
        "quack_companion.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
