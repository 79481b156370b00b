import uvicorn

from feed_backend.config import settings


def main():
    uvicorn.run(
        "feed_backend.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
    )


if __name__ == "__main__":
    main()
