from loguru import logger

from bookmark_reorder.cli import app


def main() -> None:
    logger.debug("Starting bookmark-reorder")
    app()


if __name__ == "__main__":
    main()
