from typing import Protocol


class DebugLogger(Protocol):
    """Anything with a ``debug(message)`` method; ``logging.Logger`` qualifies."""

    def debug(self, message: str) -> None:
        ...


def repeat(char: str, count: int) -> str:
    return char * max(count, 0)


def debug_block(logger: DebugLogger, name: str, content: str) -> None:
    """Write ``content`` between ``===== name =====`` markers of equal width."""
    logger.debug(f"===== {name} =====")
    logger.debug(content)
    logger.debug(f"======{repeat('=', len(name))}======")
