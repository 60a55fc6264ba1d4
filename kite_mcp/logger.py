"""
Logging configuration for the Kite MCP Server.
Console output shows one line per record with a per-component icon so the
OAuth, GitHub proxy, chat relay and MCP dispatch traffic are easy to tell apart.
"""
import logging
import sys
from datetime import datetime
from typing import Optional


# ANSI color codes for terminal output
class Colors:
    """ANSI color codes for terminal formatting."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    WHITE = "\033[37m"
    BRIGHT_RED = "\033[91m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_BLUE = "\033[94m"
    BRIGHT_CYAN = "\033[96m"


# Component icons, keyed by the last segment of the logger name
COMPONENT_ICONS = {
    "dispatcher": "🧭",
    "tools": "🛠️",
    "github_client": "🐙",
    "oauth": "🔑",
    "auth": "🔑",
    "chat": "💬",
    "mcp": "🧭",
    "github": "🐙",
    "api": "🌐",
    "server": "🔌",
    "__main__": "🚀",
    "default": "▶️",
}


class KiteFormatter(logging.Formatter):
    """
    Formatter that renders `time │ level │ icon component │ message`.
    Colors are only used when stderr is a TTY.
    """

    LEVEL_FORMATS = {
        logging.DEBUG: (Colors.DIM, "DEBUG"),
        logging.INFO: (Colors.BRIGHT_CYAN, "INFO "),
        logging.WARNING: (Colors.BRIGHT_YELLOW, "WARN "),
        logging.ERROR: (Colors.BRIGHT_RED, "ERROR"),
        logging.CRITICAL: (Colors.BOLD + Colors.BRIGHT_RED, "CRIT "),
    }

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        color, level_text = self.LEVEL_FORMATS.get(
            record.levelno,
            (Colors.WHITE, record.levelname[:5])
        )
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        component = record.name.split(".")[-1] if record.name else "root"
        icon = COMPONENT_ICONS.get(component, COMPONENT_ICONS["default"])
        msg = record.getMessage()

        if self.use_colors:
            level_str = f"{color}{level_text}{Colors.RESET}"
            time_str = f"{Colors.DIM}{timestamp}{Colors.RESET}"
            component_str = f"{Colors.BRIGHT_BLUE}{component:16}{Colors.RESET}"
            formatted = f"{time_str} │ {level_str} │ {icon} {component_str} │ {msg}"
        else:
            formatted = f"{timestamp} | {level_text} | {icon} {component:16} | {msg}"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    use_colors: bool = True
) -> None:
    """
    Configure logging for the server.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        use_colors: Whether to use ANSI colors in console output
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    # stderr keeps stdout free for the MCP stdio transport
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(KiteFormatter(use_colors=use_colors))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(KiteFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
