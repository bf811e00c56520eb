import logging
import sys
from pathlib import Path

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class LoggerManager:
    """Logger factory shared by the popgenkit statistics and simulation classes.

    Each engine class builds one of these in its ``__init__`` using its module name, so log records can be traced back to the component that produced them. Console output goes to stdout. File output is off by default because the library never owns an output directory; pass ``to_file=True`` (optionally with ``log_file`` or ``prefix``) to enable it.

    Example:
        >>> logman = LoggerManager(__name__, debug=True)
        >>> logger = logman.get_logger()
        >>> logger.debug("Computing Tajima's D for 12 samples.")
        >>> logman.set_level("WARNING")

    Attributes:
        name (str): The name of the logger.
        logger (logging.Logger): The configured logger instance.
        verbose (bool): If False, INFO and WARNING records are suppressed.
    """

    def __init__(
        self,
        name: str,
        prefix: str | None = "",
        debug: bool = False,
        verbose: bool = True,
        log_file: str | Path | None = None,
        level: int | None = None,
        to_console: bool = True,
        to_file: bool = False,
        log_format: str = "%(asctime)s - %(levelname)s - %(name)s - %(funcName)s - %(message)s",
        date_format: str = "%Y-%m-%d %H:%M:%S",
    ):
        """Initializes the LoggerManager.

        Args:
            name (str): Name of the logger, usually ``__name__`` of the calling module.
            prefix (str, optional): Prefix for the log file directory when ``to_file`` is True and no ``log_file`` is given.
            debug (bool, optional): If True, sets log level to DEBUG.
            verbose (bool, optional): If False, suppresses INFO and WARNING messages.
            log_file (str or Path, optional): Path to the log file.
            level (int, optional): Explicit logging level (overrides debug).
            to_console (bool, optional): Whether to log to stdout. Defaults to True.
            to_file (bool, optional): Whether to log to a file. Defaults to False.
            log_format (str, optional): Format of the log messages.
            date_format (str, optional): Format of the date in log messages.
        """
        self.name = name
        self.logger = logging.getLogger(name)
        self.verbose = verbose

        if level is not None:
            self.logger.setLevel(level)
        elif debug:
            self.logger.setLevel(logging.DEBUG)
        else:
            self.logger.setLevel(logging.INFO)

        formatter = logging.Formatter(fmt=log_format, datefmt=date_format)

        # Loggers are process-wide; only attach handlers once per name.
        if not self.logger.handlers:
            handlers = []

            if to_console:
                stream_handler = logging.StreamHandler(sys.stdout)
                stream_handler.setFormatter(formatter)
                handlers.append(stream_handler)

            if to_file:
                if log_file:
                    log_file = Path(log_file)
                elif prefix:
                    log_file = Path(f"{prefix}_output") / "logs" / f"{name}.log"
                else:
                    log_file = Path("logs") / f"{name}.log"

                log_file.parent.mkdir(exist_ok=True, parents=True)

                file_handler = logging.FileHandler(log_file)
                file_handler.setFormatter(formatter)
                handlers.append(file_handler)

            for handler in handlers:
                handler.setLevel(logging.NOTSET if verbose else logging.ERROR)
                self.logger.addHandler(handler)

    def get_logger(self) -> logging.Logger:
        """Returns the logger instance.

        Returns:
            logging.Logger: The configured logger.
        """
        return self.logger

    def set_level(self, level: str) -> None:
        """Sets the logging level by name.

        When the manager is not verbose, INFO and WARNING are raised to ERROR so that only failures reach the handlers.

        Args:
            level (str): One of DEBUG, INFO, WARNING, ERROR, CRITICAL.

        Raises:
            ValueError: If the level name is not recognized.
        """
        if level not in LEVELS:
            raise ValueError(
                "Invalid logging level. Choose from DEBUG, INFO, WARNING, ERROR, CRITICAL."
            )

        loglevel = LEVELS[level]
        if not self.verbose and level in {"INFO", "WARNING"}:
            loglevel = logging.ERROR

        self.logger.setLevel(loglevel)

    def add_handler(self, handler: logging.Handler) -> None:
        """Adds a logging handler if it's not already added.

        Args:
            handler (logging.Handler): The handler to add.
        """
        if handler not in self.logger.handlers:
            self.logger.addHandler(handler)

    def remove_handler(self, handler: logging.Handler) -> None:
        """Removes a logging handler if it exists.

        Args:
            handler (logging.Handler): The handler to remove.
        """
        if handler in self.logger.handlers:
            self.logger.removeHandler(handler)
