"""
Configuration utilities for the seiscube package.

This module exposes helpers to:
- Configure application logging with colored console output.
- Load package configuration from YAML.
- Initialize GDAL (errors routed to Python logging).

Examples:
- Set up logging and route GDAL errors into Python logging

    ```python

    >>> from seiscube.base.config import Config
    >>> cfg = Config(level="DEBUG")  # doctest: +SKIP
    >>> # - Creates a colored console handler and optionally a file handler
    >>> # - Installs a GDAL error handler that forwards messages to logging

    ```

- Read the default axis names from the shipped config.yaml

    ```python

    >>> from seiscube.base.config import Config
    >>> cfg = Config(level="WARNING")  # doctest: +SKIP
    >>> cfg.axis_aliases()["sample"]  # doctest: +SKIP
    ['Sample', 'Depth', 'Time']

    ```

See Also:
- Config: Main entry point to configure logging and GDAL.
- LoggerManager: Internal helper that performs logging configuration.
- ColorFormatter: Adds ANSI colors to console logs.
"""

import copy
import logging
from pathlib import Path
from typing import Dict, List, Union

import colorama
import yaml
from osgeo import gdal, osr

CONFIG_DIR = Path(__file__).parent


class ColorFormatter(logging.Formatter):
    """Formatter that adds ANSI colors to the log level name for console output.

    The levelname (e.g., INFO, WARNING) is wrapped with the ANSI color escape
    sequence of the record's level; the message text is left untouched.

    Examples:
    - Demonstrate how the formatter colors the levelname

        ```python
        >>> import logging
        >>> from seiscube.base.config import ColorFormatter
        >>> logger = logging.getLogger("example.color")
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(ColorFormatter("%(levelname)s - %(message)s"))
        >>> logger.addHandler(handler)
        >>> logger.setLevel(logging.INFO)
        >>> logger.info("hello")  # doctest: +SKIP
        INFO - hello

        ```
    """

    RESET = "\x1b[0m"
    LEVEL_COLORS = {
        logging.DEBUG: "\x1b[36m",  # Cyan
        logging.INFO: "\x1b[32m",  # Green
        logging.WARNING: "\x1b[33m",  # Yellow
        logging.ERROR: "\x1b[31m",  # Red
        logging.CRITICAL: "\x1b[35m",  # Magenta
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record by applying a color to its level name.

        Args:
            record (logging.LogRecord): The log record to format.

        Returns:
            str: The formatted message where the levelname is wrapped in an ANSI
                color escape sequence suitable for consoles.
        """
        colored = copy.copy(record)
        color = self.LEVEL_COLORS.get(record.levelno, "")
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


class LoggerManager:
    """Encapsulates logging setup and GDAL error handler installation.

    It configures a colored console handler, an optional file handler, and
    redirects GDAL errors to the logging subsystem. Calling it several times
    with the same arguments does not duplicate handlers.

    Examples:
    - Basic usage to configure logging and register the GDAL error handler

        ```python

        >>> from seiscube.base.config import LoggerManager
        >>> _ = LoggerManager(level="INFO")  # doctest: +SKIP
        2026-10-17 12:01:39 | INFO | seiscube.base.config | Logging is configured.

        ```

    See Also:
        - ColorFormatter: Used by the console handler for colored levels.
        - Config.setup_logging: Public API that delegates to this class.
    """

    FMT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    DATE_FMT = "%Y-%m-%d %H:%M:%S"
    LEVELS = ["FATAL", "CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]
    NOISY_LOGGERS = ("shapely", "urllib3", "osgeo")

    def __init__(
        self,
        level: Union[int, str] = logging.INFO,
        log_file: Union[str, Path, None] = None,
    ):
        """Create a LoggerManager and configure logging.

        Args:
            level (int | str, optional): Logging level as an int (e.g., logging.INFO)
                or as a case-insensitive string ("DEBUG", "INFO", ...). Defaults to logging.INFO.
            log_file (str | pathlib.Path | None, optional): Optional path to a log file to
                also write logs to. If None, no file handler is added. Defaults to None.

        Raises:
            ValueError: If an invalid level string is provided (e.g., "VERBOS").
        """
        self._setup_logging(level=level, log_file=log_file)
        self._set_error_handler()

    def _setup_logging(
        self,
        level: Union[int, str] = logging.INFO,
        log_file: Union[str, Path, None] = None,
    ) -> None:
        """Configure the root logger in place.

        Args:
            level (int | str, optional): Logging level as an int or one of
                "FATAL", "CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG" (case-insensitive).
            log_file (str | pathlib.Path | None, optional): Optional path to a log file.

        Raises:
            ValueError: If an invalid level string is provided.
            OSError: If the file handler cannot be created.
        """
        if isinstance(level, str):
            if level.upper() not in self.LEVELS:
                raise ValueError(f"Invalid log level: {level}")
            level = getattr(logging, level.upper(), logging.INFO)

        colorama.just_fix_windows_console()

        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        console_handler = None
        file_handler_exists_for = set()
        for h in root_logger.handlers:
            if isinstance(h, logging.FileHandler):
                file_handler_exists_for.add(Path(h.baseFilename))
            elif isinstance(h, logging.StreamHandler):
                console_handler = h

        if console_handler is None:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(level)
            console_handler.setFormatter(
                ColorFormatter(fmt=self.FMT, datefmt=self.DATE_FMT)
            )
            root_logger.addHandler(console_handler)
        else:
            console_handler.setLevel(level)
            if not isinstance(console_handler.formatter, ColorFormatter):
                console_handler.setFormatter(
                    ColorFormatter(fmt=self.FMT, datefmt=self.DATE_FMT)
                )

        if log_file is not None:
            log_file_path = Path(log_file).absolute()
            if log_file_path not in file_handler_exists_for:
                fh = logging.FileHandler(log_file_path, encoding="utf-8")
                fh.setLevel(level)
                fh.setFormatter(logging.Formatter(fmt=self.FMT, datefmt=self.DATE_FMT))
                root_logger.addHandler(fh)

        for noisy in self.NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)

        logging.getLogger(__name__).info("Logging is configured.")

    @staticmethod
    def _set_error_handler() -> None:
        """Install a GDAL error handler that forwards messages to logging.

        Messages below CE_Warning are printed to stdout, everything else is
        mapped onto the matching logging level.
        """
        log = logging.getLogger(__name__).getChild("gdal")

        def gdal_error_handler(err_class, err_num, err_msg):
            """Error handler for GDAL mapped to logging levels."""
            if err_class is not None and err_class < gdal.CE_Warning:
                print(f"GDAL error (class {err_class}, number {err_num}): {err_msg}")
                return

            if err_class == gdal.CE_Warning:
                log.warning(f"GDAL[{err_num}] {err_msg}")
            elif err_class == gdal.CE_Failure:
                log.error(f"GDAL[{err_num}] {err_msg}")
            elif err_class == gdal.CE_Fatal:
                log.critical(f"GDAL[{err_num}] {err_msg}")
            else:
                log.error(f"GDAL(class={err_class}, code={err_num}) {err_msg}")

        gdal.PushErrorHandler(gdal_error_handler)


class Config:
    """High-level configuration entry point for logging, GDAL and cube defaults.

    This class orchestrates:
    - Loading the package configuration from YAML.
    - Configuring Python logging (console with colors, optional file).
    - Initializing GDAL so multidimensional cubes can be opened.

    Args:
        level (int | str, optional): Logging level. Defaults to logging.INFO.
        log_file (str | pathlib.Path | None, optional): Optional path to a file for logs.
        config_file (str, optional): YAML filename to read from the package's base folder.
            Defaults to "config.yaml".

    Attributes:
        config (dict): Parsed configuration values from YAML.
        logger (logging.Logger): Module logger configured by setup_logging().

    Examples:
    - Create a configuration with console logging

        ```python

        >>> from seiscube.base.config import Config  # doctest: +SKIP
        >>> cfg = Config(level="INFO")  # doctest: +SKIP
        2026-10-17 12:10:28 | INFO | seiscube.base.config | Logging is configured.
        >>> cfg.stepsize_tolerance()  # doctest: +SKIP
        1e-09

        ```
    """

    def __init__(
        self,
        level: Union[int, str] = logging.INFO,
        log_file: Union[str, Path, None] = None,
        config_file="config.yaml",
    ):
        self.setup_logging(level=level, log_file=log_file)
        self.config_file = config_file
        self.config = self.load_config()
        self.initialize_gdal()

    def load_config(self) -> dict:
        """Load configuration from the package YAML file.

        The YAML file is expected to live under seiscube/base/<config_file>.

        Returns:
            dict: Parsed configuration values.

        Raises:
            FileNotFoundError: If the configuration file is not found.
            yaml.YAMLError: If the YAML cannot be parsed.
        """
        config_file = CONFIG_DIR / self.config_file
        with open(config_file, "r") as file:
            return yaml.safe_load(file)

    def initialize_gdal(self):
        """Enable GDAL exceptions, apply the `gdal` options and register drivers."""
        gdal.UseExceptions()
        osr.UseExceptions()
        for key, value in self.config.get("gdal", {}).items():
            gdal.SetConfigOption(key, str(value))
        gdal.AllRegister()
        self.logger.debug(f"GDAL {gdal.__version__} initialized")

    def axis_aliases(self) -> Dict[str, List[str]]:
        """Accepted dimension names per axis role, keyed by inline/crossline/sample."""
        return {
            role: list(names)
            for role, names in self.config.get("cube", {}).get("axes", {}).items()
        }

    def stepsize_tolerance(self, default: float = 1e-9) -> float:
        """Relative tolerance used when comparing the step sizes of two cubes.

        Args:
            default (float, optional): Returned when `cube.stepsize_tolerance`
                is not set. Defaults to 1e-9.
        """
        value = self.config.get("cube", {}).get("stepsize_tolerance")
        return default if value is None else float(value)

    def setup_logging(
        self,
        level: Union[int, str] = logging.INFO,
        log_file: Union[str, Path, None] = None,
    ):
        """Configure application-wide logging by delegating to LoggerManager."""
        LoggerManager(level=level, log_file=log_file)
        self._logging_configured = True
        self.logger = logging.getLogger(__name__)
