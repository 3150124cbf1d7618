import logging
import logging.handlers
import os
from typing import Optional

NOISY_PACKAGES = ["httpx", "httpcore"]

class PackageFilter(logging.Filter):
    """Drops records emitted by the given third-party packages."""
    def __init__(self, excluded_packages):
        super().__init__()
        if isinstance(excluded_packages, str):
            excluded_packages = [excluded_packages]
        self.excluded_packages = list(excluded_packages)

    def filter(self, record):
        return not any(record.name.startswith(name) for name in self.excluded_packages)

def setup_logging(log_folder: Optional[str] = None, verbose: bool = False):
    """
    Configures the logging system.

    This setup includes:
    1. A console handler on stderr, so stdout stays free for the JSON state
       (DEBUG and above when verbose, INFO otherwise).
    2. When a log folder is given, a timed rotating file handler for general
       logs (INFO and above), rotating at midnight and keeping 7 days.
    3. When a log folder is given, a separate timed rotating file handler for
       error logs (ERROR and above), also keeping 7 days of history.
    """
    # Get the root logger
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG) # Set the lowest level to capture everything

    default_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # INFO logs get a user-friendly format without the logger name.
    app_log_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s'
    )

    package_filter = PackageFilter(NOISY_PACKAGES)

    # 1. Console Handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(default_formatter)
    console_handler.addFilter(package_filter)
    logger.addHandler(console_handler)

    if log_folder:
        if not os.path.exists(log_folder):
            os.makedirs(log_folder)

        # 2. Timed Rotating File Handler for general logs (INFO and above)
        info_log_path = os.path.join(log_folder, 'app.log')
        info_handler = logging.handlers.TimedRotatingFileHandler(
            info_log_path, when='midnight', interval=1, backupCount=7
        )
        info_handler.setLevel(logging.INFO)
        info_handler.setFormatter(app_log_formatter)
        info_handler.addFilter(package_filter)
        logger.addHandler(info_handler)

        # 3. Timed Rotating File Handler for error logs (ERROR and above)
        error_log_path = os.path.join(log_folder, 'error.log')
        error_handler = logging.handlers.TimedRotatingFileHandler(
            error_log_path, when='midnight', interval=1, backupCount=7
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(default_formatter)
        logger.addHandler(error_handler)

    logging.debug("Setup do logging está completo.")
