"""
Logging setup for the gallery service.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
	"""
	Configure the ``gallery`` logger hierarchy.

	Args:
		log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
		log_file: Optional log file path

	Returns:
		logging.Logger: the configured package logger
	"""
	logger = logging.getLogger("gallery")
	logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

	# Remove existing handlers so repeated app creation does not duplicate output
	for handler in logger.handlers[:]:
		logger.removeHandler(handler)

	formatter = logging.Formatter(LOG_FORMAT)

	console_handler = logging.StreamHandler(sys.stdout)
	console_handler.setFormatter(formatter)
	logger.addHandler(console_handler)

	if log_file:
		log_path = Path(log_file)
		log_path.parent.mkdir(parents=True, exist_ok=True)
		file_handler = logging.FileHandler(log_path)
		file_handler.setFormatter(formatter)
		logger.addHandler(file_handler)

	return logger
