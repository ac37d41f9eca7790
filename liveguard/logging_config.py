"""
Logging setup for the liveness / attendance core.
"""

import logging
import logging.handlers
from datetime import datetime
from pathlib import Path

from liveguard import config


def setup_logging(app=None, log_level=None, log_dir=None,
                  max_log_size=config.LOG_MAX_BYTES, backup_count=config.LOG_BACKUP_COUNT):
    """
    Configure root and named loggers.

    Args:
        app: Optional Flask app instance whose logger should follow the level
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for rotating log files
        max_log_size: Maximum size of a log file (bytes)
        backup_count: Number of rotated files to keep
    """
    log_dir = Path(log_dir or config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    level_name = (log_level or config.LOG_LEVEL).upper()
    level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / 'liveguard.log',
        maxBytes=max_log_size,
        backupCount=backup_count,
        encoding='utf-8'
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    error_handler = logging.handlers.RotatingFileHandler(
        log_dir / 'errors.log',
        maxBytes=max_log_size,
        backupCount=backup_count,
        encoding='utf-8'
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)

    # Spoof attempts and identity decisions go to their own file
    security_handler = logging.handlers.RotatingFileHandler(
        log_dir / 'security.log',
        maxBytes=max_log_size,
        backupCount=backup_count,
        encoding='utf-8'
    )
    security_handler.setLevel(logging.INFO)
    security_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(error_handler)

    security_logger = logging.getLogger('security')
    for handler in security_logger.handlers[:]:
        security_logger.removeHandler(handler)
        handler.close()
    security_logger.addHandler(security_handler)
    security_logger.setLevel(logging.INFO)

    logging.getLogger('liveguard').setLevel(level)

    startup_logger = app.logger if app is not None else logging.getLogger('liveguard')
    if app is not None:
        app.logger.setLevel(level)

    startup_logger.info("=" * 50)
    startup_logger.info("LIVEGUARD STARTUP")
    startup_logger.info("Timestamp: %s", datetime.now().isoformat())
    startup_logger.info("Log Level: %s", level_name)
    startup_logger.info("Log Directory: %s", log_dir.absolute())
    startup_logger.info("=" * 50)


class LivenessAuditLogger:
    """Security-log helper for verification attempts."""

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger('security')

    def log_spoof_rejected(self, spoof_confidence, spoofed_frames, scored_frames):
        self.logger.warning(
            "SPOOF REJECTED - Confidence: %.3f, Flagged frames: %d/%d",
            spoof_confidence, spoofed_frames, scored_frames,
        )

    def log_liveness_failed(self, reason, blinks, head_movement):
        self.logger.info(
            "LIVENESS FAILED - Reason: %s, Blinks: %d, Head movement: %s",
            reason, blinks, head_movement,
        )

    def log_recognized(self, label, distance):
        self.logger.info("RECOGNIZED - Label: %s, Distance: %.4f", label, distance)

    def log_unrecognized(self, distance):
        self.logger.info("UNRECOGNIZED - Distance: %.4f", distance)

    def log_enrollment(self, label, embedding_count):
        self.logger.info("ENROLLED - Label: %s, Embeddings: %d", label, embedding_count)
