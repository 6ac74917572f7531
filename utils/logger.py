"""
Logging utilities for MeetingMaestro
"""
import logging
import os
import sys
from datetime import datetime
import json

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Third-party loggers that chatter at INFO on every request
NOISY_LOGGERS = ('urllib3', 'httpx', 'openai', 'werkzeug')

class MeetingMaestroLogger:
    """Logging setup and request logging for the API server and CLI"""

    @staticmethod
    def setup_logging(log_level: str = "INFO", log_file: str = None):
        """
        Route every logger to stdout, and to ``log_file`` when given.

        ``log_file`` falls back to the MEETING_MAESTRO_LOG_FILE environment
        variable. An unknown ``log_level`` raises ValueError.
        """
        level = logging.getLevelName(log_level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {log_level}")

        formatter = logging.Formatter(LOG_FORMAT)
        handlers = [logging.StreamHandler(sys.stdout)]

        log_file = log_file or os.getenv("MEETING_MAESTRO_LOG_FILE")
        if log_file:
            handlers.append(logging.FileHandler(log_file))

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()
        for handler in handlers:
            handler.setFormatter(formatter)
            root_logger.addHandler(handler)

        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        return root_logger

    @staticmethod
    def log_request_response(endpoint: str, request_data: dict,
                           response_data: dict, status_code: int, processing_time: float):
        """Log an API request/response pair for debugging"""
        logger = logging.getLogger(__name__)

        if not isinstance(request_data, dict):
            request_data = {}
        attendees = request_data.get("attendees") or request_data.get("participants") or []

        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "endpoint": endpoint,
            "status_code": status_code,
            "processing_time_seconds": round(processing_time, 4),
            "request_summary": {
                "title": request_data.get("title"),
                "date": request_data.get("date"),
                "time": request_data.get("time"),
                "attendees_count": len(attendees) if isinstance(attendees, (list, str)) else 0
            },
            "response_keys": sorted(response_data.keys()) if isinstance(response_data, dict) else []
        }

        logger.info(f"Request processed: {json.dumps(log_entry, indent=2)}")
