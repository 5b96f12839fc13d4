"""Logging configuration for the application."""

import logging
import sys

def setup_logging(level: int = logging.INFO, fmt: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'):
    """Configure logging for the application."""
    # Create a formatter
    formatter = logging.Formatter(fmt)
    
    # Create a console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    
    # Configure the root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)
    
    # Set higher log levels for noisy components
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    
    # Configure specific loggers
    loggers = [
        'eventhub.api.client',
        'eventhub.auth.session_manager',
        'eventhub.web',
        'eventhub.cli'
    ]
    
    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        # Don't add handler here since it's already handled by root logger
