"""Logging and environment setup for the command line."""

import os
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def setup_logging(level: str = "INFO") -> None:
    """Set up logging configuration.
    
    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    # botocore is very chatty at DEBUG
    logging.getLogger('botocore').setLevel(max(logging.INFO, logging.getLogger().level))


def load_environment(env_file: Optional[str] = None) -> None:
    """Load environment variables from .env file.
    
    Args:
        env_file: Path to .env file. If None, looks for .env in current directory.
    """
    env_path = Path(env_file) if env_file else Path('.env')
    
    if env_path.exists():
        load_dotenv(env_path)
        logging.info(f"Loaded environment from {env_path}")
    else:
        logging.debug(f"No .env file found at {env_path}")


def get_int_env(key: str, default: int) -> int:
    """Get an integer environment variable.
    
    Args:
        key: Environment variable name
        default: Default value if not set
        
    Raises:
        ValueError: If the variable is set but not an integer
    """
    value = os.getenv(key)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {key} must be an integer, got {value!r}")
