# utils.py
"""
Utility functions for the flow-field application.

This module provides helpers for logging setup and configuration loading
that are used across the application but do not belong to the simulation
or rendering code.
"""
import logging
import logging.handlers
import json
import os
from typing import Dict, Any

from sim_config import SimulationConfig

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary containing a "logging" key with "level",
#       "format", "log_file", "max_bytes" and "backup_count" sub-keys.
#       Every key is optional.
#   - Outputs: None
#   - Side Effects: Configures the root Python logger. Creates a log
#     directory if it doesn't exist. Sets up a console handler and a
#     rotating file handler (skipped when "log_file" is empty).
#
# load_config(path: str) -> Dict[str, Any]:
#   - Outputs: The parsed JSON document.
#   - Side Effects: Logs and re-raises missing-file and JSON errors.
#
# build_simulation_config(config: Dict[str, Any]) -> SimulationConfig:
#   - Inputs: The full configuration document. "simulation_parameters"
#     holds the parameters; an optional "preset" name is applied first.
#     Any key present in "simulation_parameters" overrides the preset, so
#     the shipped config.json only lists keys that no preset sets.
#   - Outputs: A validated SimulationConfig.

DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the logging system from a configuration dictionary.

    Logs go to the console and, unless disabled, to a rotating file.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_format = log_config.get('format', DEFAULT_LOG_FORMAT)
    log_file_path = log_config.get('log_file', 'logs/flux.log')
    max_bytes = log_config.get('max_bytes', 1024 * 1024)
    backup_count = log_config.get('backup_count', 5)

    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Clear existing handlers to avoid duplication
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file_path:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path, maxBytes=max_bytes, backupCount=backup_count
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logging.info("Logging system initialized.")
    logging.debug(f"Log level set to {log_level}.")
    logging.debug(f"Log file path: {log_file_path or '(console only)'}")


def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError as e:
        logging.error(f"Error decoding JSON from {path}: {e}")
        raise
    logging.info("Configuration loaded successfully.")
    return config


def build_simulation_config(config: Dict[str, Any]) -> SimulationConfig:
    """Turns the loaded document into a validated SimulationConfig."""
    sim_params = config.get('simulation_parameters', {})
    preset = config.get('preset')
    if preset:
        return SimulationConfig.from_preset(preset, sim_params)
    return SimulationConfig(sim_params)
