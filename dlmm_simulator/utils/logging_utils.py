"""
Logging utilities for the DLMM simulator
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE_NAME = 'dlmm_simulator.log'


def setup_logging(log_dir: str = 'logs', level: int = logging.INFO,
                  logger_name: str = 'dlmm_simulator') -> Path:
    """Attach file and console handlers to the simulator's logger.

    Calling it again for the same log directory only updates the levels, so
    repeated CLI runs in one process do not duplicate output.

    Returns:
        Path of the log file
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = (log_path / LOG_FILE_NAME).resolve()

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    file_handlers = [h for h in logger.handlers
                     if isinstance(h, logging.FileHandler) and Path(h.baseFilename) == log_file]
    console_handlers = [h for h in logger.handlers
                        if type(h) is logging.StreamHandler]

    formatter = logging.Formatter(LOG_FORMAT)
    if not file_handlers:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        file_handlers.append(file_handler)
    if not console_handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)
        console_handlers.append(console_handler)

    for handler in file_handlers + console_handlers:
        handler.setLevel(level)
    return log_file


def log_simulation_step(step_data: Dict[str, Any], log_dir: str = 'logs') -> Path:
    """Append one simulated price point to the JSONL step log."""
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    step_file = log_path / 'simulation_steps.jsonl'
    with open(step_file, 'a') as f:
        f.write(json.dumps(step_data) + '\n')
    return step_file


def read_simulation_steps(log_dir: str = 'logs'):
    """Read back all steps written by log_simulation_step."""
    step_file = Path(log_dir) / 'simulation_steps.jsonl'
    steps = []
    with open(step_file, 'r') as f:
        for line in f:
            if line.strip():
                steps.append(json.loads(line))
    return steps
