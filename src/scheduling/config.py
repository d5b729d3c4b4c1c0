"""
Loading team lists and formats from YAML, and saving generated schedules.
"""
import logging
import os
from typing import List

import yaml
from filelock import FileLock

from .exceptions import InvalidInput
from .models import Format

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DATA_DIR = os.environ.get('SCHEDULER_DATA_DIR', os.path.join(BASE_DIR, 'data'))
LOG_LEVEL = os.environ.get('SCHEDULER_LOG_LEVEL', 'INFO')

TEAMS_FILE = os.path.join(DATA_DIR, 'teams.yaml')
FORMAT_FILE = os.path.join(DATA_DIR, 'format.yaml')
SCHEDULE_FILE = os.path.join(DATA_DIR, 'schedule.yaml')
LOCK_TIMEOUT = 10


def _load_yaml(file_path):
    try:
        with open(file_path, mode='r', encoding='utf-8') as file:
            return yaml.safe_load(file)
    except yaml.YAMLError as e:
        raise InvalidInput(f"Could not parse {file_path}: {e}") from e


def load_teams(file_path) -> List[str]:
    """
    Load team ids in seed order.

    The file holds either a plain YAML list or a mapping with a ``teams`` list.
    """
    data = _load_yaml(file_path)
    if isinstance(data, dict):
        data = data.get('teams')
    if not isinstance(data, list):
        raise InvalidInput(f"{file_path} must contain a list of team ids")
    return [str(team) for team in data]


def load_format(file_path) -> Format:
    data = _load_yaml(file_path) or {}
    return Format.from_dict(data)


def save_schedule(file_path, result):
    """Write a ScheduleResult as YAML, holding a lock on the file while writing."""
    directory = os.path.dirname(os.path.abspath(file_path))
    os.makedirs(directory, exist_ok=True)
    lock = FileLock(f"{file_path}.lock", timeout=LOCK_TIMEOUT)
    with lock:
        with open(file_path, 'w', encoding='utf-8') as f:
            yaml.dump(result.to_dict(), f, default_flow_style=False, sort_keys=False)
    logger.info("Saved schedule to %s", file_path)
