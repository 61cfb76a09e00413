import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PROJECT_MARKERS = ('pyproject.toml', '.git')


def find_project_root(start: Optional[Path] = None) -> Path:
    '''Nearest ancestor holding a project marker, else the working directory.'''
    start = start or Path(__file__).resolve()
    current = start if start.is_dir() else start.parent
    while True:
        if any((current / m).exists() for m in PROJECT_MARKERS):
            return current
        if current.parent == current:
            return Path.cwd()
        current = current.parent


def _resolve_env_filename() -> str:
    env_file = os.getenv('ENV_FILE')
    if env_file:
        return env_file

    env = (os.getenv('ENV') or os.getenv('PYTHON_ENV') or 'local').lower()
    if env in {'prod', 'production'}:
        return '.env.prod'
    return '.env.local'


def load_env(override: bool = False, root: Optional[Path] = None) -> Optional[Path]:
    '''Load the first env file found for the current ENV; return its path.'''
    root = root or find_project_root()
    env_path = Path(_resolve_env_filename())
    if not env_path.is_absolute():
        env_path = root / env_path

    for candidate in (env_path, root / '.env'):
        if candidate.exists():
            load_dotenv(dotenv_path=candidate, override=override)
            return candidate
    return None
