""".env loading for the PALETTE_* tuning variables.

Precedence, highest first:
  1. variables already in os.environ (never overwritten)
  2. the file given with --env-file
  3. the nearest .env found walking up from cwd

The walk ends at the directory holding .git (a dir in a clone, a file in
a worktree), so a checkout never picks up a .env from outside it.
"""

import os
from collections.abc import Iterator
from pathlib import Path

from loguru import logger


def _ancestors_within_repo(start: Path) -> Iterator[Path]:
    current = start.resolve()
    for directory in (current, *current.parents):
        yield directory
        if (directory / '.git').exists():
            return


def _find_dotenv(start: Path) -> Path | None:
    """Nearest .env at or above start, without crossing a .git boundary."""
    return next((d / '.env' for d in _ancestors_within_repo(start) if (d / '.env').is_file()), None)


def _parse_dotenv(path: Path) -> dict[str, str]:
    """KEY=value pairs from a .env file. Surrounding quotes and `export ` are stripped."""
    pairs: dict[str, str] = {}
    for raw in path.read_text(encoding='utf-8').splitlines():
        line = raw.strip()
        if line.startswith('#') or '=' not in line:
            continue
        key, _, value = line.partition('=')
        key = key.strip().removeprefix('export ').strip()
        if key:
            pairs[key] = value.strip().strip('"').strip("'")
    return pairs


def load_env(env_file: str | None = None) -> Path | None:
    """Apply a .env file to os.environ and return its path, or None if none was used."""
    path = Path(env_file) if env_file else _find_dotenv(Path.cwd())
    if path is None or not path.is_file():
        return None

    applied = [key for key, value in _parse_dotenv(path).items() if os.environ.setdefault(key, value) == value]
    logger.debug(f'{path}: {len(applied)} variable(s) available from .env')
    return path
