"""Configuration from the environment and an optional .env file.

Values already in os.environ are never replaced. Otherwise the first .env
found supplies them: the --env-file path when given, else the nearest .env
in the working directory or one of its parents. The upward search ends at
the first directory holding .git, so a checkout never reads a parent
project's settings.

Recognised variables, each a default for the matching CLI option:
  NTSCJ_TOOL_DITHER   ordered | error-diffusion | quasirandom
  NTSCJ_TOOL_CURVE    srgb | power
  NTSCJ_TOOL_WORKERS  positive integer
"""

import os
from dataclasses import dataclass
from pathlib import Path

from ntscj_tool.core.gamma import CURVES
from ntscj_tool.registry import DEFAULT_DITHER, all_dithers

ENV_DITHER = 'NTSCJ_TOOL_DITHER'
ENV_CURVE = 'NTSCJ_TOOL_CURVE'
ENV_WORKERS = 'NTSCJ_TOOL_WORKERS'


def _find_dotenv(start: Path) -> Path | None:
    """Nearest .env at or above start, or None once a .git marker or the root is passed."""
    for directory in (start.resolve(), *start.resolve().parents):
        if (directory / '.env').is_file():
            return directory / '.env'
        # worktrees and submodules use a .git file instead of a directory
        if (directory / '.git').exists():
            break
    return None


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in '"\'':
        return value[1:-1]
    return value


def _parse_dotenv(path: Path) -> dict[str, str]:
    """KEY=value lines, optionally quoted or prefixed with `export`. Other lines are skipped."""
    entries: dict[str, str] = {}
    for raw in path.read_text(encoding='utf-8').splitlines():
        text = raw.strip()
        if text.startswith('#'):
            continue
        key, sep, value = text.partition('=')
        key = key.removeprefix('export ').strip()
        if sep and key:
            entries[key] = _unquote(value.strip())
    return entries


def load_env(env_file: str | None = None) -> Path | None:
    """Fill unset os.environ keys from a .env file and return its path, or None if none was read."""
    path = Path(env_file) if env_file else _find_dotenv(Path.cwd())
    if path is None or not path.is_file():
        return None
    for key, value in _parse_dotenv(path).items():
        os.environ.setdefault(key, value)
    return path


@dataclass
class Settings:
    """CLI defaults resolved from the environment."""

    dither: str = DEFAULT_DITHER
    curve: str = 'srgb'
    workers: int = 1

    @classmethod
    def from_env(cls) -> 'Settings':
        """Read settings from os.environ. Raises ValueError on a bad value."""
        settings = cls()

        dither = os.environ.get(ENV_DITHER)
        if dither:
            if dither not in all_dithers():
                raise ValueError(f'{ENV_DITHER}={dither!r} is not one of: {", ".join(sorted(all_dithers()))}')
            settings.dither = dither

        curve = os.environ.get(ENV_CURVE)
        if curve:
            if curve not in CURVES:
                raise ValueError(f'{ENV_CURVE}={curve!r} is not one of: {", ".join(sorted(CURVES))}')
            settings.curve = curve

        workers = os.environ.get(ENV_WORKERS)
        if workers:
            try:
                settings.workers = int(workers)
            except ValueError:
                raise ValueError(f'{ENV_WORKERS}={workers!r} is not an integer') from None
            if settings.workers < 1:
                raise ValueError(f'{ENV_WORKERS}={workers!r} must be at least 1')

        return settings
