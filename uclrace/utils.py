"""Utility functions for snapshot I/O, time handling and concurrent fetches."""

import json
import logging
import os
import tempfile
import warnings
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Hashable, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import PartialCoverageWarning, SchemaViolationError

T = TypeVar('T', bound=BaseModel)
K = TypeVar('K', bound=Hashable)
logger = logging.getLogger('uclrace.utils')


def load_json(
    path: Path | str,
    schema: type[T] | None = None,
) -> Any | T:
    """
    Load JSON file with optional schema validation.

    Args:
        path: Path to JSON file (str or Path object)
        schema: Optional Pydantic model to validate against

    Returns:
        Parsed JSON (validated if schema provided)

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If JSON is malformed
        SchemaViolationError: If schema validation fails

    Example:
        from uclrace.schemas import RaceSnapshot
        race = load_json('data/race.json', schema=RaceSnapshot)
    """
    path = Path(path)

    logger.debug(f'Loading JSON from: {path}')

    if not path.exists():
        raise FileNotFoundError(f'File not found: {path}')

    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f'Invalid JSON in {path}: {e.msg} at position {e.pos}')
        raise json.JSONDecodeError(f'Invalid JSON in {path}: {e.msg}', e.doc, e.pos) from e

    if schema:
        try:
            validated = schema.model_validate(data)
            logger.debug(f'Schema validation passed for: {path}')
            return validated
        except ValidationError as e:
            logger.error(f'Schema validation failed for {path}: {e}')
            raise SchemaViolationError(f'Schema validation failed for {path}:\n{e}') from e

    return data


def load_json_safe(
    path: Path | str,
    default: Any = None,
    schema: type[T] | None = None,
) -> Any | T:
    """
    Load JSON file with safe fallback to default value.

    Like load_json, but returns default value instead of raising
    for missing or invalid files. Used for optional inputs such as a
    previous run's coefficients or European activity snapshot.

    Args:
        path: Path to JSON file
        default: Value to return if file missing or invalid (default: None)
        schema: Optional Pydantic model to validate against

    Returns:
        Parsed JSON, validated data, or default value
    """
    try:
        return load_json(path, schema=schema)
    except FileNotFoundError:
        logger.info(f'Optional input not found: {path}')
        return default
    except (json.JSONDecodeError, SchemaViolationError) as e:
        logger.warning(f'Ignoring unreadable optional input {path}: {e}')
        return default


def build_model(schema: type[T], context: str, **fields) -> T:
    """
    Construct a schema model from mapped upstream fields.

    Raises:
        SchemaViolationError: If a field has the wrong type or range
    """
    try:
        return schema(**fields)
    except ValidationError as e:
        raise SchemaViolationError(f'{context}: {e}') from e


def to_jsonable(data: Any) -> Any:
    """Convert pydantic models (at any depth of lists/dicts) to camelCase JSON data."""
    if isinstance(data, BaseModel):
        return data.model_dump(mode='json', by_alias=True)
    if isinstance(data, dict):
        return {key: to_jsonable(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [to_jsonable(item) for item in data]
    return data


def save_json(
    path: Path | str,
    data: Any,
    indent: int = 2,
    create_dirs: bool = True,
) -> Path:
    """
    Save data as a pretty-printed, newline-terminated JSON file.

    The file is written to a temporary sibling first and moved into
    place, so readers never see a half-written snapshot.

    Args:
        path: Path to write to (str or Path object)
        data: Data to serialize (JSON-serializable or Pydantic model)
        indent: Indentation level (default: 2 spaces)
        create_dirs: Create parent directories if they don't exist (default: True)

    Returns:
        The path written

    Raises:
        TypeError: If data is not JSON-serializable
        OSError: If file cannot be written
    """
    path = Path(path)

    logger.debug(f'Saving JSON to: {path}')

    if create_dirs:
        path.parent.mkdir(parents=True, exist_ok=True)

    try:
        text = json.dumps(to_jsonable(data), indent=indent, ensure_ascii=False)
    except TypeError as e:
        logger.error(f'Data is not JSON-serializable: {e}')
        raise TypeError(f'Data is not JSON-serializable: {e}') from e

    fd, tmp_name = tempfile.mkstemp(prefix=f'.{path.name}.', suffix='.tmp', dir=path.parent)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(text)
            f.write('\n')
        os.replace(tmp_name, path)
    except OSError as e:
        logger.error(f'Failed to write file {path}: {e}')
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    logger.debug(f'Successfully saved JSON to: {path}')
    return path


def write_snapshots(snapshots: list[tuple[Path, Any]]) -> list[Path]:
    """
    Write several snapshot files independently.

    Every file is attempted even if an earlier one fails; the first
    error is re-raised once all writes have been tried.

    Args:
        snapshots: (path, data) pairs in write order

    Returns:
        Paths that were written

    Raises:
        The first exception raised by save_json, after all attempts
    """
    written: list[Path] = []
    first_error: Exception | None = None

    for path, data in snapshots:
        try:
            written.append(save_json(path, data))
            logger.info(f'Saved snapshot to {path}')
        except (OSError, TypeError) as e:
            logger.error(f'Failed to save snapshot {path}: {e}')
            if first_error is None:
                first_error = e

    if first_error is not None:
        raise first_error
    return written


def run_concurrently(tasks: dict[K, Callable[[], Any]], max_workers: int | None = None) -> dict[K, Any]:
    """
    Run independent fetches concurrently and wait for all of them.

    Args:
        tasks: Mapping of key -> zero-argument callable
        max_workers: Thread pool size (default: one thread per task)

    Returns:
        Mapping of key -> callable result, in the order of ``tasks``

    Raises:
        The first exception (in task order) raised by any callable
    """
    if not tasks:
        return {}

    with ThreadPoolExecutor(max_workers=max_workers or len(tasks)) as pool:
        futures = {key: pool.submit(task) for key, task in tasks.items()}
        return {key: future.result() for key, future in futures.items()}


def warn_partial_coverage(message: str, log: logging.Logger | None = None) -> None:
    """Log and emit a PartialCoverageWarning without interrupting the run."""
    (log or logger).warning(message)
    warnings.warn(message, PartialCoverageWarning, stacklevel=2)


def parse_instant(value: Any) -> datetime | None:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    Naive timestamps are taken as UTC. Returns None for missing or
    unparseable values.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def iso_utc(moment: datetime) -> str:
    """Format a datetime as a UTC ISO string with milliseconds and a Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
