"""Run log retention.

Deletes per-run log files older than a configured number of days.
"""

import logging
import time
from pathlib import Path

from lockctl.core.paths import LOG_FILE_PREFIX, LOG_FILE_SUFFIX

logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 86400


def find_expired_logs(log_dir: Path, max_age_days: int, *, now: float | None = None) -> list[Path]:
    """List run log files older than max_age_days.

    Args:
        log_dir: Directory holding run logs.
        max_age_days: Maximum age in days. Values <= 0 disable expiry.
        now: Reference time as a UNIX timestamp (defaults to the current time).

    Returns:
        Sorted list of expired log paths.
    """
    if max_age_days <= 0 or not log_dir.is_dir():
        return []

    cutoff = (now if now is not None else time.time()) - max_age_days * _SECONDS_PER_DAY
    expired: list[Path] = []
    for path in log_dir.glob(f"{LOG_FILE_PREFIX}*{LOG_FILE_SUFFIX}"):
        try:
            if path.is_file() and path.stat().st_mtime < cutoff:
                expired.append(path)
        except OSError as e:
            logger.warning("Cannot stat log file %s: %s", path, e)
    return sorted(expired)


def prune_logs(
    log_dir: Path,
    max_age_days: int,
    *,
    now: float | None = None,
    dry_run: bool = False,
) -> list[Path]:
    """Delete run log files older than max_age_days.

    Failures on individual files are logged and skipped.

    Args:
        log_dir: Directory holding run logs.
        max_age_days: Maximum age in days. Values <= 0 disable pruning.
        now: Reference time as a UNIX timestamp (defaults to the current time).
        dry_run: If True, report what would be deleted without deleting.

    Returns:
        Paths that were deleted (or would be, in dry-run mode).
    """
    removed: list[Path] = []
    for path in find_expired_logs(log_dir, max_age_days, now=now):
        if dry_run:
            logger.info("Dry-run: would delete %s", path)
            removed.append(path)
            continue
        try:
            path.unlink()
        except OSError as e:
            logger.warning("Failed to delete log file %s: %s", path, e)
            continue
        logger.debug("Deleted expired log file %s", path)
        removed.append(path)
    return removed
