from __future__ import annotations

"""
Retention Sweeper.

Deletes dated log directories (YYYY-MM-DD) that fell out of the retention
window. Cleanup is best effort: a malformed name or a failed deletion is
logged and the sweep moves on to the next entry.
"""

import os
import re
import shutil
from datetime import date, timedelta
from typing import TYPE_CHECKING, Optional

from tracelog.domain.constants import INTERNAL_TITLE
from tracelog.domain.models import SweepReport
from tracelog.infra.fs import list_subdirectories, normalize_base_dir, utc_today

if TYPE_CHECKING:
    from tracelog.core.handle import LoggerHandle

SWEEP_FUNCTION = "LogDirectoryCleanup"

_DATE_NAME = re.compile(r"[0-9]+-[0-9]+-[0-9]+")


def parse_directory_date(name: str) -> date:
    """
    Parse a directory name strictly as YYYY-MM-DD.

    Raises:
        ValueError: If the name does not have three integer parts forming a
            valid calendar date.
    """
    if not _DATE_NAME.fullmatch(name):
        raise ValueError(f"expected YYYY-MM-DD, got {name!r}")
    year, month, day = (int(p) for p in name.split("-"))
    return date(year, month, day)


class RetentionSweeper:
    """
    Applies the retention window to a base directory.

    Args:
        log: Handle receiving the sweep's own trace and error lines.
    """

    def __init__(self, log: "LoggerHandle") -> None:
        self._log = log

    def sweep(
            self,
            base_dir: str,
            days_to_keep: int,
            today: Optional[date] = None,
            protect: Optional[str] = None,
    ) -> SweepReport:
        """
        Remove dated subdirectories at least days_to_keep days old.

        A directory is removed when (today - days_to_keep) - its date is zero
        or more days, so the boundary date itself is removed.

        Args:
            base_dir: Directory holding the dated folders.
            days_to_keep: Retention window in days.
            today: Reference UTC date; defaults to the current one.
            protect: Directory that is never removed (the active log folder).

        Returns:
            SweepReport: What was removed, kept, skipped or failed.
        """
        if days_to_keep < 0:
            raise ValueError(f"days_to_keep must be >= 0, got {days_to_keep}")

        log = self._log
        base_dir = normalize_base_dir(base_dir)
        report = SweepReport(base_dir=base_dir)

        log.started(INTERNAL_TITLE, SWEEP_FUNCTION, "BaseFilePath[%s] DaysToKeep[%d]", base_dir, days_to_keep)

        try:
            names = list_subdirectories(base_dir)
        except OSError as e:
            log.completed_error(e, INTERNAL_TITLE, SWEEP_FUNCTION)
            return report

        try:
            compare_date = (today or utc_today()) - timedelta(days=days_to_keep)
        except OverflowError as e:
            log.completed_error(e, INTERNAL_TITLE, SWEEP_FUNCTION, "DaysToKeep[%d] Out Of Range", days_to_keep)
            return report
        log.trace(INTERNAL_TITLE, SWEEP_FUNCTION, "CompareDate[%s]", compare_date.isoformat())

        protected = os.path.abspath(protect) if protect else None

        for name in names:
            full_path = os.path.join(base_dir, name)

            try:
                directory_date = parse_directory_date(name)
            except ValueError as e:
                log.error(e, INTERNAL_TITLE, SWEEP_FUNCTION, "Attempting To Convert Directory [%s]", name)
                report.skipped.append(full_path)
                continue

            days_old = (compare_date - directory_date).days
            log.trace(INTERNAL_TITLE, SWEEP_FUNCTION, "Checking Directory[%s] DaysOld[%d]", full_path, days_old)

            if days_old < 0:
                report.kept.append(full_path)
                continue

            if protected is not None and os.path.abspath(full_path) == protected:
                log.trace(INTERNAL_TITLE, SWEEP_FUNCTION, "Keeping Active Directory[%s]", full_path)
                report.kept.append(full_path)
                continue

            log.trace(INTERNAL_TITLE, SWEEP_FUNCTION, "Removing Directory[%s]", full_path)
            try:
                shutil.rmtree(full_path)
            except OSError as e:
                log.error(e, INTERNAL_TITLE, SWEEP_FUNCTION, "Attempting To Remove Directory [%s]", full_path)
                report.failed.append(full_path)
                continue

            log.trace(INTERNAL_TITLE, SWEEP_FUNCTION, "Directory Removed [%s]", full_path)
            report.removed.append(full_path)

        log.completed(INTERNAL_TITLE, SWEEP_FUNCTION)
        return report
