from __future__ import annotations

import logging
import shutil
from datetime import datetime
from pathlib import Path

import config
from infrastructure.repositories import ExpenseRepository, JsonFileExpenseRepository

logger = logging.getLogger(__name__)


def _prune_backups(backup_dir: Path, source: Path, keep: int) -> list[Path]:
    # Timestamps sort lexically, so the oldest copies come first.
    copies = sorted(backup_dir.glob(f"{source.stem}_backup_*{source.suffix}"))
    stale = copies[:-keep]
    for path in stale:
        path.unlink()
        logger.debug("Removed old backup %s", path)
    return stale


def create_backup(
    file_path: str, backup_dir: str | None = None, *, keep: int | None = None
) -> str | None:
    """Copy a file store next to it (or into ``backup_dir``) before a rewrite.

    Only the newest ``keep`` copies of this store are retained; ``keep``
    defaults to ``config.BACKUP_KEEP`` and a value <= 0 keeps every copy.
    Returns the new copy's path, or None when the store does not exist yet.
    """
    source = Path(file_path)
    if not source.is_file():
        logger.debug("Nothing to back up at %s", source)
        return None
    target_dir = Path(backup_dir) if backup_dir else source.parent / "backups"
    target_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    backup_path = target_dir / f"{source.stem}_backup_{stamp}{source.suffix}"
    shutil.copy2(source, backup_path)
    keep = config.BACKUP_KEEP if keep is None else keep
    if keep > 0:
        _prune_backups(target_dir, source, keep)
    logger.info("Backup of %s written to %s", source, backup_path)
    print(f"[backup] Backup created: {backup_path}")
    return str(backup_path)


def export_to_json(repository: ExpenseRepository, json_path: str) -> int:
    """Write every expense of ``repository`` into a JSON file store."""
    expenses = repository.load_all()
    writer = JsonFileExpenseRepository(json_path)
    writer.save_all(expenses)
    print(f"[backup] {len(expenses)} expense(s) exported to JSON: {json_path}")
    return len(expenses)
