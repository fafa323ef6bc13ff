"""Batch organizer: applies every tag to the filesystem in one commit."""

import json
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from send2trash import send2trash
from tqdm import tqdm

from image_tagger.core.errors import CommitStepFailure, NothingToCommit
from image_tagger.core.shortcuts import Action, Shortcut, ShortcutRegistry
from image_tagger.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class AppliedOperation:
    """One file operation performed by a commit."""

    source: Path
    action: Action
    destination: Optional[Path] = None


@dataclass
class CommitResult:
    """Outcome of a fully successful commit."""

    base_path: Path
    applied: List[AppliedOperation] = field(default_factory=list)
    skipped: List[Tuple[Path, Shortcut]] = field(default_factory=list)

    def count(self, action: Action) -> int:
        return sum(1 for op in self.applied if op.action == action)


class BatchOrganizer:
    """
    Moves, copies and deletes tagged images one at a time.

    The first failing step aborts the commit. Steps already applied are not
    rolled back; the user can re-tag and commit again on the partially
    reorganized folder.
    """

    def __init__(
        self,
        registry: ShortcutRegistry,
        use_recycle_bin: bool = False,
        show_progress: bool = False,
        operations_log: Optional[Path] = None,
    ):
        """
        Initialize the organizer.

        Args:
            registry: Current shortcuts; tags whose shortcut was removed are skipped
            use_recycle_bin: Send deleted images to the recycle bin instead of unlinking
            show_progress: Show a progress bar while committing
            operations_log: Optional JSON-lines file receiving one record per commit
        """
        self.registry = registry
        self.use_recycle_bin = use_recycle_bin
        self.show_progress = show_progress
        self.operations_log = operations_log

    def commit(
        self,
        tags: Sequence[Tuple[Path, Shortcut]],
        source_folder: Path,
        output_path: Optional[Path] = None,
    ) -> CommitResult:
        """
        Apply tags in order.

        Args:
            tags: (image path, shortcut) pairs in first-tagged order
            source_folder: Folder the images were scanned from
            output_path: Base folder for destinations (default: source_folder)

        Returns:
            CommitResult listing applied and skipped tags

        Raises:
            NothingToCommit: If there are no tags (no filesystem changes)
            CommitStepFailure: On the first failed step (later tags untouched)
        """
        if not tags:
            raise NothingToCommit()

        base_path = Path(output_path) if output_path else Path(source_folder)
        result = CommitResult(base_path=base_path)

        logger.info(f"Committing {len(tags)} tagged images into {base_path}")

        if self.show_progress:
            tag_iter = tqdm(tags, desc="Organizing images", unit="image")
        else:
            tag_iter = tags

        for image_path, shortcut in tag_iter:
            image_path = Path(image_path)

            if self.registry.get(shortcut.key) != shortcut:
                logger.warning(
                    f"Skipping {image_path.name}: shortcut {shortcut.key!r} no longer exists"
                )
                result.skipped.append((image_path, shortcut))
                continue

            try:
                result.applied.append(self._apply(image_path, shortcut, base_path))
            except OSError as e:
                logger.error(f"Failed to {shortcut.action.value} {image_path}: {e}")
                self._log_operation(result, status="failed", error=str(e))
                raise CommitStepFailure(
                    image_path, shortcut.action.value, e, completed=result.applied
                ) from e

        self._log_operation(result, status="done")
        logger.info(
            f"Processed {len(result.applied)} images"
            + (f" ({len(result.skipped)} skipped)" if result.skipped else "")
        )
        return result

    def _apply(self, image_path: Path, shortcut: Shortcut, base_path: Path) -> AppliedOperation:
        if shortcut.action == Action.DELETE:
            self._remove(image_path)
            logger.debug(f"Deleted: {image_path}")
            return AppliedOperation(source=image_path, action=Action.DELETE)

        dest_folder = base_path / shortcut.folder
        dest_path = dest_folder / image_path.name
        dest_folder.mkdir(parents=True, exist_ok=True)

        shutil.copy2(image_path, dest_path)
        if shortcut.action == Action.MOVE:
            image_path.unlink()
        logger.debug(f"{shortcut.action.value.capitalize()}: {image_path} -> {dest_path}")
        return AppliedOperation(source=image_path, action=shortcut.action, destination=dest_path)

    def _remove(self, image_path: Path) -> None:
        if self.use_recycle_bin:
            send2trash(str(image_path))
        else:
            image_path.unlink()

    def _log_operation(
        self, result: CommitResult, status: str, error: Optional[str] = None
    ) -> None:
        """
        Append a commit record to the operations log.

        Args:
            result: Operations applied so far
            status: "done" or "failed"
            error: Failure message, if any
        """
        if self.operations_log is None:
            return

        entry: Dict[str, Any] = {
            "timestamp": datetime.now().isoformat(),
            "base_path": str(result.base_path),
            "status": status,
            "applied": [
                {
                    "source": str(op.source),
                    "action": op.action.value,
                    "destination": str(op.destination) if op.destination else None,
                }
                for op in result.applied
            ],
            "skipped": [str(path) for path, _ in result.skipped],
        }
        if error:
            entry["error"] = error

        try:
            self.operations_log.parent.mkdir(parents=True, exist_ok=True)
            with open(self.operations_log, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError as e:
            logger.warning(f"Failed to log operation: {e}")
