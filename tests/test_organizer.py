"""Tests for the batch organizer."""

import errno
import json
import shutil

import pytest

from image_tagger.core.errors import CommitStepFailure, NothingToCommit
from image_tagger.core.organizer import BatchOrganizer
from image_tagger.core.shortcuts import Action, Shortcut

from conftest import make_image


@pytest.fixture
def organizer(registry):
    return BatchOrganizer(registry)


def _listing(folder):
    return sorted(str(p.relative_to(folder)) for p in folder.rglob("*"))


def test_nothing_to_commit(organizer, image_dir):
    """Test that an empty commit fails without touching the filesystem."""
    before = _listing(image_dir)

    with pytest.raises(NothingToCommit):
        organizer.commit([], source_folder=image_dir)

    assert _listing(image_dir) == before


def test_move(registry, organizer, image_dir):
    """Test that a move copies to the destination and removes the source."""
    dogs = registry.add("d", "dogs", "move")

    result = organizer.commit([(image_dir / "a.jpg", dogs)], source_folder=image_dir)

    assert (image_dir / "dogs" / "a.jpg").is_file()
    assert not (image_dir / "a.jpg").exists()
    assert (image_dir / "b.png").is_file()
    assert result.base_path == image_dir
    assert result.count(Action.MOVE) == 1
    assert result.applied[0].destination == image_dir / "dogs" / "a.jpg"


def test_copy(registry, organizer, tmp_path):
    """Test that a copy keeps the source."""
    folder = tmp_path / "src"
    folder.mkdir()
    make_image(folder / "c.gif")
    keep = registry.add("x", "keep", "copy")

    organizer.commit([(folder / "c.gif", keep)], source_folder=folder)

    assert (folder / "keep" / "c.gif").is_file()
    assert (folder / "c.gif").is_file()
    assert (folder / "keep" / "c.gif").read_bytes() == (folder / "c.gif").read_bytes()


def test_delete(registry, organizer, image_dir):
    """Test that a delete removes the source and creates no folder."""
    trash = registry.add("t", "trash", "delete")

    result = organizer.commit([(image_dir / "b.png", trash)], source_folder=image_dir)

    assert not (image_dir / "b.png").exists()
    assert not (image_dir / "trash").exists()
    assert result.applied[0].destination is None


def test_delete_to_recycle_bin(registry, image_dir, monkeypatch):
    """Test that deletes go through send2trash when enabled."""
    trashed = []
    monkeypatch.setattr(
        "image_tagger.core.organizer.send2trash", lambda path: trashed.append(path)
    )
    trash = registry.add("t", "trash", "delete")
    organizer = BatchOrganizer(registry, use_recycle_bin=True)

    organizer.commit([(image_dir / "b.png", trash)], source_folder=image_dir)

    assert trashed == [str(image_dir / "b.png")]


def test_output_path_is_base(registry, organizer, image_dir, tmp_path):
    """Test that a configured output path replaces the source folder as base."""
    out = tmp_path / "sorted"
    out.mkdir()
    dogs = registry.add("d", "dogs/good", "move")

    result = organizer.commit(
        [(image_dir / "a.jpg", dogs)], source_folder=image_dir, output_path=out
    )

    assert (out / "dogs" / "good" / "a.jpg").is_file()
    assert not (image_dir / "dogs").exists()
    assert result.base_path == out


def test_existing_destination_folder(registry, organizer, image_dir):
    """Test that an existing destination folder is not an error."""
    (image_dir / "dogs").mkdir()
    dogs = registry.add("d", "dogs", "move")

    organizer.commit([(image_dir / "a.jpg", dogs)], source_folder=image_dir)

    assert (image_dir / "dogs" / "a.jpg").is_file()


def test_first_failure_aborts_without_rollback(registry, organizer, tmp_path, monkeypatch):
    """Test that the second move failing leaves the first applied and the rest untouched."""
    folder = tmp_path / "src"
    folder.mkdir()
    for name in ["one.jpg", "two.jpg", "three.jpg"]:
        make_image(folder / name)
    dogs = registry.add("d", "dogs", "move")

    real_copy = shutil.copy2
    calls = []

    def disk_full_on_second(src, dst):
        calls.append(src)
        if len(calls) == 2:
            raise OSError(errno.ENOSPC, "No space left on device")
        return real_copy(src, dst)

    monkeypatch.setattr("image_tagger.core.organizer.shutil.copy2", disk_full_on_second)

    tags = [(folder / name, dogs) for name in ["one.jpg", "two.jpg", "three.jpg"]]
    with pytest.raises(CommitStepFailure) as exc_info:
        organizer.commit(tags, source_folder=folder)

    # First move completed, second untouched, third never attempted
    assert (folder / "dogs" / "one.jpg").is_file()
    assert not (folder / "one.jpg").exists()
    assert (folder / "two.jpg").is_file()
    assert not (folder / "dogs" / "two.jpg").exists()
    assert (folder / "three.jpg").is_file()
    assert len(calls) == 2

    failure = exc_info.value
    assert failure.path == folder / "two.jpg"
    assert failure.action == "move"
    assert isinstance(failure.cause, OSError)
    assert [op.source for op in failure.completed] == [folder / "one.jpg"]


def test_missing_source_fails(registry, organizer, image_dir):
    keep = registry.add("x", "keep", "copy")
    (image_dir / "a.jpg").unlink()

    with pytest.raises(CommitStepFailure):
        organizer.commit([(image_dir / "a.jpg", keep)], source_folder=image_dir)


def test_removed_shortcut_is_skipped(registry, organizer, image_dir):
    """Test that tags whose shortcut was removed are skipped and reported."""
    dogs = registry.add("d", "dogs", "move")
    keep = registry.add("x", "keep", "copy")
    registry.remove("d")

    result = organizer.commit(
        [(image_dir / "a.jpg", dogs), (image_dir / "b.png", keep)],
        source_folder=image_dir,
    )

    assert (image_dir / "a.jpg").is_file()
    assert not (image_dir / "dogs").exists()
    assert (image_dir / "keep" / "b.png").is_file()
    assert result.skipped == [(image_dir / "a.jpg", dogs)]


def test_rebound_shortcut_is_skipped(registry, organizer, image_dir):
    """Test that a key re-bound to another folder does not reuse old tags."""
    old = registry.add("d", "dogs", "move")
    registry.remove("d")
    registry.add("d", "ducks", "move")

    result = organizer.commit([(image_dir / "a.jpg", old)], source_folder=image_dir)

    assert result.applied == []
    assert (image_dir / "a.jpg").is_file()


def test_operations_log(registry, image_dir, tmp_path):
    """Test that each commit appends a JSON line to the operations log."""
    log = tmp_path / "logs" / "operations.log"
    organizer = BatchOrganizer(registry, operations_log=log)
    keep = registry.add("x", "keep", "copy")

    organizer.commit([(image_dir / "a.jpg", keep)], source_folder=image_dir)

    lines = log.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["status"] == "done"
    assert record["applied"][0]["action"] == "copy"
    assert record["applied"][0]["destination"] == str(image_dir / "keep" / "a.jpg")


def test_shortcut_is_hashable_for_tags():
    """Shortcuts are frozen so they can be compared across registry reloads."""
    assert Shortcut("a", "x", Action.MOVE) == Shortcut("a", "x", Action.MOVE)
    assert len({Shortcut("a", "x", Action.MOVE), Shortcut("a", "x", Action.MOVE)}) == 1
