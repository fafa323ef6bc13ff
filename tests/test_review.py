"""Tests for the review UI module."""

import pytest
from PIL import Image
from rich.console import Console

from image_tagger.core.organizer import AppliedOperation, CommitResult
from image_tagger.core.session import ARROW_LEFT, ARROW_RIGHT, ViewerSession, ViewMode
from image_tagger.core.shortcuts import Action
from image_tagger.ui.review import (
    BACKSPACE,
    ENTER,
    ESCAPE,
    TAB,
    ImageMetadata,
    ReviewUI,
    translate_key,
)


def _text(renderable) -> str:
    console = Console(record=True, width=300)
    console.print(renderable)
    return console.export_text()


@pytest.fixture
def session(config, registry, image_dir):
    registry.add("d", "dogs", "move")
    registry.add("x", "keep", "copy")
    viewer = ViewerSession(config, registry=registry)
    viewer.open_folder(image_dir)
    yield viewer
    viewer.cache.shutdown()


class TestImageMetadata:
    """Test ImageMetadata class."""

    def test_metadata_from_image(self, tmp_path):
        """Test metadata extraction from an actual image."""
        image_path = tmp_path / "test.jpg"
        img = Image.new("RGB", (800, 600), color="red")
        img.save(image_path, "JPEG")

        metadata = ImageMetadata(image_path)

        assert metadata.path == image_path
        assert metadata.width == 800
        assert metadata.height == 600
        assert metadata.resolution == "800x600"
        assert metadata.size_bytes > 0
        assert metadata.format == "JPEG"
        assert metadata.modified is not None

    def test_metadata_for_unreadable_file(self, tmp_path):
        """Test that a broken image still yields file metadata."""
        broken = tmp_path / "broken.png"
        broken.write_bytes(b"not a png")

        metadata = ImageMetadata(broken)

        assert metadata.size_bytes == 9
        assert metadata.resolution is None

    def test_metadata_for_missing_file(self, tmp_path):
        metadata = ImageMetadata(tmp_path / "gone.jpg")

        assert metadata.size_bytes == 0
        assert metadata.modified is None


class TestKeyTranslation:
    """Raw terminal input to key names."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("\x1b[C", ARROW_RIGHT),
            ("\x1b[D", ARROW_LEFT),
            ("\xe0M", ARROW_RIGHT),
            ("\r", ENTER),
            ("\t", TAB),
            ("\x1b", ESCAPE),
            ("\x7f", BACKSPACE),
            ("d", "d"),
            ("D", "D"),
        ],
    )
    def test_translate(self, raw, expected):
        assert translate_key(raw) == expected


class TestReviewUI:
    """Test ReviewUI rendering."""

    def test_review_ui_initialization(self):
        ui = ReviewUI()
        assert ui.console is not None

    def test_single_view_shows_tag(self, session):
        ui = ReviewUI()
        session.handle_key("d")

        text = _text(ui.render_single(session))

        assert session.current().name in text
        assert "64x48" in text
        assert "dogs" in text
        assert f"Image 1/{len(session.entries)}" in text

    def test_single_view_untagged(self, session):
        text = _text(ReviewUI().render_single(session))

        assert "untagged" in text

    def test_single_view_without_images(self, config, registry):
        empty = ViewerSession(config, registry=registry)

        assert "No images loaded" in _text(ReviewUI().render_single(empty))

    def test_grid_lists_names_and_tags(self, session):
        session.handle_key("x")
        session.set_view_mode(ViewMode.GRID)

        text = _text(ReviewUI().render_grid(session, page=0, columns=2, rows=2))

        for entry in session.entries:
            assert entry.name in text
        assert "keep" in text
        assert "Page 1/1" in text

    def test_shortcut_table(self, session):
        text = _text(ReviewUI().render_shortcuts(session.registry))

        assert "dogs" in text
        assert "keep" in text
        assert "copy" in text

    def test_tag_summary_counts(self, session):
        console = Console(record=True, width=300)
        session.handle_key("d")
        session.handle_key(ARROW_RIGHT)
        session.handle_key("d")

        ReviewUI(console).show_tag_summary(session)

        text = console.export_text()
        assert "Pending Tags" in text
        assert "2" in text
        assert str(session.folder / "dogs") in text

    def test_commit_result(self, tmp_path):
        console = Console(record=True, width=300)
        result = CommitResult(
            base_path=tmp_path,
            applied=[
                AppliedOperation(source=tmp_path / "a.jpg", action=Action.MOVE),
                AppliedOperation(source=tmp_path / "b.jpg", action=Action.DELETE),
            ],
        )

        ReviewUI(console).show_commit_result(result)

        text = console.export_text()
        assert "Commit Summary" in text
        assert "Moved" in text
        assert "Deleted" in text
