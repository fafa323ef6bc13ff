"""
End-to-end demo script to showcase the tagging workflow.

Creates a folder of sample images, binds a few shortcuts, tags images the
way key presses in the viewer would, and commits the batch.
"""

from pathlib import Path
from tempfile import TemporaryDirectory

from PIL import Image

from image_tagger.core.session import ARROW_RIGHT, ViewerSession
from image_tagger.ui.review import ReviewUI
from image_tagger.utils.config import Config


def create_demo_images(demo_dir: Path) -> None:
    """
    Create sample images for demonstration.

    Args:
        demo_dir: Directory to create images in
    """
    print(f"Creating demo images in: {demo_dir}")

    samples = [
        ("beach_sunset.jpg", (1920, 1080), (255, 140, 0)),
        ("dog_park.jpg", (1280, 720), (70, 130, 180)),
        ("dog_sleeping.png", (800, 600), (139, 69, 19)),
        ("blurry_shot.jpg", (640, 480), (128, 128, 128)),
        ("receipt_scan.bmp", (600, 900), (255, 255, 255)),
    ]
    for name, size, color in samples:
        Image.new("RGB", size, color=color).save(demo_dir / name)

    (demo_dir / "notes.txt").write_text("not an image", encoding="utf-8")

    print(f"✓ Created {len(samples)} images and 1 non-image file")


def main():
    """Run the demo."""
    print("=" * 70)
    print("IMAGE TAGGER - END-TO-END DEMO")
    print("=" * 70)
    print()

    with TemporaryDirectory() as temp_dir:
        demo_dir = Path(temp_dir) / "inbox"
        demo_dir.mkdir()

        # Step 1: Create demo images
        print("STEP 1: Creating demo images")
        print("-" * 70)
        create_demo_images(demo_dir)
        print()

        # Step 2: Configure shortcuts (kept next to the demo folder)
        print("STEP 2: Binding shortcuts")
        print("-" * 70)
        config = Config(Path(temp_dir) / "config.json")
        session = ViewerSession(config)
        session.registry.add("d", "dogs", "move")
        session.registry.add("f", "favorites", "copy")
        session.registry.add("x", "trash", "delete")
        ui = ReviewUI()
        ui.console.print(ui.render_shortcuts(session.registry))
        print()

        # Step 3: Open the folder
        print("STEP 3: Opening the folder")
        print("-" * 70)
        session.open_folder(demo_dir)
        ui.console.print(ui.render_catalog(session.entries))
        print()

        # Step 4: Tag images as key presses would
        print("STEP 4: Tagging images")
        print("-" * 70)
        plan = {
            "beach_sunset.jpg": "f",
            "dog_park.jpg": "d",
            "dog_sleeping.png": "d",
            "blurry_shot.jpg": "x",
        }
        for _ in range(len(session.entries)):
            entry = session.current()
            key = plan.get(entry.name)
            if key:
                shortcut = session.handle_key(key)
                print(f"  {entry.name:<20} → {shortcut.folder} ({shortcut.action.value})")
            session.handle_key(ARROW_RIGHT)
        print()
        ui.show_tag_summary(session)
        print()

        # Step 5: Commit
        print("STEP 5: Committing")
        print("-" * 70)
        result = session.commit()
        ui.show_commit_result(result)
        print()
        print("Remaining in the folder:")
        for entry in session.entries:
            print(f"  - {entry.name}")
        for sub in sorted(p for p in demo_dir.iterdir() if p.is_dir()):
            print(f"  {sub.name}/: {', '.join(sorted(f.name for f in sub.iterdir()))}")
        session.close()
        print()
        print("=" * 70)


if __name__ == "__main__":
    main()
