"""Root pytest configuration."""

from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load environment variables before tests run
_root = Path(__file__).parent
load_dotenv(_root / ".env")
load_dotenv(_root / ".env.local", override=True)


@pytest.fixture
def courses_dir(tmp_path):
    """A courses base directory with one structured and one flat course.

    Layout:
        python-basics/Module1/video.mp4
        python-basics/Module1/notes.pdf
        python-basics/Module2/            (empty)
        loose-notes/readme.md
        loose-notes/slides.PPTX
    """
    base = tmp_path / "courses"
    module1 = base / "python-basics" / "Module1"
    module1.mkdir(parents=True)
    (module1 / "video.mp4").write_bytes(b"0" * 64)
    (module1 / "notes.pdf").write_bytes(b"%PDF")
    (base / "python-basics" / "Module2").mkdir()

    flat = base / "loose-notes"
    flat.mkdir()
    (flat / "readme.md").write_text("# notes")
    (flat / "slides.PPTX").write_bytes(b"pptx")

    return base
