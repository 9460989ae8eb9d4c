import os
import pathlib
import sys
import tempfile

import pytest
import pytest_asyncio
from PIL import Image

PROJECT_ROOT = pathlib.Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# settings are read at import time, so the test database must be chosen first
_DB_DIR = tempfile.mkdtemp(prefix="certissuer-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR}/test.db"

from certissuer.config import settings  # noqa: E402
from certissuer.database import connect_db, create_tables, database, disconnect_db, metadata  # noqa: E402
from certissuer.services.template_service import TemplateService  # noqa: E402


@pytest.fixture(autouse=True)
def artifact_dirs(tmp_path, monkeypatch):
    uploads = tmp_path / "uploads"
    generated = tmp_path / "generated"
    uploads.mkdir()
    monkeypatch.setattr(settings, "UPLOADS_DIR", str(uploads))
    monkeypatch.setattr(settings, "GENERATED_DIR", str(generated))
    return {"uploads": uploads, "generated": generated}


@pytest.fixture
def make_image(artifact_dirs):
    """Write a template image into the uploads dir and return its reference"""

    def _make(name="template.png", size=(1000, 1000), fmt="PNG", color="white"):
        image = Image.new("RGB", size, color)
        image.save(artifact_dirs["uploads"] / name, format=fmt)
        return f"/uploads/{name}"

    return _make


@pytest.fixture(scope="session")
def tables():
    create_tables()
    yield


@pytest_asyncio.fixture
async def db(tables):
    await connect_db()
    yield database
    for table in reversed(metadata.sorted_tables):
        await database.execute(f"DELETE FROM {table.name}")
    await disconnect_db()
    TemplateService._in_use.clear()
    TemplateService._deleting.clear()
