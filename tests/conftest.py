"""Global pytest configuration and fixtures."""

import os
import stat
import sys
import textwrap
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from mongo_backup.api.config import Settings

FAKE_BACKUP_SCRIPT = """\
#!/bin/sh
# Stand-in for mongodb-backup.sh: -d|-r -n <database>
mode="$1"
db="$3"
if [ "$mode" = "-d" ]; then
    mkdir -p "data/$db/$db"
    printf 'users-dump' > "data/$db/$db/users.bson"
    printf '{"collection": "users"}' > "data/$db/$db/users.metadata.json"
elif [ "$mode" = "-r" ]; then
    ls "data/$db" > "restored_$db.txt"
fi
"""


def write_script(path: Path, body: str) -> Path:
    """Write an executable shell script."""
    path.write_text(textwrap.dedent(body))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def workdir(tmp_path):
    """Working directory laid out like a server checkout."""
    for name in ("data", "downloads", "uploads"):
        (tmp_path / name).mkdir()
    return tmp_path


@pytest.fixture
def backup_script(workdir):
    return write_script(workdir / "mongodb-backup.sh", FAKE_BACKUP_SCRIPT)


@pytest.fixture
def failing_script(workdir):
    return write_script(
        workdir / "failing-backup.sh",
        """\
        #!/bin/sh
        echo "mongodump: connection refused" >&2
        exit 3
        """,
    )


@pytest.fixture
def make_settings(workdir, backup_script):
    """Build Settings rooted at the temporary working directory."""

    def _make(**overrides) -> Settings:
        values = dict(
            data_dir=str(workdir / "data"),
            downloads_dir=str(workdir / "downloads"),
            uploads_dir=str(workdir / "uploads"),
            backup_script=str(backup_script),
            script_cwd=str(workdir),
            download_cleanup_delay=60.0,
        )
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def leftover_uploads(workdir):
    """Files remaining in the uploads area."""
    return lambda: sorted(os.listdir(workdir / "uploads"))
