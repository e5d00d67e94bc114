"""Test fixtures for server tests.

Builds a small git repository with commits at known times and an app
wired to a deterministic configuration.
"""

import copy
import os
import shutil
import subprocess
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from gitreport.config.loader import DEFAULT_CONFIG
from gitreport.server.app import create_app

GIT = shutil.which("git")


def _git(repo, *args, env=None):
    full_env = dict(os.environ)
    full_env["GIT_CONFIG_NOSYSTEM"] = "1"
    full_env.update(env or {})
    subprocess.run([GIT, *args], cwd=str(repo), env=full_env, capture_output=True, check=True)


def _commit(repo, message, when, name, email, filename):
    (repo / filename).write_text(message + "\n", encoding="utf-8")
    _git(repo, "add", "--", filename)
    stamp = f"{int(when.timestamp())} +0000"
    _git(repo, "commit", "-q", "-m", message, env={
        "GIT_AUTHOR_NAME": name, "GIT_AUTHOR_EMAIL": email, "GIT_AUTHOR_DATE": stamp,
        "GIT_COMMITTER_NAME": name, "GIT_COMMITTER_EMAIL": email, "GIT_COMMITTER_DATE": stamp,
    })


@pytest.fixture
def test_repo(tmp_path):
    """Create a repository with activity on 2026-01-13 and 2026-01-15.

    Creates:
    - 2 commits by Alice on 2026-01-15 (one feature, one fix)
    - 1 commit by Bob on 2026-01-15
    - 1 commit by Alice on 2026-01-13
    """
    if GIT is None:
        pytest.skip("git not installed")

    repo = tmp_path / "demo"
    repo.mkdir()
    _git(repo, "init", "-q")
    _git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(repo, "config", "commit.gpgsign", "false")

    def utc(*args):
        return datetime(*args, tzinfo=timezone.utc)

    _commit(repo, "chore: initial setup", utc(2026, 1, 13, 9), "Alice", "alice@example.com", "setup.cfg")
    _commit(repo, "feat: add exporter", utc(2026, 1, 15, 9), "Alice", "alice@example.com", "exporter.py")
    _commit(repo, "docs: describe exporter", utc(2026, 1, 15, 11), "Bob", "bob@example.com", "README.md")
    _commit(repo, "fix: exporter encoding", utc(2026, 1, 15, 16), "Alice", "alice@example.com", "exporter.py")
    return repo


@pytest.fixture
def test_config():
    """Deterministic configuration with the optimizer unconfigured."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    config["git_timeout_seconds"] = 30
    config["optimizer"]["api_key"] = None
    return config


@pytest_asyncio.fixture
async def client(test_config):
    """Create an async test client bound to the app."""
    app = create_app(config=test_config)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
