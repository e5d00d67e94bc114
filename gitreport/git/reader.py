"""
Repository reader for gitreport.

Streams `git log` output from a subprocess pipe and parses it record by
record, so very long histories are never loaded into memory at once.
Only read-only git commands are ever run.
"""

import logging
import os
import re
import subprocess
import tempfile
import threading
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from gitreport.errors import OperationTimedOut, RepositoryNotFound, RepositoryUnreadable
from gitreport.models.entities import Commit, RepoInfo
from gitreport.utils.timestamps import parse_epoch

logger = logging.getLogger(__name__)

# Control characters never found in names, emails or hashes
RECORD_START = "\x1e"
FIELD_SEP = "\x1f"
HEADER_END = "\x1d"

# hash, mailmapped author name/email, committer time, author time, raw body
LOG_FORMAT = "%x1e%H%x1f%aN%x1f%aE%x1f%ct%x1f%at%x1f%B%x1d"

_NUMSTAT_RE = re.compile(r'^(\d+|-)\t(\d+|-)\t(.+)$')

_NOT_A_REPO_MARKERS = ("not a git repository", "cannot change to")


class _PendingCommit:
    """Commit being assembled while its numstat lines stream in."""

    def __init__(self, hash_, author_name, author_email, timestamp, authored_at, message):
        self.hash = hash_
        self.author_name = author_name
        self.author_email = author_email
        self.timestamp = timestamp
        self.authored_at = authored_at
        self.message = message
        self.files: List[str] = []
        self.insertions: Optional[int] = None
        self.deletions: Optional[int] = None

    def add_file(self, added: str, deleted: str, path: str) -> None:
        self.files.append(path)
        # Binary files report "-" for both counts
        if added != '-':
            self.insertions = (self.insertions or 0) + int(added)
        if deleted != '-':
            self.deletions = (self.deletions or 0) + int(deleted)

    def build(self) -> Commit:
        return Commit(
            hash=self.hash,
            author_name=self.author_name,
            author_email=self.author_email,
            timestamp=self.timestamp,
            message=self.message,
            files_changed=tuple(self.files),
            insertions=self.insertions,
            deletions=self.deletions,
            authored_at=self.authored_at,
        )


def _parse_header(text: str) -> Optional[_PendingCommit]:
    """Parse one LOG_FORMAT header (without the leading RECORD_START)."""
    text = text.split(HEADER_END, 1)[0]
    parts = text.split(FIELD_SEP, 5)
    if len(parts) != 6:
        return None

    hash_, name, email, committed, authored, body = parts
    timestamp = parse_epoch(committed)
    if not hash_.strip() or timestamp is None:
        return None

    return _PendingCommit(
        hash_.strip(),
        name.strip(),
        email.strip(),
        timestamp,
        parse_epoch(authored),
        body.strip(),
    )


def parse_log(lines: Iterable[str]) -> Iterator[Commit]:
    """
    Parse `git log --numstat --pretty=format:LOG_FORMAT` output lazily.

    Yields one Commit per record as soon as the next record starts (or the
    input ends). Skips malformed records gracefully.

    Args:
        lines: Iterable of text lines, e.g. a subprocess stdout pipe

    Yields:
        Commit objects in the order git printed them
    """
    header: Optional[List[str]] = None
    pending: Optional[_PendingCommit] = None
    malformed_count = 0

    for line in lines:
        if line.startswith(RECORD_START):
            if pending is not None:
                yield pending.build()
            pending = None
            header = [line[len(RECORD_START):]]
        elif header is not None:
            header.append(line)
        elif pending is not None:
            match = _NUMSTAT_RE.match(line.rstrip('\n'))
            if match:
                pending.add_file(*match.groups())
            continue
        else:
            continue

        if HEADER_END in line:
            pending = _parse_header(''.join(header))
            header = None
            if pending is None:
                malformed_count += 1

    if header is not None:
        # Output ended inside a header
        malformed_count += 1
    if pending is not None:
        yield pending.build()

    if malformed_count > 0:
        logger.warning("Skipped %d malformed commit records", malformed_count)


def _expire(proc: subprocess.Popen, timed_out: threading.Event) -> None:
    timed_out.set()
    try:
        proc.kill()
    except OSError:
        pass


class RepositoryReader:
    """
    Read-only access to one repository's history.

    Each call to read() starts a fresh `git log`; the returned iterator is
    single-use and finite.
    """

    def __init__(
        self,
        repo_path: str,
        git_binary: str = "git",
        timeout: Optional[float] = 60.0,
        author: Optional[str] = None,
    ):
        self.repo_path = str(repo_path)
        self.git_binary = git_binary
        self.timeout = timeout
        self.author = author

    # ------------------------------------------------------------------
    # git process helpers
    # ------------------------------------------------------------------

    def _env(self) -> dict:
        env = dict(os.environ)
        env.update({
            "GIT_OPTIONAL_LOCKS": "0",
            "GIT_TERMINAL_PROMPT": "0",
            "LC_ALL": "C",
        })
        return env

    def _command(self, args: List[str]) -> List[str]:
        return [self.git_binary, "-c", "core.quotepath=false", "-c", "color.ui=false"] + args

    def _run_git(self, args: List[str]) -> subprocess.CompletedProcess:
        """Run a short git command, mapping process failures to report errors."""
        try:
            return subprocess.run(
                self._command(args),
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                env=self._env(),
            )
        except subprocess.TimeoutExpired:
            raise OperationTimedOut(
                f"Timed out after {self.timeout:g}s reading repository: {self.repo_path}"
            )
        except FileNotFoundError:
            raise RepositoryUnreadable(
                f"git executable '{self.git_binary}' not found", path=self.repo_path
            )
        except PermissionError:
            raise RepositoryUnreadable(
                f"Permission denied reading repository: {self.repo_path}", path=self.repo_path
            )
        except OSError as exc:
            raise RepositoryUnreadable(
                f"Cannot read repository {self.repo_path}: {exc}", path=self.repo_path
            )

    def _try_git(self, args: List[str]) -> Optional[str]:
        """Run a git command, returning stripped stdout or None on any failure."""
        try:
            result = self._run_git(args)
        except (OperationTimedOut, RepositoryUnreadable):
            return None
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    # ------------------------------------------------------------------
    # validation
    # ------------------------------------------------------------------

    def check_repository(self) -> None:
        """
        Verify the path is a readable git repository.

        Raises:
            RepositoryNotFound: path missing, not a directory, or not a repository
            RepositoryUnreadable: permission problems or git failures
            OperationTimedOut: git did not answer within the deadline
        """
        path = Path(self.repo_path)
        if not path.exists():
            raise RepositoryNotFound(f"Repository path does not exist: {self.repo_path}", path=self.repo_path)
        if not path.is_dir():
            raise RepositoryNotFound(f"Repository path is not a directory: {self.repo_path}", path=self.repo_path)
        if not os.access(self.repo_path, os.R_OK | os.X_OK):
            raise RepositoryUnreadable(
                f"Permission denied reading repository: {self.repo_path}", path=self.repo_path
            )

        result = self._run_git(["rev-parse", "--git-dir"])
        if result.returncode != 0:
            stderr = result.stderr.strip()
            if any(marker in stderr.lower() for marker in _NOT_A_REPO_MARKERS):
                raise RepositoryNotFound(f"Path is not a git repository: {self.repo_path}", path=self.repo_path)
            raise RepositoryUnreadable(
                f"Cannot read repository {self.repo_path}: {stderr or 'git rev-parse failed'}",
                path=self.repo_path,
            )

    def has_commits(self) -> bool:
        result = self._run_git(["rev-parse", "--verify", "--quiet", "HEAD"])
        return result.returncode == 0

    # ------------------------------------------------------------------
    # history
    # ------------------------------------------------------------------

    def log_args(self) -> List[str]:
        args = [
            "log",
            "--date-order",
            "--no-renames",
            "--numstat",
            f"--pretty=format:{LOG_FORMAT}",
        ]
        if self.author:
            args += ["--regexp-ignore-case", f"--author={self.author}"]
        args += ["HEAD", "--"]
        return args

    def read(self) -> Iterator[Commit]:
        """
        Open the repository and return a lazy iterator of commits.

        Commits come newest first by committer time, except that git never
        shows a parent before its children: a child committed with a slow
        clock still precedes its newer parent. The repository is validated
        eagerly; history is read as the iterator is consumed.
        """
        self.check_repository()
        if not self.has_commits():
            logger.debug("Repository %s has no commits", self.repo_path)
            return iter(())
        return self._stream(self.log_args())

    def _stream(self, args: List[str]) -> Iterator[Commit]:
        timed_out = threading.Event()

        with tempfile.TemporaryFile(mode='w+', encoding='utf-8', errors='replace') as stderr_file:
            try:
                proc = subprocess.Popen(
                    self._command(args),
                    cwd=self.repo_path,
                    stdout=subprocess.PIPE,
                    stderr=stderr_file,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                    env=self._env(),
                )
            except OSError as exc:
                raise RepositoryUnreadable(
                    f"Cannot read repository {self.repo_path}: {exc}", path=self.repo_path
                )

            watchdog = None
            if self.timeout:
                watchdog = threading.Timer(self.timeout, _expire, args=(proc, timed_out))
                watchdog.daemon = True
                watchdog.start()

            try:
                for commit in parse_log(proc.stdout):
                    if timed_out.is_set():
                        break
                    yield commit
                returncode = proc.wait()
            finally:
                if watchdog is not None:
                    watchdog.cancel()
                if proc.poll() is None:
                    proc.kill()
                    proc.wait()
                proc.stdout.close()

            if timed_out.is_set():
                raise OperationTimedOut(
                    f"Timed out after {self.timeout:g}s reading repository: {self.repo_path}"
                )
            if returncode != 0:
                stderr_file.seek(0)
                stderr = stderr_file.read().strip()
                raise RepositoryUnreadable(
                    f"Failed reading history of {self.repo_path}: {stderr or f'git exited with {returncode}'}",
                    path=self.repo_path,
                )

    # ------------------------------------------------------------------
    # metadata
    # ------------------------------------------------------------------

    def repo_info(self) -> RepoInfo:
        """Get repository name, origin URL and current branch (best effort)."""
        url = self._try_git(["remote", "get-url", "origin"])
        name = None
        if url:
            name = re.split(r'[/:\\]', url.rstrip('/'))[-1]
            if name.endswith('.git'):
                name = name[:-4]
        else:
            toplevel = self._try_git(["rev-parse", "--show-toplevel"])
            if toplevel:
                name = Path(toplevel).name

        branch = self._try_git(["branch", "--show-current"])
        return RepoInfo(name=name or None, url=url, branch=branch)

    def current_user(self) -> Optional[str]:
        """Get the configured git user name, None if unset."""
        return self._try_git(["config", "--get", "user.name"])
