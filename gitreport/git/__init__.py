"""Git package - read-only access to repository history."""

from .reader import RepositoryReader, parse_log

__all__ = ["RepositoryReader", "parse_log"]
