"""
Report file persistence.

Writes a document's content byte-for-byte to {type}-report-{date}.md.
"""

from pathlib import Path
from typing import Union

from gitreport.models.entities import ReportDocument


def write_report(
    document: ReportDocument,
    directory: Union[str, Path, None] = None,
    path: Union[str, Path, None] = None,
) -> Path:
    """
    Save a report to disk.

    Args:
        document: Rendered report
        directory: Directory for the conventionally named file (default: cwd)
        path: Explicit output file, overrides directory

    Returns:
        Path the report was written to
    """
    if path is not None:
        target = Path(path).expanduser()
    else:
        target = Path(directory or ".").expanduser() / document.filename

    target.parent.mkdir(parents=True, exist_ok=True)
    # newline='' keeps "\n" on every platform
    with open(target, 'w', encoding='utf-8', newline='') as f:
        f.write(document.content)

    return target

