# File: site_purge/writer.py
"""site_purge.writer: вывод очищенной таблицы стилей на диск."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path
from typing import Union

from site_purge.errors import OutputWriteError

STYLESHEET_SUFFIX = ".css"
MINIFIED_MARKER = ".min"


def derive_output_path(path: Union[str, Path]) -> Path:
    """style.css -> style.min.css; остальная часть пути не меняется."""
    source = Path(path)
    if source.suffix.lower() == STYLESHEET_SUFFIX:
        return source.with_name(f"{source.stem}{MINIFIED_MARKER}{source.suffix}")
    return source.with_name(f"{source.name}{MINIFIED_MARKER}{STYLESHEET_SUFFIX}")


def _output_mode(target: Path) -> int:
    """Mode of the file being replaced, or 0666 minus the umask for a new one."""
    try:
        return stat.S_IMODE(os.stat(target).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_stylesheet(path: Union[str, Path], content: str) -> Path:
    """
    Записывает файл целиком: сначала во временный файл рядом, затем os.replace,
    чтобы читатель никогда не увидел частично записанный CSS.
    """
    target = Path(path)
    tmp_name = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(content)
        # NamedTemporaryFile is created 0600
        os.chmod(tmp_name, _output_mode(target))
        os.replace(tmp_name, target)
    except OSError as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise OutputWriteError(f"cannot write {target}: {exc}") from exc
    return target


__all__ = ["derive_output_path", "write_stylesheet"]
