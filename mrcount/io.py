"""
Input and output helpers for the word count CLI.
"""

import os
import sys
import logging
import tempfile
from typing import Iterable, Iterator, Tuple

from mrcount.errors import InputReadError, OutputWriteError

logger = logging.getLogger(__name__)

STDIO = '-'


def _strip_terminator(line: bytes) -> bytes:
    if line.endswith(b'\r\n'):
        return line[:-2]
    if line.endswith(b'\n'):
        return line[:-1]
    return line


def read_lines(path: str) -> Iterator[bytes]:
    """
    Read input lines as raw bytes, without line terminators

    Decoding is left to the tokenizer so that bad encodings are reported
    against the partition and record that hold them.

    Args:
        path: Input file path, or '-' for stdin

    Raises:
        InputReadError: If the file cannot be opened or read
    """
    if path == STDIO:
        try:
            for line in sys.stdin.buffer:
                yield _strip_terminator(line)
        except OSError as e:
            raise InputReadError('<stdin>', str(e)) from e
        return

    if os.path.isdir(path):
        raise InputReadError(path, "is a directory")

    try:
        with open(path, 'rb') as f:
            for line in f:
                yield _strip_terminator(line)
    except OSError as e:
        raise InputReadError(path, e.strerror or str(e)) from e


def format_counts(counts: Iterable[Tuple[str, int]]) -> Iterator[str]:
    """Render (word, total) pairs as tab-separated lines"""
    for word, total in counts:
        yield f"{word}\t{total}\n"


def write_counts(counts: Iterable[Tuple[str, int]], path: str):
    """
    Write final counts as 'word<TAB>total' lines

    The file is written under a temporary name and renamed into place, so
    the destination never holds partial output.

    Args:
        counts: (word, total) tuples in output order
        path: Output file path, or '-' for stdout

    Raises:
        OutputWriteError: If the destination cannot be created or written
    """
    if path == STDIO:
        sys.stdout.writelines(format_counts(counts))
        sys.stdout.flush()
        return

    if os.path.isdir(path):
        raise OutputWriteError(path, "is a directory")

    output_dir = os.path.dirname(os.path.abspath(path))
    try:
        os.makedirs(output_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix='.mrcount-', dir=output_dir)
    except OSError as e:
        raise OutputWriteError(path, e.strerror or str(e)) from e

    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.writelines(format_counts(counts))
        os.replace(tmp_path, path)
    except OSError as e:
        os.unlink(tmp_path)
        raise OutputWriteError(path, e.strerror or str(e)) from e
    except BaseException:
        os.unlink(tmp_path)
        raise

    logger.info(f"Wrote output to {path}")
