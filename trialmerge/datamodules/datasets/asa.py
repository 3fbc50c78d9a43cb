"""Reader for single elements of line-oriented ASA text files.

ASA files (.elc, .vol, .msm, ...) store named elements, one per line:

    NumberPositions=	3
    Positions
    -6.7 65.9 -1.3
    ...
    Labels
    Fp1 Fpz Fp2

read_asa("cap.elc", "NumberPositions=", "%d") -> array([[3]])
"""

from __future__ import annotations

import os
import re
from typing import IO, List, Optional, Tuple, Union

import numpy as np

_FORMATS = ("%d", "%f", "%s")
_INT_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?(?:inf|nan)", re.IGNORECASE)


def _strtok(s: str, delims: str) -> Tuple[str, str]:
    """First token of s after skipping leading delimiters, and the remainder."""
    i = 0
    while i < len(s) and s[i] in delims:
        i += 1
    j = i
    while j < len(s) and s[j] not in delims:
        j += 1
    return s[i:j], s[j:]


def _detoken(s: str, token: str) -> str:
    """Keep the field following the first separator, if there is one."""
    if not token:
        return s
    _, rem = _strtok(s, token)
    if not rem:
        return s
    out, _ = _strtok(rem, token)
    return out


def _scan_numbers(s: str, fmt: str) -> List[float]:
    """Read leading whitespace-separated numbers, stopping at the first non-number."""
    pat = _INT_RE if fmt == "%d" else _FLOAT_RE
    out: List[float] = []
    for tok in s.split():
        m = pat.fullmatch(tok)
        if m is None:
            m = pat.match(tok)
            if m is not None:
                out.append(int(m.group()) if fmt == "%d" else float(m.group()))
            break
        out.append(int(tok) if fmt == "%d" else float(tok))
    return out


def _readline(fh: IO[str]) -> Optional[str]:
    line = fh.readline()
    if line == "":
        return None
    return line.rstrip("\r\n")


def _read(fh: IO[str], element: str, fmt: str, number: float, token: str):
    elem = element.strip().lower()

    data = None
    while data is None:
        line = _readline(fh)
        if line is None:
            return None
        line = line.strip()
        if line.lower().startswith(elem):
            data = line[len(elem):]

    while not data.strip():
        line = _readline(fh)
        if line is None:
            return None
        data = line.strip()

    if fmt == "%s":
        first = _detoken(data.strip(), token).strip()
        if number == 1:
            return first
        val = [first]
        while len(val) < number:
            line = _readline(fh)
            if line is None or not line.split():
                break
            val.append(_detoken(line.strip(), token).strip())
        return val

    row = _scan_numbers(_detoken(data, token), fmt)
    if not row:
        return None
    rows = [row]
    while len(rows) < number:
        line = _readline(fh)
        if line is None:
            break
        row = _scan_numbers(_detoken(line, token), fmt)
        if not row:
            break
        rows.append(row)
    dtype = np.int64 if fmt == "%d" else np.float64
    return np.array(rows, dtype=dtype)


def read_asa(
    source: Union[str, os.PathLike, IO[str]],
    element: str,
    fmt: str,
    number: Optional[int] = None,
    token: str = "",
):
    """Read one element from an ASA file.

    source  : path or open text handle
    element : name the line starts with (case-insensitive), e.g. "NumberPositions="
    fmt     : "%d" (integers), "%f" (floats) or "%s" (strings)
    number  : how many lines of data to read. Default 1 for strings, all for numbers.
    token   : separator; if given, only the field after it is kept on each line

    Returns a str (fmt "%s", number 1), a list of str, or a 2-D array with one row
    per line. Returns None if the input ends before the element or its value is
    found; if it ends later, whatever was read so far is returned.
    """
    if fmt not in _FORMATS:
        raise ValueError(f"Unknown format '{fmt}'. Valid: {list(_FORMATS)}")
    if number is None:
        number = 1 if fmt == "%s" else float("inf")

    if hasattr(source, "readline"):
        return _read(source, element, fmt, number, token)
    if not os.path.exists(source):
        raise FileNotFoundError(f"Could not open file {source}")
    with open(source, "r") as fh:
        return _read(fh, element, fmt, number, token)
