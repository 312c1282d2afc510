"""Reading and writing binary-table FITS files."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import numpy as np

_BLOCK = 2880
_CARD = 80

_TYPES = {
    "L": "S1",
    "B": "u1",
    "I": ">i2",
    "J": ">i4",
    "K": ">i8",
    "E": ">f4",
    "D": ">f8",
    "C": ">c8",
    "M": ">c16",
    "A": "S1",
}
_TFORM = re.compile(r"^\s*(\d*)([A-Z])([A-Z]?)(?:\((\d+)\))?\s*$")

Column = Any


def _padded(size: int) -> int:
    return -(-size // _BLOCK) * _BLOCK


def _parse_value(text: str) -> Any:
    text = text.strip()
    if text.startswith("'"):
        chars: list[str] = []
        i = 1
        while i < len(text):
            ch = text[i]
            if ch == "'":
                if text[i + 1:i + 2] == "'":
                    chars.append("'")
                    i += 2
                    continue
                break
            chars.append(ch)
            i += 1
        return "".join(chars).rstrip()
    text = text.split("/", 1)[0].strip()
    if text == "T":
        return True
    if text == "F":
        return False
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text.replace("D", "E"))
    except ValueError:
        return text


def _read_header(data: bytes, pos: int) -> tuple[dict[str, Any], int]:
    header: dict[str, Any] = {}
    while True:
        block = data[pos:pos + _BLOCK]
        if len(block) < _BLOCK:
            raise ValueError("truncated FITS header")
        pos += _BLOCK
        for start in range(0, _BLOCK, _CARD):
            card = block[start:start + _CARD].decode("ascii", errors="replace")
            key = card[:8].strip()
            if key == "END":
                return header, pos
            if key and card[8:10] == "= ":
                header.setdefault(key, _parse_value(card[10:]))


def _data_size(header: Mapping[str, Any]) -> int:
    naxis = int(header.get("NAXIS", 0))
    if naxis == 0:
        return 0
    try:
        count = math.prod(int(header[f"NAXIS{i}"]) for i in range(1, naxis + 1))
    except KeyError as exc:
        raise ValueError(f"missing keyword {exc.args[0]}") from None
    bits = abs(int(header.get("BITPIX", 8)))
    return bits * int(header.get("GCOUNT", 1)) * (int(header.get("PCOUNT", 0)) + count) // 8


def _parse_tform(tform: Any) -> tuple[int, str, str]:
    match = _TFORM.match(str(tform)) if tform is not None else None
    if not match:
        raise ValueError(f"unsupported TFORM {tform!r}")
    repeat = int(match.group(1)) if match.group(1) else 1
    code, var = match.group(2), match.group(3)
    if code not in _TYPES and code not in "PQX":
        raise ValueError(f"unsupported column type {code!r}")
    if code in "PQ" and var not in _TYPES:
        raise ValueError(f"unsupported array element type {var!r}")
    return repeat, code, var


def _field_layout(repeat: int, code: str) -> tuple[int, Any]:
    if repeat == 0:
        return 0, None
    if code == "P":
        return 8, (">i4", (2,))
    if code == "Q":
        return 16, (">i8", (2,))
    if code == "A":
        return repeat, f"S{repeat}"
    if code == "X":
        nbytes = (repeat + 7) // 8
        return nbytes, ("u1", (nbytes,))
    base = _TYPES[code]
    size = np.dtype(base).itemsize
    return repeat * size, base if repeat == 1 else (base, (repeat,))


def _finish(values: np.ndarray, code: str, header: Mapping[str, Any], n: int) -> Any:
    if code == "A":
        if values.dtype.kind == "S" and values.dtype.itemsize == 1 and values.ndim == 1:
            return values.tobytes().decode("ascii", errors="replace").rstrip("\x00 ")
        return np.array([v.decode("ascii", errors="replace").rstrip() for v in values])
    if code == "L":
        return values == b"T"
    native = values.astype(values.dtype.newbyteorder("="))
    if code == "X":
        return native
    scale = header.get(f"TSCAL{n}")
    zero = header.get(f"TZERO{n}")
    if scale is not None or zero is not None:
        return native * float(1.0 if scale is None else scale) + float(0.0 if zero is None else zero)
    return native


def _decode_bintable(header: Mapping[str, Any], block: bytes) -> dict[str, Column]:
    row_len = int(header["NAXIS1"])
    nrows = int(header["NAXIS2"])
    nfields = int(header.get("TFIELDS", 0))
    heap = block[int(header.get("THEAP", row_len * nrows)):]

    names: list[str] = []
    formats: list[Any] = []
    offsets: list[int] = []
    specs: list[tuple[int, str, str, int]] = []
    offset = 0
    for n in range(1, nfields + 1):
        repeat, code, var = _parse_tform(header.get(f"TFORM{n}"))
        width, fmt = _field_layout(repeat, code)
        if width:
            names.append(f"c{n}")
            formats.append(fmt)
            offsets.append(offset)
        specs.append((n, code, var, width))
        offset += width
    if offset > row_len:
        raise ValueError("column widths exceed the table row length")
    if row_len * nrows > len(block):
        raise ValueError("truncated binary table")

    rows = None
    if names and nrows:
        dtype = np.dtype(
            {"names": names, "formats": formats, "offsets": offsets, "itemsize": row_len}
        )
        rows = np.frombuffer(block, dtype=dtype, count=nrows)

    table: dict[str, Column] = {}
    for n, code, var, width in specs:
        name = str(header.get(f"TTYPE{n}", f"col{n}")).strip()
        if width == 0:
            table[name] = np.zeros((nrows, 0))
            continue
        if rows is None:
            table[name] = [] if code in "PQ" else np.zeros(0)
            continue
        raw = rows[f"c{n}"]
        if code in "PQ":
            elem = np.dtype(_TYPES[var])
            arrays = []
            for count, start in raw.tolist():
                end = start + count * elem.itemsize
                if count < 0 or start < 0 or end > len(heap):
                    raise ValueError("variable-length array descriptor out of range")
                arrays.append(_finish(np.frombuffer(heap, elem, count, start), var, header, n))
            table[name] = arrays
        else:
            table[name] = _finish(raw, code, header, n)
    return table


def read_table(path: str | Path, hdu: int = 1) -> dict[str, Column]:
    """Columns of the binary table in extension ``hdu`` (1 = first extension).

    Scalar columns come back as 1-D arrays over the rows, vector columns as
    2-D arrays (rows x repeat) and variable-length columns as lists with one
    array per row.  TSCALn/TZEROn scaling is applied.
    """
    if hdu < 1:
        raise ValueError(f"{path}: HDU {hdu} is not a binary table")
    data = Path(path).read_bytes()
    pos = 0
    index = 0
    while True:
        if pos >= len(data):
            raise ValueError(f"{path}: HDU {hdu} not found")
        header, data_start = _read_header(data, pos)
        if index == 0 and header.get("SIMPLE") is not True:
            raise ValueError(f"{path}: not a FITS file")
        size = _data_size(header)
        if index == hdu:
            break
        pos = data_start + _padded(size)
        index += 1

    if str(header.get("XTENSION", "")).strip() != "BINTABLE":
        raise ValueError(f"{path}: HDU {hdu} is not a binary table")
    if data_start + size > len(data):
        raise ValueError(f"{path}: truncated data in HDU {hdu}")
    return _decode_bintable(header, data[data_start:data_start + size])


def _card(key: str, value: Any) -> str:
    if isinstance(value, bool):
        text = f"{'T' if value else 'F':>20}"
    elif isinstance(value, int):
        text = f"{value:>20d}"
    elif isinstance(value, float):
        text = f"{value!r:>20}".upper()
    else:
        text = "'" + str(value).replace("'", "''").ljust(8) + "'"
    card = f"{key:<8}= {text}"
    if len(card) > _CARD:
        raise ValueError(f"header value for {key} too long")
    return card.ljust(_CARD)


def _header_bytes(cards: list[tuple[str, Any]]) -> bytes:
    text = "".join(_card(k, v) for k, v in cards) + "END".ljust(_CARD)
    return text.ljust(_padded(len(text))).encode("ascii")


def _is_ragged(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and any(np.ndim(v) > 0 for v in value)


def write_table(path: str | Path, columns: Mapping[str, Any]) -> None:
    """Write ``columns`` as a double-precision binary table in extension 1.

    A 1-D sequence gives a scalar column, a 2-D array a fixed-length vector
    column and a list of sequences a variable-length column.  All columns
    must have the same number of rows.
    """
    if not columns:
        raise ValueError("write_table: no columns given")

    nrows: int | None = None
    fields: list[tuple[str, Any]] = []
    tforms: list[str] = []
    values: list[Any] = []
    heap_parts: list[np.ndarray] = []
    heap_offset = 0

    for i, (name, value) in enumerate(columns.items()):
        if _is_ragged(value):
            arrays = [np.asarray(v, dtype=float).reshape(-1) for v in value]
            rows = len(arrays)
            descriptors = np.zeros((rows, 2), dtype=np.int64)
            for row, arr in enumerate(arrays):
                descriptors[row] = (arr.size, heap_offset)
                heap_offset += arr.size * 8
                heap_parts.append(arr)
            longest = max((a.size for a in arrays), default=0)
            fields.append((f"c{i}", (">i4", (2,))))
            tforms.append(f"1PD({longest})")
            values.append(descriptors)
        else:
            arr = np.asarray(value, dtype=float)
            if arr.ndim == 1:
                fields.append((f"c{i}", ">f8"))
                tforms.append("D")
            elif arr.ndim == 2 and arr.shape[1] > 0:
                fields.append((f"c{i}", (">f8", (arr.shape[1],))))
                tforms.append(f"{arr.shape[1]}D")
            else:
                raise ValueError(f"write_table: column {name!r} must be 1-D or 2-D")
            rows = arr.shape[0]
            values.append(arr)
        if nrows is None:
            nrows = rows
        elif rows != nrows:
            raise ValueError(f"write_table: column {name!r} has {rows} rows, expected {nrows}")

    assert nrows is not None
    dtype = np.dtype({"names": [f for f, _ in fields], "formats": [t for _, t in fields]})
    table = np.zeros(nrows, dtype=dtype)
    for (field_name, _), column in zip(fields, values):
        table[field_name] = column
    heap = (
        np.concatenate(heap_parts).astype(">f8").tobytes() if heap_parts else b""
    )

    cards: list[tuple[str, Any]] = [
        ("XTENSION", "BINTABLE"),
        ("BITPIX", 8),
        ("NAXIS", 2),
        ("NAXIS1", dtype.itemsize),
        ("NAXIS2", nrows),
        ("PCOUNT", len(heap)),
        ("GCOUNT", 1),
        ("TFIELDS", len(fields)),
    ]
    for n, (name, tform) in enumerate(zip(columns, tforms), start=1):
        cards.append((f"TTYPE{n}", str(name)))
        cards.append((f"TFORM{n}", tform))

    payload = table.tobytes() + heap
    payload += b"\x00" * (_padded(len(payload)) - len(payload))
    primary = _header_bytes([("SIMPLE", True), ("BITPIX", 8), ("NAXIS", 0), ("EXTEND", True)])
    Path(path).write_bytes(primary + _header_bytes(cards) + payload)