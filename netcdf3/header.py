"""Parsing of the NetCDF-3 file header into dimensions, attributes and variables."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, field
from enum import Enum

from netcdf3.data_vector import DataType, DataVector
from netcdf3.errors import (
    InvalidDataSet,
    InvalidDataSetKind,
    ParseHeaderError,
    ParseHeaderErrorKind,
    ReadError,
    ReadErrorKind,
)
from netcdf3.layout import (
    ABSENT_TAG,
    ATTRIBUTE_TAG,
    DIMENSION_TAG,
    VARIABLE_TAG,
    compute_padding_size,
)

MAGIC_WORD = b"CDF"

_I32_MAX = 2**31 - 1
_INDETERMINATE_NUM_RECORDS = 0xFFFFFFFF

_STRUCT_CODES = {
    DataType.I8: "b",
    DataType.U8: "B",
    DataType.I16: "h",
    DataType.I32: "i",
    DataType.F32: "f",
    DataType.F64: "d",
}


class Version(Enum):
    """The NetCDF-3 format variants, valued by their version byte."""

    CLASSIC = 1
    OFFSET_64BIT = 2


@dataclass(eq=False)
class ParsedDimension:
    """A dimension declared in the header.

    The unlimited dimension's ``size`` is the number of records.
    Dimensions are shared between the variables using them, so equality
    is identity.
    """

    name: str
    size: int
    unlimited: bool = False

    def is_unlimited(self) -> bool:
        """Return whether this is the record (unlimited-size) dimension."""
        return self.unlimited


@dataclass
class ParsedVariable:
    """A variable declared in the header, with where its data begins."""

    name: str
    dims: list[ParsedDimension]
    data_type: DataType
    begin_offset: int
    attrs: dict[str, DataVector] = field(default_factory=dict)
    vsize: int | None = None

    def is_record_var(self) -> bool:
        """Return whether the variable spans the unlimited dimension."""
        return bool(self.dims) and self.dims[0].is_unlimited()

    def chunk_len(self) -> int:
        """Return the number of elements stored per record (or in total if fixed)."""
        fixed_dims = self.dims[1:] if self.is_record_var() else self.dims
        return math.prod(dim.size for dim in fixed_dims)

    def chunk_size(self) -> int:
        """Return the padded number of bytes of one chunk."""
        num_bytes = self.chunk_len() * self.data_type.size_of()
        return num_bytes + compute_padding_size(num_bytes)

    def length(self) -> int:
        """Return the total number of elements of the variable."""
        if self.is_record_var():
            return self.chunk_len() * self.dims[0].size
        return self.chunk_len()


@dataclass
class Header:
    """The parsed content of a NetCDF-3 header."""

    version: Version
    dims: list[ParsedDimension] = field(default_factory=list)
    global_attrs: dict[str, DataVector] = field(default_factory=dict)
    variables: list[ParsedVariable] = field(default_factory=list)

    def find_var(self, var_name: str) -> ParsedVariable | None:
        """Return the variable with this name, or ``None``."""
        return next((var for var in self.variables if var.name == var_name), None)

    def var_names(self) -> list[str]:
        """Return the variable names in header order."""
        return [var.name for var in self.variables]

    def unlimited_dim(self) -> ParsedDimension | None:
        """Return the unlimited dimension, or ``None`` if there is none."""
        return next((dim for dim in self.dims if dim.is_unlimited()), None)

    def num_records(self) -> int | None:
        """Return the number of records, or ``None`` without an unlimited dimension."""
        dim = self.unlimited_dim()
        return None if dim is None else dim.size

    def record_size(self) -> int | None:
        """Return the number of bytes of one record, or ``None`` without records."""
        if self.unlimited_dim() is None:
            return None
        record_vars = [var for var in self.variables if var.is_record_var()]
        if len(record_vars) == 1:
            # a lone record variable is stored without padding between records
            var = record_vars[0]
            return var.chunk_len() * var.data_type.size_of()
        return sum(var.chunk_size() for var in record_vars)

    def global_attr(self, attr_name: str) -> DataVector | None:
        """Return the global attribute with this name, or ``None``."""
        return self.global_attrs.get(attr_name)


class _Cursor:
    """Reads header fields from a byte buffer that may be truncated."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self.pos = 0

    def peek(self, n: int) -> bytes:
        return self._data[self.pos:self.pos + n]

    def take(self, n: int, kind: ParseHeaderErrorKind) -> bytes:
        available = len(self._data) - self.pos
        if available < n:
            raise ParseHeaderError(kind, incomplete=True, needed=n - available)
        chunk = self._data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def error(
        self, kind: ParseHeaderErrorKind, start: int, end: int | None = None
    ) -> ParseHeaderError:
        return ParseHeaderError(kind, self._data[start:end])


def _match_tag(
    cursor: _Cursor, candidates: tuple[bytes, ...], kind: ParseHeaderErrorKind
) -> bytes:
    start = cursor.pos
    for candidate in candidates:
        chunk = cursor.peek(len(candidate))
        if chunk == candidate:
            cursor.pos += len(candidate)
            return candidate
        if len(chunk) < len(candidate) and candidate.startswith(chunk):
            raise ParseHeaderError(
                kind, incomplete=True, needed=len(candidate) - len(chunk)
            )
    raise cursor.error(kind, start)


def _parse_version(cursor: _Cursor) -> Version:
    start = cursor.pos
    raw = cursor.take(1, ParseHeaderErrorKind.VERSION_NUMBER)
    try:
        return Version(raw[0])
    except ValueError:
        raise cursor.error(ParseHeaderErrorKind.VERSION_NUMBER, start) from None


def _parse_non_neg_i32(cursor: _Cursor) -> int:
    start = cursor.pos
    (value,) = struct.unpack(">i", cursor.take(4, ParseHeaderErrorKind.NON_NEGATIVE_I32))
    if value < 0:
        raise cursor.error(ParseHeaderErrorKind.NON_NEGATIVE_I32, start)
    return value


def _parse_optional_count(cursor: _Cursor) -> int | None:
    start = cursor.pos
    (value,) = struct.unpack(">I", cursor.take(4, ParseHeaderErrorKind.NON_NEGATIVE_I32))
    if value == _INDETERMINATE_NUM_RECORDS:
        return None
    if value > _I32_MAX:
        raise cursor.error(ParseHeaderErrorKind.NON_NEGATIVE_I32, start)
    return value


def _parse_zero_padding(cursor: _Cursor, num_bytes: int) -> None:
    start = cursor.pos
    padding = cursor.take(compute_padding_size(num_bytes), ParseHeaderErrorKind.ZERO_PADDING)
    if any(padding):
        raise cursor.error(ParseHeaderErrorKind.ZERO_PADDING, start)


def _parse_name(cursor: _Cursor) -> str:
    num_bytes = _parse_non_neg_i32(cursor)
    start = cursor.pos
    raw = cursor.take(num_bytes, ParseHeaderErrorKind.UTF8)
    try:
        name = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise cursor.error(ParseHeaderErrorKind.UTF8, start) from None
    _parse_zero_padding(cursor, num_bytes)
    return name


def _parse_data_type(cursor: _Cursor) -> DataType:
    start = cursor.pos
    code = _parse_non_neg_i32(cursor)
    try:
        return DataType(code)
    except ValueError:
        raise cursor.error(ParseHeaderErrorKind.DATA_TYPE, start, start + 4) from None


def _parse_values(cursor: _Cursor, count: int, data_type: DataType) -> DataVector:
    num_bytes = count * data_type.size_of()
    raw = cursor.take(num_bytes, ParseHeaderErrorKind.DATA_ELEMENTS)
    values = struct.unpack(f">{count}{_STRUCT_CODES[data_type]}", raw)
    _parse_zero_padding(cursor, num_bytes)
    return DataVector(data_type, values)


def _parse_attrs(cursor: _Cursor) -> list[tuple[str, DataVector]]:
    tag = _match_tag(cursor, (ABSENT_TAG, ATTRIBUTE_TAG), ParseHeaderErrorKind.ATTR_TAG)
    if tag == ABSENT_TAG:
        return []
    attrs = []
    for _ in range(_parse_non_neg_i32(cursor)):
        name = _parse_name(cursor)
        data_type = _parse_data_type(cursor)
        count = _parse_non_neg_i32(cursor)
        attrs.append((name, _parse_values(cursor, count, data_type)))
    return attrs


def _parse_dims(cursor: _Cursor) -> list[tuple[str, int]]:
    tag = _match_tag(cursor, (ABSENT_TAG, DIMENSION_TAG), ParseHeaderErrorKind.DIM_TAG)
    if tag == ABSENT_TAG:
        return []
    dims = []
    for _ in range(_parse_non_neg_i32(cursor)):
        name = _parse_name(cursor)
        dims.append((name, _parse_non_neg_i32(cursor)))
    return dims


def _parse_offset(cursor: _Cursor, version: Version) -> int:
    if version is Version.CLASSIC:
        (offset,) = struct.unpack(">i", cursor.take(4, ParseHeaderErrorKind.OFFSET))
    else:
        (offset,) = struct.unpack(">q", cursor.take(8, ParseHeaderErrorKind.OFFSET))
    return offset


@dataclass
class _RawVariable:
    name: str
    dim_ids: list[int]
    attrs: list[tuple[str, DataVector]]
    data_type: DataType
    vsize: int | None
    begin_offset: int


def _parse_vars(cursor: _Cursor, version: Version) -> list[_RawVariable]:
    tag = _match_tag(cursor, (ABSENT_TAG, VARIABLE_TAG), ParseHeaderErrorKind.VAR_TAG)
    if tag == ABSENT_TAG:
        return []
    variables = []
    for _ in range(_parse_non_neg_i32(cursor)):
        name = _parse_name(cursor)
        dim_ids = [_parse_non_neg_i32(cursor) for _ in range(_parse_non_neg_i32(cursor))]
        attrs = _parse_attrs(cursor)
        data_type = _parse_data_type(cursor)
        vsize = _parse_optional_count(cursor)
        begin_offset = _parse_offset(cursor, version)
        variables.append(_RawVariable(name, dim_ids, attrs, data_type, vsize, begin_offset))
    return variables


def _build_header(
    version: Version,
    num_records: int,
    raw_dims: list[tuple[str, int]],
    raw_attrs: list[tuple[str, DataVector]],
    raw_vars: list[_RawVariable],
) -> Header:
    header = Header(version)
    for name, size in raw_dims:
        if any(dim.name == name for dim in header.dims):
            raise InvalidDataSet(InvalidDataSetKind.DIMENSION_ALREADY_EXISTS, dim_name=name)
        if size == 0:
            existing = header.unlimited_dim()
            if existing is not None:
                raise InvalidDataSet(
                    InvalidDataSetKind.UNLIMITED_DIMENSION_ALREADY_EXISTS,
                    dim_name=existing.name,
                )
            header.dims.append(ParsedDimension(name, num_records, unlimited=True))
        else:
            header.dims.append(ParsedDimension(name, size))

    for name, values in raw_attrs:
        if name in header.global_attrs:
            raise InvalidDataSet(InvalidDataSetKind.GLOBAL_ATTRIBUTE_ALREADY_EXISTS, attr_name=name)
        header.global_attrs[name] = values

    for raw in raw_vars:
        not_found = [dim_id for dim_id in raw.dim_ids if dim_id >= len(header.dims)]
        if not_found:
            raise InvalidDataSet(
                InvalidDataSetKind.DIMENSION_IDS_NOT_FOUND,
                defined=list(range(len(header.dims))),
                searched=list(raw.dim_ids),
                not_found=not_found,
            )
        if header.find_var(raw.name) is not None:
            raise InvalidDataSet(InvalidDataSetKind.VARIABLE_ALREADY_EXISTS, var_name=raw.name)
        dims = [header.dims[dim_id] for dim_id in raw.dim_ids]
        dim_names = [dim.name for dim in dims]
        repeated = [name for i, name in enumerate(dim_names) if name in dim_names[:i]]
        if repeated:
            raise InvalidDataSet(
                InvalidDataSetKind.DIMENSIONS_USED_MULTIPLE_TIMES,
                var_name=raw.name,
                get_dim_names=repeated,
            )
        unlimited_positions = [i for i, dim in enumerate(dims) if dim.is_unlimited()]
        if unlimited_positions and unlimited_positions[0] != 0:
            raise InvalidDataSet(
                InvalidDataSetKind.UNLIMITED_DIMENSION_MUST_BE_DEFINED_FIRST,
                var_name=raw.name,
                unlim_dim_name=dims[unlimited_positions[0]].name,
                get_dim_names=dim_names,
            )
        var = ParsedVariable(raw.name, dims, raw.data_type, raw.begin_offset, vsize=raw.vsize)
        for attr_name, values in raw.attrs:
            if attr_name in var.attrs:
                raise InvalidDataSet(
                    InvalidDataSetKind.VARIABLE_ATTRIBUTE_ALREADY_EXISTS,
                    var_name=raw.name,
                    attr_name=attr_name,
                )
            var.attrs[attr_name] = values
        header.variables.append(var)
    return header


def _compute_num_records(header: Header, total_file_size: int) -> None:
    unlimited = header.unlimited_dim()
    if unlimited is None:
        return
    record_vars = [var for var in header.variables if var.is_record_var()]
    if not record_vars:
        unlimited.size = 0
        return
    first_begin_offset = min(var.begin_offset for var in record_vars)
    all_records_size = total_file_size - first_begin_offset
    record_size = header.record_size()
    if all_records_size < 0 or not record_size:
        raise ReadError(ReadErrorKind.UNEXPECTED)
    num_records, remainder = divmod(all_records_size, record_size)
    if remainder:
        raise ReadError(ReadErrorKind.COMPUTATION_NUMBER_OF_RECORDS)
    unlimited.size = num_records


def parse_header(data: bytes, total_file_size: int) -> Header:
    """Parse the header at the start of ``data``.

    ``total_file_size`` is the size of the whole file; it is used to count
    the records when the header leaves their number indeterminate.
    Raises :class:`ReadError`; a truncated ``data`` gives one whose
    ``header_is_incomplete()`` is true.
    """
    cursor = _Cursor(data)
    try:
        _match_tag(cursor, (MAGIC_WORD,), ParseHeaderErrorKind.MAGIC_WORD)
        version = _parse_version(cursor)
        num_records = _parse_optional_count(cursor)
        raw_dims = _parse_dims(cursor)
        raw_attrs = _parse_attrs(cursor)
        raw_vars = _parse_vars(cursor, version)
    except ParseHeaderError as err:
        raise ReadError(ReadErrorKind.PARSE_HEADER, error=err) from err

    try:
        header = _build_header(
            version,
            0 if num_records is None else num_records,
            raw_dims,
            raw_attrs,
            raw_vars,
        )
    except InvalidDataSet as err:
        raise ReadError(ReadErrorKind.DATA_SET, error=err) from err

    if num_records is None:
        _compute_num_records(header, total_file_size)
    return header