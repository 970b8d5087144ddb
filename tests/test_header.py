import struct

import pytest

from netcdf3.data_vector import DataType
from netcdf3.errors import (
    InvalidDataSetKind,
    ParseHeaderErrorKind,
    ReadError,
    ReadErrorKind,
)
from netcdf3.header import Version, parse_header
from netcdf3.layout import (
    ABSENT_TAG,
    ATTRIBUTE_TAG,
    DIMENSION_TAG,
    VARIABLE_TAG,
    compute_padding_size,
)

INDETERMINATE = 0xFFFFFFFF

_CODES = {
    DataType.I8: "b",
    DataType.U8: "B",
    DataType.I16: "h",
    DataType.I32: "i",
    DataType.F32: "f",
    DataType.F64: "d",
}


def _i32(value):
    return struct.pack(">i", value)


def _name(text):
    raw = text.encode("utf-8") if isinstance(text, str) else text
    return _i32(len(raw)) + raw + bytes(compute_padding_size(len(raw)))


def _values(data_type, values):
    raw = struct.pack(f">{len(values)}{_CODES[data_type]}", *values)
    return raw + bytes(compute_padding_size(len(raw)))


def _text(value):
    return list(value.encode("utf-8"))


def _attrs(attrs):
    if not attrs:
        return ABSENT_TAG
    out = ATTRIBUTE_TAG + _i32(len(attrs))
    for name, data_type, values in attrs:
        out += _name(name) + _i32(data_type.value) + _i32(len(values)) + _values(data_type, values)
    return out


def build(version=1, numrecs=0, dims=(), gattrs=(), variables=()):
    out = b"CDF" + bytes([version]) + struct.pack(">I", numrecs)
    if dims:
        out += DIMENSION_TAG + _i32(len(dims))
        for name, size in dims:
            out += _name(name) + _i32(size)
    else:
        out += ABSENT_TAG
    out += _attrs(gattrs)
    if variables:
        out += VARIABLE_TAG + _i32(len(variables))
        for name, dim_ids, attrs, data_type, begin in variables:
            out += _name(name) + _i32(len(dim_ids))
            out += b"".join(_i32(i) for i in dim_ids)
            out += _attrs(attrs) + _i32(data_type.value) + _i32(0)
            out += struct.pack(">i" if version == 1 else ">q", begin)
    else:
        out += ABSENT_TAG
    return out


def sample_header(numrecs=2, version=1):
    return build(
        version=version,
        numrecs=numrecs,
        dims=[("latitude", 3), ("time", 0)],
        gattrs=[("Conventions", DataType.U8, _text("CF-1.8"))],
        variables=[
            ("latitude", [0], [("units", DataType.U8, _text("degrees_north"))], DataType.F32, 1000),
            ("temp", [1, 0], [], DataType.I16, 2000),
        ],
    )


def parse_error(data, total=None):
    with pytest.raises(ReadError) as info:
        parse_header(data, len(data) if total is None else total)
    return info.value


def test_empty_header():
    data = b"CDF\x01" + struct.pack(">I", 0) + ABSENT_TAG * 3
    header = parse_header(data, len(data))
    assert header.version is Version.CLASSIC
    assert header.dims == []
    assert header.variables == []
    assert header.num_records() is None
    assert header.record_size() is None


def test_sample_header_content():
    data = sample_header()
    header = parse_header(data, 10_000)
    assert header.version is Version.CLASSIC
    assert [(d.name, d.size, d.is_unlimited()) for d in header.dims] == [
        ("latitude", 3, False),
        ("time", 2, True),
    ]
    assert header.num_records() == 2
    assert header.global_attr("Conventions").get_as_string() == "CF-1.8"
    assert header.global_attr("missing") is None
    assert header.var_names() == ["latitude", "temp"]

    latitude = header.find_var("latitude")
    assert latitude.data_type is DataType.F32
    assert not latitude.is_record_var()
    assert latitude.chunk_len() == 3
    assert latitude.length() == latitude.chunk_len()
    assert latitude.begin_offset == 1000
    assert latitude.attrs["units"].get_as_string() == "degrees_north"

    temp = header.find_var("temp")
    assert temp.is_record_var()
    assert temp.dims[0] is header.unlimited_dim()
    assert temp.length() == header.num_records() * temp.chunk_len()
    assert header.find_var("missing") is None


def test_chunk_size_is_padded_to_four_bytes():
    header = parse_header(sample_header(), 10_000)
    for var in header.variables:
        raw = var.chunk_len() * var.data_type.size_of()
        assert var.chunk_size() % 4 == 0
        assert raw <= var.chunk_size() < raw + 4


def test_record_size_single_record_var_is_unpadded():
    data = build(numrecs=1, dims=[("time", 0), ("x", 3)],
                 variables=[("v", [0, 1], [], DataType.I8, 100)])
    header = parse_header(data, 10_000)
    assert header.record_size() == 3


def test_record_size_sums_padded_chunks():
    data = build(
        numrecs=1,
        dims=[("time", 0), ("x", 3)],
        variables=[
            ("a", [0, 1], [], DataType.I8, 100),
            ("b", [0, 1], [], DataType.I16, 104),
            ("fixed", [1], [], DataType.F64, 50),
        ],
    )
    header = parse_header(data, 10_000)
    record_vars = [v for v in header.variables if v.is_record_var()]
    assert [v.name for v in record_vars] == ["a", "b"]
    assert header.record_size() == sum(v.chunk_size() for v in record_vars)


def test_64bit_offset_version():
    big_offset = 2**33
    data = build(version=2, numrecs=0, dims=[("x", 2)],
                 variables=[("v", [0], [], DataType.F64, big_offset)])
    header = parse_header(data, len(data))
    assert header.version is Version.OFFSET_64BIT
    assert header.find_var("v").begin_offset == big_offset


def test_attribute_values_round_trip():
    data = build(gattrs=[
        ("i8", DataType.I8, [-1, 2, 3]),
        ("i32", DataType.I32, [-7, 70000]),
        ("f64", DataType.F64, [0.5, -1.25]),
    ])
    header = parse_header(data, len(data))
    assert header.global_attr("i8").get_i8() == [-1, 2, 3]
    assert header.global_attr("i32").get_i32() == [-7, 70000]
    assert header.global_attr("f64").get_f64() == [0.5, -1.25]


def test_every_truncation_is_incomplete():
    data = sample_header()
    parse_header(data, 10_000)
    for cut in range(len(data)):
        err = parse_error(data[:cut], 10_000)
        assert err.kind is ReadErrorKind.PARSE_HEADER
        assert err.header_is_incomplete(), cut


def test_bad_magic_word():
    err = parse_error(b"HDF\x01" + bytes(28))
    assert err.kind is ReadErrorKind.PARSE_HEADER
    assert err.error.kind is ParseHeaderErrorKind.MAGIC_WORD
    assert not err.header_is_incomplete()


def test_bad_version():
    err = parse_error(b"CDF\x05" + bytes(28))
    assert err.error.kind is ParseHeaderErrorKind.VERSION_NUMBER


def test_bad_dim_tag():
    err = parse_error(b"CDF\x01" + bytes(4) + VARIABLE_TAG + bytes(4) + ABSENT_TAG * 2)
    assert err.error.kind is ParseHeaderErrorKind.DIM_TAG


def test_negative_dim_size():
    data = b"CDF\x01" + bytes(4) + DIMENSION_TAG + _i32(1) + _name("x") + _i32(-3)
    err = parse_error(data + ABSENT_TAG * 2)
    assert err.error.kind is ParseHeaderErrorKind.NON_NEGATIVE_I32


def test_non_zero_padding():
    data = b"CDF\x01" + bytes(4) + DIMENSION_TAG + _i32(1) + _i32(2) + b"ab\x00\x01" + _i32(5)
    err = parse_error(data + ABSENT_TAG * 2)
    assert err.error.kind is ParseHeaderErrorKind.ZERO_PADDING


def test_invalid_utf8_name():
    data = b"CDF\x01" + bytes(4) + DIMENSION_TAG + _i32(1) + _name(b"\xff\xfe") + _i32(5)
    err = parse_error(data + ABSENT_TAG * 2)
    assert err.error.kind is ParseHeaderErrorKind.UTF8


def test_bad_data_type():
    data = b"CDF\x01" + bytes(4) + ABSENT_TAG + ATTRIBUTE_TAG + _i32(1) + _name("a") + _i32(7)
    err = parse_error(data + _i32(0) + ABSENT_TAG)
    assert err.error.kind is ParseHeaderErrorKind.DATA_TYPE
    assert err.error.invalid_bytes == _i32(7)


def test_dim_ids_not_found():
    data = build(dims=[("a", 1), ("b", 2)], variables=[("v", [0, 5], [], DataType.I8, 100)])
    err = parse_error(data)
    assert err.kind is ReadErrorKind.DATA_SET
    assert err.error.kind is InvalidDataSetKind.DIMENSION_IDS_NOT_FOUND
    assert err.error.defined == [0, 1]
    assert err.error.searched == [0, 5]
    assert err.error.not_found == [5]


def test_duplicate_dimension():
    err = parse_error(build(dims=[("a", 1), ("a", 2)]))
    assert err.error.kind is InvalidDataSetKind.DIMENSION_ALREADY_EXISTS
    assert err.error.dim_name == "a"


def test_two_unlimited_dimensions():
    err = parse_error(build(dims=[("t1", 0), ("t2", 0)]))
    assert err.error.kind is InvalidDataSetKind.UNLIMITED_DIMENSION_ALREADY_EXISTS
    assert err.error.dim_name == "t1"


def test_duplicate_variable():
    data = build(dims=[("a", 1)], variables=[
        ("v", [0], [], DataType.I8, 100),
        ("v", [0], [], DataType.I8, 104),
    ])
    err = parse_error(data)
    assert err.error.kind is InvalidDataSetKind.VARIABLE_ALREADY_EXISTS


def test_unlimited_dimension_must_be_first():
    data = build(dims=[("lat", 3), ("time", 0)], variables=[("v", [0, 1], [], DataType.I8, 100)])
    err = parse_error(data)
    assert err.error.kind is InvalidDataSetKind.UNLIMITED_DIMENSION_MUST_BE_DEFINED_FIRST
    assert err.error.unlim_dim_name == "time"


def _indeterminate_header():
    return build(
        numrecs=INDETERMINATE,
        dims=[("time", 0), ("x", 3)],
        variables=[
            ("fixed", [1], [], DataType.F32, 100),
            ("temp", [0, 1], [], DataType.I16, 200),
            ("flag", [0], [], DataType.I8, 208),
        ],
    )


def test_num_records_computed_from_file_size():
    data = _indeterminate_header()
    record_size = parse_header(data, 200).record_size()
    header = parse_header(data, 200 + 3 * record_size)
    assert header.num_records() == 3
    assert header.find_var("temp").length() == 3 * header.find_var("temp").chunk_len()


def test_num_records_with_remainder_fails():
    data = _indeterminate_header()
    record_size = parse_header(data, 200).record_size()
    err = parse_error(data, 200 + 3 * record_size + 1)
    assert err.kind is ReadErrorKind.COMPUTATION_NUMBER_OF_RECORDS


def test_num_records_file_too_short_is_unexpected():
    err = parse_error(_indeterminate_header(), 150)
    assert err.kind is ReadErrorKind.UNEXPECTED


def test_num_records_without_record_vars_is_zero():
    data = build(numrecs=INDETERMINATE, dims=[("time", 0)])
    header = parse_header(data, 10_000)
    assert header.num_records() == 0