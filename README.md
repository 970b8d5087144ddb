# netcdf3

A small, dependency-free Python library for parsing the header of NetCDF-3
files, in both the *classic* and the *64-bit offset* formats. It also provides
typed value vectors for the six NetCDF-3 data types.

## Installation

```
pip install netcdf3
```

## Parsing a header

`netcdf3.header.parse_header(data, total_file_size)` parses the header at the
start of `data`. `total_file_size` is the size of the whole file. It is used to
count the records when the header leaves their number indeterminate.

```python
from netcdf3.header import Version, parse_header

with open("example.nc", "rb") as f:
    data = f.read()

header = parse_header(data, len(data))

assert header.version in (Version.CLASSIC, Version.OFFSET_64BIT)
print(header.var_names())              # variable names in header order
print(header.num_records())            # None when there is no unlimited dimension
print(header.record_size())            # bytes per record, or None

title = header.global_attr("title")    # a DataVector, or None
if title is not None:
    print(title.get_as_string())

latitude = header.find_var("latitude")  # a ParsedVariable, or None
if latitude is not None:
    print(latitude.data_type, latitude.length(), latitude.begin_offset)
    print(latitude.is_record_var(), latitude.chunk_len(), latitude.chunk_size())
    print(latitude.attrs)               # attribute name -> DataVector
```

A `Header` holds:

- `version`: a `Version`.
- `dims`: a list of `ParsedDimension`, each with `name`, `size` and
  `is_unlimited()`. The size of the unlimited dimension is the number of
  records.
- `global_attrs`: a mapping from attribute name to `DataVector`.
- `variables`: a list of `ParsedVariable`.

If `data` holds only the beginning of a file, parsing raises a `ReadError`
whose `header_is_incomplete()` is true. Read more bytes and try again.

## Data vectors

`netcdf3.data_vector.DataVector` holds values of one of the six types of
`netcdf3.data_vector.DataType`: `I8`, `U8`, `I16`, `I32`, `F32` and `F64`.
`DataType.size_of()` gives the byte size of one element.

```python
from netcdf3.data_vector import DataType, DataVector

vec = DataVector(DataType.I16, [1, 2, 3])
assert len(vec) == 3
assert vec.get_i16() == [1, 2, 3]   # a copy
assert vec.get_f32() is None        # wrong type
zeros = DataVector.zeros(DataType.F64, 4)
```

- Integer values are range-checked for their type. `F32` values are rounded to
  single precision.
- `get_i8()` ... `get_f64()` return a copy of the values when the type matches,
  and `None` otherwise.
- `get_i8_into()` ... `get_f64_into()` return the internal list without copying
  it. They raise `netcdf3.errors.DataVectorTypeError` when the type does not
  match. The error keeps the vector as `.vector`.
- `get_as_string()` decodes a `U8` vector as UTF-8. It returns `None` for other
  types and for invalid bytes.
- Two vectors are equal when they have the same type and the same values,
  compared element by element. A `NaN` element is never equal.

## Layout helpers

`netcdf3.layout` holds the list tags of the format and
`compute_padding_size(num_bytes)`. That function returns the number of padding
bytes that bring a size to a 4-byte boundary.

## Errors

`netcdf3.errors` defines:

- `ReadError`. Its `kind` is a `ReadErrorKind`, and it wraps a
  `ParseHeaderError` or an `InvalidDataSet` in `error`.
- `ParseHeaderError`. Its `kind` is a `ParseHeaderErrorKind`, and it names the
  header element that failed.
- `InvalidDataSet`. Its `kind` is an `InvalidDataSetKind`. It is raised for a
  header whose definitions conflict, such as duplicate names, unknown dimension
  ids, or an unlimited dimension that is not first.
- `WriteError` and `WriteErrorKind`, the error types for writing.
- `DataVectorTypeError`.

## What this package does not do

This package parses headers only. It does not read variable data or records
from a file. It gives the data type, dimensions and `begin_offset` of each
variable, and the record size, so that you can locate the data yourself. It
also does not write NetCDF-3 files or build data sets.

## Running the tests

```
pip install -e .[test]
pytest
```