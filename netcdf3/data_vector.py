"""Typed value vectors for the six NetCDF-3 external data types."""

from __future__ import annotations

from array import array
from enum import Enum
from typing import Iterable, Iterator

from netcdf3.errors import DataVectorTypeError


class DataType(Enum):
    """The NetCDF-3 external data types, valued by their header codes."""

    I8 = 1
    U8 = 2
    I16 = 3
    I32 = 4
    F32 = 5
    F64 = 6

    def size_of(self) -> int:
        """Return the number of bytes of one element of this type."""
        return _SIZES[self]


_SIZES = {
    DataType.I8: 1,
    DataType.U8: 1,
    DataType.I16: 2,
    DataType.I32: 4,
    DataType.F32: 4,
    DataType.F64: 8,
}

# array typecodes enforcing each type's range and precision
_TYPECODES = {
    DataType.I8: "b",
    DataType.U8: "B",
    DataType.I16: "h",
    DataType.I32: "i",
    DataType.F32: "f",
    DataType.F64: "d",
}

_FLOAT_TYPES = frozenset({DataType.F32, DataType.F64})


class DataVector:
    """A flat sequence of values that all share one NetCDF-3 data type.

    Integer values are range-checked against their type and ``F32``
    values are rounded to single precision, so the content always
    matches what the type can hold.
    """

    __slots__ = ("data_type", "_values")
    __hash__ = None  # mutable container

    def __init__(self, data_type: DataType, values: Iterable = ()) -> None:
        if not isinstance(data_type, DataType):
            raise TypeError(f"expected a DataType, got {data_type!r}")
        self.data_type = data_type
        self._values = array(_TYPECODES[data_type], list(values)).tolist()

    @classmethod
    def zeros(cls, data_type: DataType, length: int) -> "DataVector":
        """Return a vector of ``length`` zeros of the given type."""
        if length < 0:
            raise ValueError(f"length must be non-negative, got {length}")
        zero = 0.0 if data_type in _FLOAT_TYPES else 0
        return cls(data_type, [zero] * length)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataVector):
            return NotImplemented
        # element-wise so that NaN never equals NaN, even the same object
        return (
            self.data_type == other.data_type
            and len(self._values) == len(other._values)
            and all(a == b for a, b in zip(self._values, other._values))
        )

    def __repr__(self) -> str:
        return f"DataVector({self.data_type.name}, {self._values!r})"

    def _get(self, data_type: DataType) -> list | None:
        if self.data_type is not data_type:
            return None
        return list(self._values)

    def _into(self, data_type: DataType) -> list:
        if self.data_type is not data_type:
            raise DataVectorTypeError(self, data_type)
        return self._values

    def get_i8(self) -> list[int] | None:
        """Return a copy of the values if the type is ``I8``, else ``None``."""
        return self._get(DataType.I8)

    def get_u8(self) -> list[int] | None:
        """Return a copy of the values if the type is ``U8``, else ``None``."""
        return self._get(DataType.U8)

    def get_i16(self) -> list[int] | None:
        """Return a copy of the values if the type is ``I16``, else ``None``."""
        return self._get(DataType.I16)

    def get_i32(self) -> list[int] | None:
        """Return a copy of the values if the type is ``I32``, else ``None``."""
        return self._get(DataType.I32)

    def get_f32(self) -> list[float] | None:
        """Return a copy of the values if the type is ``F32``, else ``None``."""
        return self._get(DataType.F32)

    def get_f64(self) -> list[float] | None:
        """Return a copy of the values if the type is ``F64``, else ``None``."""
        return self._get(DataType.F64)

    def get_as_string(self) -> str | None:
        """Decode a ``U8`` vector as UTF-8; ``None`` for other types or bad bytes."""
        if self.data_type is not DataType.U8:
            return None
        try:
            return bytes(self._values).decode("utf-8")
        except UnicodeDecodeError:
            return None

    def get_i8_into(self) -> list[int]:
        """Return the internal list of an ``I8`` vector, without copying."""
        return self._into(DataType.I8)

    def get_u8_into(self) -> list[int]:
        """Return the internal list of a ``U8`` vector, without copying."""
        return self._into(DataType.U8)

    def get_i16_into(self) -> list[int]:
        """Return the internal list of an ``I16`` vector, without copying."""
        return self._into(DataType.I16)

    def get_i32_into(self) -> list[int]:
        """Return the internal list of an ``I32`` vector, without copying."""
        return self._into(DataType.I32)

    def get_f32_into(self) -> list[float]:
        """Return the internal list of an ``F32`` vector, without copying."""
        return self._into(DataType.F32)

    def get_f64_into(self) -> list[float]:
        """Return the internal list of an ``F64`` vector, without copying."""
        return self._into(DataType.F64)