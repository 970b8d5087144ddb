"""Exceptions raised while building, reading and writing NetCDF-3 data sets."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from netcdf3.data_vector import DataType, DataVector


class _FieldedKind(Enum):
    """An error kind carrying its display label and its required field names."""

    def __init__(self, label: str, field_names: tuple[str, ...]) -> None:
        self.label = label
        self.field_names = field_names


def _format_value(value: Any) -> str:
    if isinstance(value, Enum):
        return value.name
    return repr(value)


class _KindedError(Exception):
    """Base for errors described by a kind and the fields that kind requires."""

    _kind_type: type[_FieldedKind]

    def __init__(self, kind: _FieldedKind, **fields: Any) -> None:
        if not isinstance(kind, self._kind_type):
            raise TypeError(f"expected a {self._kind_type.__name__}, got {kind!r}")
        if set(fields) != set(kind.field_names):
            raise TypeError(
                f"{kind.label} requires fields {kind.field_names}, "
                f"got {tuple(sorted(fields))}"
            )
        self.kind = kind
        self.fields = {name: fields[name] for name in kind.field_names}
        for name, value in self.fields.items():
            setattr(self, name, value)
        super().__init__(self._describe())

    def _describe(self) -> str:
        if not self.fields:
            return self.kind.label
        inner = ", ".join(f"{k}={_format_value(v)}" for k, v in self.fields.items())
        return f"{self.kind.label}({inner})"

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self.kind == other.kind and self.fields == other.fields

    def __hash__(self) -> int:
        return hash((type(self), self.kind))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._describe()})"


class InvalidDataSetKind(_FieldedKind):
    """The ways a data set definition can be invalid."""

    DIMENSION_ALREADY_EXISTS = ("DimensionAlreadyExists", ("dim_name",))
    DIMENSION_NOT_DEFINED = ("DimensionNotDefined", ("dim_name",))
    DIMENSIONS_NOT_DEFINED = ("DimensionsNotDefined", ("var_name", "undef_dim_names"))
    DIMENSIONS_USED_MULTIPLE_TIMES = (
        "DimensionsUsedMultipleTimes",
        ("var_name", "get_dim_names"),
    )
    UNLIMITED_DIMENSION_ALREADY_EXISTS = ("UnlimitedDimensionAlreadyExists", ("dim_name",))
    DIMENSION_YET_USED = ("DimensionYetUsed", ("var_names", "dim_name"))
    DIMENSION_NAME_NOT_VALID = ("DimensionNameNotValid", ("dim_name",))
    DIMENSION_IDS_NOT_FOUND = ("DimensionIdsNotFound", ("defined", "searched", "not_found"))
    FIXED_DIMENSION_WITH_ZERO_SIZE = ("FixedDimensionWithZeroSize", ("dim_name",))
    MAXIMUM_FIXED_DIMENSION_SIZE_EXCEEDED = (
        "MaximumFixedDimensionSizeExceeded",
        ("dim_name", "get"),
    )
    DIMENSIONS_NOT_FOUND = ("DimensionsNotFound", ("defined", "searched", "not_found"))

    VARIABLE_ATTRIBUTE_ALREADY_EXISTS = (
        "VariableAttributeAlreadyExists",
        ("var_name", "attr_name"),
    )
    VARIABLE_ATTRIBUTE_NOT_DEFINED = ("VariableAttributeNotDefined", ("var_name", "attr_name"))
    VARIABLE_ATTRIBUTE_NAME_NOT_VALID = (
        "VariableAttributeNameNotValid",
        ("var_name", "attr_name"),
    )

    VARIABLE_NOT_DEFINED = ("VariableNotDefined", ("var_name",))
    VARIABLE_NAME_NOT_VALID = ("VariableNameNotValid", ("var_name",))
    VARIABLE_ALREADY_EXISTS = ("VariableAlreadyExists", ("var_name",))
    VARIABLE_MISMATCH_DATA_TYPE = ("VariableMismatchDataType", ("var_name", "req", "get"))
    VARIABLE_MISMATCH_DATA_LENGTH = ("VariableMismatchDataLength", ("var_name", "req", "get"))
    UNLIMITED_DIMENSION_MUST_BE_DEFINED_FIRST = (
        "UnlimitedDimensionMustBeDefinedFirst",
        ("var_name", "unlim_dim_name", "get_dim_names"),
    )
    MAXIMUM_DIMENSIONS_PER_VARIABLE_EXCEEDED = (
        "MaximumDimensionsPerVariableExceeded",
        ("var_name", "num_dims"),
    )

    GLOBAL_ATTRIBUTE_ALREADY_EXISTS = ("GlobalAttributeAlreadyExists", ("attr_name",))
    GLOBAL_ATTRIBUTE_NOT_DEFINED = ("GlobalAttributeNotDefined", ("attr_name",))
    GLOBAL_ATTRIBUTE_NAME_NOT_VALID = ("GlobalAttributeNameNotValid", ("attr_name",))


class InvalidDataSet(_KindedError):
    """The data set being built or read is not a valid NetCDF-3 data set."""

    _kind_type = InvalidDataSetKind


class ParseHeaderErrorKind(Enum):
    """The header element whose parsing failed."""

    MAGIC_WORD = "MagicWord"
    VERSION_NUMBER = "VersionNumber"
    NON_NEGATIVE_I32 = "NonNegativeI32"
    ZERO_PADDING = "ZeroPadding"
    DIM_TAG = "DimTag"
    ATTR_TAG = "AttrTag"
    VAR_TAG = "VarTag"
    DATA_TYPE = "DataType"
    DATA_ELEMENTS = "DataElements"
    UTF8 = "Utf8"
    OFFSET = "Offset"


class ParseHeaderError(Exception):
    """The header bytes could not be parsed.

    Either the bytes at ``invalid_bytes`` are wrong, or, when ``incomplete``
    is true, the header ended early and ``needed`` more bytes (if known)
    are required.
    """

    def __init__(
        self,
        kind: ParseHeaderErrorKind,
        invalid_bytes: bytes = b"",
        *,
        incomplete: bool = False,
        needed: int | None = None,
    ) -> None:
        self.kind = kind
        self.invalid_bytes = bytes(invalid_bytes)
        self.incomplete = incomplete
        self.needed = needed
        if incomplete:
            detail = "incomplete" if needed is None else f"incomplete, {needed} more bytes needed"
        else:
            detail = f"invalid bytes {self.invalid_bytes[:16]!r}"
        super().__init__(f"{kind.value}: {detail}")

    def header_is_incomplete(self) -> bool:
        """Return whether parsing stopped because the header was truncated."""
        return self.incomplete

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseHeaderError):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.invalid_bytes == other.invalid_bytes
            and self.incomplete == other.incomplete
            and self.needed == other.needed
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.incomplete))


class ReadErrorKind(_FieldedKind):
    """The ways reading a NetCDF-3 file can fail."""

    PARSE_HEADER = ("ParseHeader", ("error",))
    DATA_SET = ("DataSet", ("error",))
    VARIABLE_NOT_DEFINED = ("VariableNotDefined", ("var_name",))
    VARIABLE_MISMATCH_DATA_TYPE = ("VariableMismatchDataType", ("var_name", "req", "get"))
    IO = ("IOError", ("error",))
    COMPUTATION_NUMBER_OF_RECORDS = ("ComputationNumberOfRecords", ())
    RECORD_INDEX_EXCEEDED = ("RecordIndexExceeded", ("index", "num_records"))
    UNEXPECTED = ("Unexpected", ())


class ReadError(_KindedError):
    """Reading a NetCDF-3 file failed."""

    _kind_type = ReadErrorKind

    def header_is_incomplete(self) -> bool:
        """Return whether this wraps a header parse error on truncated bytes."""
        if self.kind is ReadErrorKind.PARSE_HEADER:
            return self.fields["error"].header_is_incomplete()
        return False


class WriteErrorKind(_FieldedKind):
    """The ways writing a NetCDF-3 file can fail."""

    IO = ("IOError", ("error",))
    VARIABLE_NOT_DEFINED = ("VariableNotDefined", ("var_name",))
    VARIABLE_MISMATCH_DATA_TYPE = ("VariableMismatchDataType", ("var_name", "req", "get"))
    VARIABLE_MISMATCH_DATA_LENGTH = ("VariableMismatchDataLength", ("var_name", "req", "get"))
    CLASSIC_VERSION_NOT_POSSIBLE = ("ClassicVersionNotPossible", ())
    HEADER_ALREADY_DEFINED = ("HeaderAlreadyDefined", ())
    HEADER_NOT_DEFINED = ("HeaderNotDefined", ())
    RECORD_INDEX_EXCEEDED = ("RecordIndexExceeded", ("index", "num_records"))
    RECORD_MISMATCH_DATA_LENGTH = ("RecordMismatchDataLength", ("var_name", "req", "get"))
    UNEXPECTED = ("Unexpected", ())


class WriteError(_KindedError):
    """Writing a NetCDF-3 file failed."""

    _kind_type = WriteErrorKind


class DataVectorTypeError(TypeError):
    """A data vector was asked for its values as a type it does not hold.

    The vector is kept on the exception so it is not lost.
    """

    def __init__(self, vector: "DataVector", requested: "DataType") -> None:
        self.vector = vector
        self.requested = requested
        super().__init__(
            f"data vector holds {vector.data_type.name} values, not {requested.name}"
        )