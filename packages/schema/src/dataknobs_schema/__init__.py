"""DataKnobs Schema Package

Declarative schema trees that validate and coerce arbitrary input values into
typed models, failing fast or collecting every error with its path.
"""

from .config import ValidationOptions
from .exceptions import (
    ErrorKind,
    InvalidSchemaError,
    SchemaError,
    TopLevelValidationError,
    ValidationError,
)
from .hooks import HookStage, Hooks
from .kinds import MISSING, SchemaKind, get_type, is_present
from .passes import ValidationPass
from .pipeline import check, validate
from .result import ValidationResult
from .schemas import (
    AnySchema,
    ArraySchema,
    BaseSchema,
    BooleanSchema,
    ConstantSchema,
    DateSchema,
    DynamicObjectSchema,
    EnumerationSchema,
    LenientObjectSchema,
    NumberSchema,
    ObjectSchema,
    OrSetSchema,
    StringSchema,
    TupleSchema,
)

__version__ = "0.1.0"
__all__ = [
    "MISSING",
    "SchemaKind",
    "get_type",
    "is_present",
    "validate",
    "check",
    "ValidationOptions",
    "ValidationPass",
    "ValidationResult",
    "HookStage",
    "Hooks",
    # Exceptions
    "SchemaError",
    "ErrorKind",
    "InvalidSchemaError",
    "ValidationError",
    "TopLevelValidationError",
    # Schema nodes
    "BaseSchema",
    "StringSchema",
    "NumberSchema",
    "BooleanSchema",
    "DateSchema",
    "ConstantSchema",
    "EnumerationSchema",
    "AnySchema",
    "ObjectSchema",
    "LenientObjectSchema",
    "DynamicObjectSchema",
    "ArraySchema",
    "TupleSchema",
    "OrSetSchema",
]
