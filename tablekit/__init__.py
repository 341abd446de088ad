"""TableKit - headless data table controller.

Filtering, multi-column sorting, grouping, pagination, row selection,
expansion, cell editing, and keyboard navigation over plain Python rows,
with every piece of state either owned by the table or controlled by the
caller.
"""

from .config import LogSettings, TableDefaults, TableKitSettings, get_settings
from .controller import TableController
from .debounce import Debouncer
from .editing import (
    Committed,
    CommitResult,
    EditorDescriptor,
    EditorRegistry,
    EditPhase,
    Failed,
    Pending,
    default_registry,
)
from .exceptions import AccessorError, CommitError, ConfigurationError, TableKitException
from .keyboard import Key, KeyResult, NavAction
from .models import (
    ColumnDef,
    EditingState,
    EditMode,
    FilterDescriptor,
    FocusCursor,
    GroupDef,
    MatchMode,
    PaginationMode,
    PaginationState,
    RowGroup,
    RowId,
    SelectAllState,
    SelectionMode,
    SortDescriptor,
    SortDirection,
    TableSnapshot,
)
from .options import TableOptions
from .reconciled import UNSET, ReconciledValue, is_unset
from .rows import RowIdentity, infer_columns, normalize_rows


__version__ = "0.1.0"

__all__ = [
    "UNSET",
    "AccessorError",
    "ColumnDef",
    "CommitError",
    "CommitResult",
    "Committed",
    "ConfigurationError",
    "Debouncer",
    "EditMode",
    "EditPhase",
    "EditingState",
    "EditorDescriptor",
    "EditorRegistry",
    "Failed",
    "FilterDescriptor",
    "FocusCursor",
    "GroupDef",
    "Key",
    "KeyResult",
    "LogSettings",
    "MatchMode",
    "NavAction",
    "PaginationMode",
    "PaginationState",
    "Pending",
    "ReconciledValue",
    "RowGroup",
    "RowId",
    "RowIdentity",
    "SelectAllState",
    "SelectionMode",
    "SortDescriptor",
    "SortDirection",
    "TableController",
    "TableDefaults",
    "TableKitException",
    "TableKitSettings",
    "TableOptions",
    "TableSnapshot",
    "__version__",
    "default_registry",
    "get_settings",
    "infer_columns",
    "is_unset",
    "normalize_rows",
]
