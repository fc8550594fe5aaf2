"""
Per-report invoice options.

Options arrive as a flat key-value mapping, or as an org-style block
parameter line (':rate 90 :properties ("Effort" "Comment")') parsed with
parse_block_params. Only a non-string formula is an error; every other
malformed value falls back to its default.
"""

import inspect
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from functools import wraps
from typing import Any, Callable, Mapping, Optional

from clock_invoice.tools.invoice.billing import resolve_accuracy
from clock_invoice.tools.invoice.display import TimeDisplay


logger = logging.getLogger(__name__)


# ============================================================================
# Errors
# ============================================================================

class InvoiceConfigError(Exception):
    """
    Invalid report option.

    Raised before any report text is produced.
    """

    def __init__(self, option: str, message: str):
        self.option = option
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for tool responses."""
        return {
            "error": "invalid_config",
            "option": self.option,
            "message": self.message,
        }


def handle_config_errors(func: Callable) -> Callable:
    """
    Decorator returning InvoiceConfigError as a structured dict.

    Supports both sync and async functions.
    """
    if inspect.iscoroutinefunction(func):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except InvoiceConfigError as e:
                logger.warning(f"Invalid invoice option in {func.__name__}: {e}")
                return e.to_dict()
        return async_wrapper

    @wraps(func)
    def sync_wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except InvoiceConfigError as e:
            logger.warning(f"Invalid invoice option in {func.__name__}: {e}")
            return e.to_dict()
    return sync_wrapper


# ============================================================================
# Columns
# ============================================================================

class OptionalColumn(Enum):
    """Property-backed columns, keyed by property name."""
    EFFORT = "Effort"
    COMMENT = "Comment"

    @property
    def label(self) -> str:
        return "Est" if self is OptionalColumn.EFFORT else "Comment"


@dataclass(frozen=True)
class ColumnSchema:
    columns: frozenset = frozenset()

    @classmethod
    def from_properties(cls, properties) -> "ColumnSchema":
        names = set(properties)
        return cls(frozenset(column for column in OptionalColumn if column.value in names))

    @property
    def has_effort(self) -> bool:
        return OptionalColumn.EFFORT in self.columns

    @property
    def has_comment(self) -> bool:
        return OptionalColumn.COMMENT in self.columns

    @property
    def labels(self) -> list[str]:
        labels = ["Task"]
        if self.has_effort:
            labels.append(OptionalColumn.EFFORT.label)
        labels += ["Time", "Billable"]
        if self.has_comment:
            labels.append(OptionalColumn.COMMENT.label)
        return labels


# ============================================================================
# Options
# ============================================================================

_ALIASES = {
    "timeDisplay": "time_display",
    "time-display": "time_display",
}

_FALSE_WORDS = {"", "nil", "no", "false", "off", "0"}


def _parse_flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_WORDS
    return bool(value)


def _parse_properties(value) -> tuple:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(str(item) for item in value if item is not None)
    logger.debug(f"Ignoring properties option {value!r}")
    return ()


def normalize_key(key: str) -> str:
    key = key.lstrip(":")
    return _ALIASES.get(key, key)


@dataclass(frozen=True)
class InvoiceConfig:
    """Options for one invoice report."""
    rate: Any = None
    accuracy: Optional[int] = None
    time_display: Optional[TimeDisplay] = None
    emphasize: bool = False
    properties: tuple = ()
    formula: Optional[str] = None
    header: Optional[str] = None
    lang: str = "en"
    block: Any = None
    wstart: Any = None
    mstart: Any = None
    extra: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.formula is not None and not isinstance(self.formula, str):
            raise InvoiceConfigError(
                "formula",
                f"Invalid :formula parameter {self.formula!r}: must be a string",
            )

    @classmethod
    def from_mapping(cls, params: Optional[Mapping] = None) -> "InvoiceConfig":
        """Build options from a flat mapping. Unknown keys are kept in `extra`."""
        values = {normalize_key(str(k)): v for k, v in (params or {}).items()}

        accuracy = values.pop("accuracy", None)
        if accuracy is not None:
            resolved = resolve_accuracy(accuracy, default=-1)
            if resolved < 0:
                logger.warning(f"Ignoring invalid accuracy {accuracy!r}")
                accuracy = None
            else:
                accuracy = resolved

        time_display = values.pop("time_display", None)
        if time_display is not None:
            parsed = TimeDisplay.parse(time_display)
            if parsed is None:
                logger.warning(f"Ignoring unknown time display {time_display!r}")
            time_display = parsed

        header = values.pop("header", None)
        lang = values.pop("lang", None)

        known = {
            "rate": values.pop("rate", None),
            "accuracy": accuracy,
            "time_display": time_display,
            "emphasize": _parse_flag(values.pop("emphasize", False)),
            "properties": _parse_properties(values.pop("properties", None)),
            "formula": values.pop("formula", None),
            "header": str(header) if header is not None else None,
            "lang": str(lang) if lang else "en",
            "block": values.pop("block", None),
            "wstart": values.pop("wstart", None),
            "mstart": values.pop("mstart", None),
        }
        if values:
            logger.debug(f"Unrecognized invoice options: {sorted(values)}")
        return cls(**known, extra=values)

    @property
    def schema(self) -> ColumnSchema:
        return ColumnSchema.from_properties(self.properties)


# ============================================================================
# Block parameter parsing
# ============================================================================

_PARAM_TOKEN = re.compile(r'\s*(?:(?P<string>"(?:[^"\\]|\\.)*")|(?P<open>\()|(?P<close>\))|(?P<atom>[^\s()"]+))')
_INTEGER = re.compile(r"[-+]?\d+")
_FLOAT = re.compile(r"[-+]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][-+]?\d+)?")
_ESCAPE = re.compile(r"\\(.)")


def _tokenize(text: str) -> list[tuple[str, str]]:
    tokens = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = _PARAM_TOKEN.match(text, pos)
        if not match:
            raise InvoiceConfigError("params", f"Cannot parse block parameters near {text[pos:pos + 20]!r}")
        kind = match.lastgroup
        tokens.append((kind, match.group(kind)))
        pos = match.end()
    return tokens


def _is_keyword(token) -> bool:
    kind, text = token
    return kind == "atom" and text.startswith(":") and len(text) > 1


def _atom_value(atom: str):
    if atom == "nil":
        return None
    if atom == "t":
        return True
    if _INTEGER.fullmatch(atom):
        return int(atom)
    if _FLOAT.fullmatch(atom):
        return float(atom)
    return atom


def _read_value(tokens: list, index: int):
    kind, text = tokens[index]
    if kind == "string":
        return _ESCAPE.sub(r"\1", text[1:-1]), index + 1
    if kind == "open":
        items = []
        index += 1
        while index < len(tokens) and tokens[index][0] != "close":
            item, index = _read_value(tokens, index)
            items.append(item)
        if index >= len(tokens):
            raise InvoiceConfigError("params", "Unbalanced parenthesis in block parameters")
        return items, index + 1
    if kind == "close":
        raise InvoiceConfigError("params", "Unbalanced parenthesis in block parameters")
    return _atom_value(text), index + 1


def parse_block_params(text: str) -> dict:
    """
    Parse an org-style parameter line into a flat dict.

    Anything before the first ':keyword' (e.g. '#+BEGIN: invoice') is skipped.
    A keyword without a value is read as True.

    Example:
        parse_block_params(':rate 95 :emphasize t :properties ("Effort")')
        -> {"rate": 95, "emphasize": True, "properties": ["Effort"]}
    """
    tokens = _tokenize(text)
    index = 0
    while index < len(tokens) and not _is_keyword(tokens[index]):
        index += 1

    params = {}
    while index < len(tokens):
        text_value = tokens[index][1]
        if not _is_keyword(tokens[index]):
            raise InvoiceConfigError("params", f"Expected a :keyword, got {text_value!r}")
        key = normalize_key(text_value)
        index += 1
        if index >= len(tokens) or _is_keyword(tokens[index]):
            params[key] = True
            continue
        params[key], index = _read_value(tokens, index)
    return params
