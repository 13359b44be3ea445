"""
Per-attachment storage options.

Most options can be given either as a plain value or as a callable that
computes the value from the attachment (e.g. a directory per tenant). Both
shapes are normalised into Literal / Computed at construction time so the
rest of the package resolves them with one call to resolve_option().
"""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar, Union

from .errors import ConfigurationError

T = TypeVar("T")


@dataclass(frozen=True)
class Literal(Generic[T]):
    """An option value taken verbatim from configuration."""
    value: T


@dataclass(frozen=True)
class Computed(Generic[T]):
    """An option value computed from the attachment when it is needed."""
    fn: Callable[..., T]

    def compute(self, context: Any) -> T:
        # Zero-argument callables are allowed for convenience
        try:
            params = inspect.signature(self.fn).parameters
        except (TypeError, ValueError):
            return self.fn(context)
        if not params:
            return self.fn()
        return self.fn(context)


Option = Union[Literal[T], Computed[T]]


def as_option(value: Any) -> Option:
    """Wrap a raw configuration value. Existing options pass through."""
    if isinstance(value, (Literal, Computed)):
        return value
    if callable(value):
        return Computed(value)
    return Literal(value)


def resolve_option(option: Option, context: Any) -> Any:
    if isinstance(option, Computed):
        return option.compute(context)
    return option.value


@dataclass
class StorageOptions:
    """
    Options recognised by SoftLayerStorage.

    credentials:          mapping, path, open file, or callable (see credentials.py)
    directory:            container name, or callable(attachment) -> name
    public:               bool, or mapping of style -> bool
    host:                 optional custom host; "%d" is replaced by a shard index
    extra_upload_fields:  mapping, or callable(attachment) -> mapping, merged into uploads
    """
    credentials: Any
    directory: Any
    public: Any = True
    host: Optional[Any] = None
    extra_upload_fields: Optional[Any] = None

    def __post_init__(self) -> None:
        if self.credentials is None:
            raise ConfigurationError("credentials option is required")
        if self.directory is None:
            raise ConfigurationError("directory option is required")

        self.directory = as_option(self.directory)
        if self.host is not None:
            self.host = as_option(self.host)
        if self.extra_upload_fields is not None:
            self.extra_upload_fields = as_option(self.extra_upload_fields)

    def is_public(self, style: str) -> bool:
        """
        Visibility for a style.

        A mapping that doesn't mention the style falls through to the
        mapping itself, so a non-empty mapping means public.
        """
        if isinstance(self.public, Mapping) and style in self.public:
            return bool(self.public[style])
        return bool(self.public)
