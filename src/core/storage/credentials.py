"""
Storage credential resolution.

Credentials can be configured in several shapes:
- a mapping, used as-is
- a path to a YAML file
- an open file containing YAML
- a callable (given the attachment) returning any of the above

Files are rendered as templates first, so secrets can stay in the process
environment: `password: ${OBJSTOR_PASSWORD}`.

A credentials file usually holds one block per environment:

    development:
      provider: softlayer
      auth_url: https://s3.us-south.cloud-object-storage.appdomain.cloud
      ...
    production:
      ...

When the mapping has a key matching the active environment, that block is
the result. Otherwise the whole mapping is.
"""

import logging
import os
from pathlib import Path
from string import Template
from typing import Any, Mapping, Optional

import yaml

from .errors import ConfigurationError
from .options import Computed

logger = logging.getLogger(__name__)

UNSUPPORTED_SOURCE_MESSAGE = "credentials are not a path, file, mapping, or callable"


def render_template(text: str, variables: Optional[Mapping[str, str]] = None) -> str:
    """Substitute ${VAR} placeholders. Unknown placeholders are left alone."""
    if variables is None:
        variables = os.environ
    return Template(text).safe_substitute(variables)


def _parse_yaml(text: str, origin: str) -> dict:
    try:
        data = yaml.safe_load(render_template(text))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid credentials file {origin}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Credentials file {origin} must contain a mapping")

    return data


def load_credentials(source: Any, context: Any = None, allow_callable: bool = True) -> dict:
    """
    Load the raw credential mapping from any supported source shape.

    Raises ConfigurationError for unsupported shapes or unreadable files.
    """
    if isinstance(source, Mapping):
        return dict(source)

    if isinstance(source, (str, os.PathLike)):
        path = Path(source)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read credentials file {path}: {e}") from e
        return _parse_yaml(text, str(path))

    if hasattr(source, "read"):
        text = source.read()
        if isinstance(text, bytes):
            text = text.decode("utf-8")
        return _parse_yaml(text, getattr(source, "name", repr(source)))

    if allow_callable and callable(source):
        # A callable may return a path or file but not another callable
        return load_credentials(Computed(source).compute(context), context, allow_callable=False)

    raise ConfigurationError(UNSUPPORTED_SOURCE_MESSAGE)


def resolve_credentials(source: Any, environment: Optional[str] = None, context: Any = None) -> dict:
    """
    Resolve a credential source into a provider-ready mapping.

    The environment block, if present, is hoisted to the top level.
    Keys come back as strings.
    """
    raw = {str(key): value for key, value in load_credentials(source, context).items()}

    effective = raw
    if environment is not None and isinstance(raw.get(environment), Mapping):
        effective = raw[environment]
        logger.debug(
            "Using environment credentials",
            extra={"environment": environment}
        )

    return {str(key): value for key, value in effective.items()}


class CredentialResolver:
    """Resolves credentials once and caches the result."""

    def __init__(self, source: Any, environment: Optional[str] = None, context: Any = None) -> None:
        self._source = source
        self._environment = environment
        self._context = context
        self._credentials: Optional[dict] = None

    def resolve(self) -> dict:
        if self._credentials is None:
            self._credentials = resolve_credentials(
                self._source,
                environment=self._environment,
                context=self._context,
            )
        return self._credentials
