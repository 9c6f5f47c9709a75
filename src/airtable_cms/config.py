"""
Loader options and secret management.

:class:`AirtableLoaderOptions` is the value a host passes when it constructs a
loader. Hosts that prefer not to hard-code credentials can assemble the options
from a secrets file instead. The lookup order is:

1. Explicit ``AIRTABLE_CMS_SECRETS_PATH`` environment variable.
2. ``.secrets/secret.toml`` relative to the CWD, then the project root.
3. ``.secrets/secrets.toml``.
4. ``.secrets/secrets.example.toml`` for scaffolding values.

The ``[airtable]`` section of the file supplies ``table``, ``base``, ``view``,
``api_key`` and optionally ``key_source``/``key_field``. When ``api_key`` is
absent the ``AIRTABLE_API_KEY`` environment variable is consulted.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Optional

from .adapters.base import ConfigurationError

DEFAULT_KEY_FIELD = "id"
API_KEY_ENV = "AIRTABLE_API_KEY"
SECRETS_PATH_ENV = "AIRTABLE_CMS_SECRETS_PATH"


class KeySource(str, Enum):
    """Where a record's store key is read from."""

    FIELD = "field"
    RECORD = "record"


@dataclass(frozen=True, slots=True)
class AirtableLoaderOptions:
    """
    Static configuration captured when a loader is constructed.

    Attributes
    ----------
    table:
        Table name inside the base.
    base:
        Base identifier (``app...``).
    view:
        View name; its filter and sort decide which records are returned.
    api_key:
        Personal access token sent as a bearer token.
    key_source:
        ``KeySource.FIELD`` keys entries by ``fields[key_field]``;
        ``KeySource.RECORD`` keys them by Airtable's own record id.
    key_field:
        Field name used when ``key_source`` is ``KeySource.FIELD``.
    """

    table: str
    base: str
    view: str
    api_key: str = field(repr=False)
    key_source: KeySource = KeySource.FIELD
    key_field: str = DEFAULT_KEY_FIELD


@dataclass(slots=True)
class AirtableSettings:
    """Partially populated loader settings as read from secrets and environment."""

    table: Optional[str] = None
    base: Optional[str] = None
    view: Optional[str] = None
    api_key: Optional[str] = field(default=None, repr=False)
    key_source: Optional[str] = None
    key_field: Optional[str] = None

    def merged(self, **overrides: Optional[str]) -> "AirtableSettings":
        """Return a copy where every non-empty override replaces the stored value."""

        return replace(self, **{key: value for key, value in overrides.items() if value})

    def missing(self) -> list[str]:
        return [name for name in ("table", "base", "view", "api_key") if not getattr(self, name)]

    def to_options(self, **overrides: Optional[str]) -> AirtableLoaderOptions:
        """
        Build :class:`AirtableLoaderOptions`, applying ``overrides`` first.

        Raises
        ------
        ConfigurationError
            If any of the four required values is still missing, or
            ``key_source`` is not a known value.
        """

        settings = self.merged(**overrides)
        missing = settings.missing()
        if missing:
            raise ConfigurationError(f"Missing Airtable setting(s): {', '.join(missing)}. Configure [airtable] in .secrets/secret.toml or pass them explicitly.")
        try:
            key_source = KeySource(settings.key_source or KeySource.FIELD.value)
        except ValueError as exc:
            choices = ", ".join(member.value for member in KeySource)
            raise ConfigurationError(f"Unknown key_source '{settings.key_source}'. Expected one of: {choices}.") from exc
        return AirtableLoaderOptions(
            table=settings.table,  # type: ignore[arg-type]
            base=settings.base,  # type: ignore[arg-type]
            view=settings.view,  # type: ignore[arg-type]
            api_key=settings.api_key,  # type: ignore[arg-type]
            key_source=key_source,
            key_field=settings.key_field or DEFAULT_KEY_FIELD,
        )


@dataclass(slots=True)
class SecretsBundle:
    """Lightweight container for parsed secret values."""

    source_path: Optional[Path]
    data: Dict[str, Dict[str, object]]
    airtable: AirtableSettings = field(default_factory=AirtableSettings)


def _discover_project_root() -> Optional[Path]:
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").is_file():
            return parent
    return None


def _candidate_paths() -> Iterable[Path]:
    env_override = os.getenv(SECRETS_PATH_ENV)
    if env_override:
        yield Path(env_override).expanduser()

    search_roots = [Path.cwd()]
    project_root = _discover_project_root()
    if project_root and project_root not in search_roots:
        search_roots.append(project_root)

    for root in search_roots:
        secrets_dir = root / ".secrets"
        for filename in ("secret.toml", "secrets.toml", "secrets.example.toml"):
            yield secrets_dir / filename


def _load_toml(path: Path) -> Dict[str, Dict[str, object]]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _extract_airtable_settings(raw: Dict[str, Dict[str, object]]) -> AirtableSettings:
    section = raw.get("airtable", {}) if isinstance(raw, dict) else {}
    if not isinstance(section, dict):
        section = {}

    def _extract(key: str) -> Optional[str]:
        value = section.get(key)
        return str(value) if isinstance(value, str) and value else None

    return AirtableSettings(
        table=_extract("table"),
        base=_extract("base"),
        view=_extract("view"),
        api_key=_extract("api_key") or os.getenv(API_KEY_ENV) or None,
        key_source=_extract("key_source"),
        key_field=_extract("key_field"),
    )


def load_secrets(strict: bool = False) -> SecretsBundle:
    """
    Attempt to load secrets from the configured locations.

    Parameters
    ----------
    strict:
        When ``True`` raise ``FileNotFoundError`` if no secrets file is found.
        Otherwise an empty bundle is returned, still honouring ``AIRTABLE_API_KEY``.
    """

    for path in _candidate_paths():
        if path.is_file():
            data = _load_toml(path)
            return SecretsBundle(source_path=path, data=data, airtable=_extract_airtable_settings(data))

    if strict:
        raise FileNotFoundError(f"No secrets file found. Configure {SECRETS_PATH_ENV} or .secrets/secret.toml.")

    return SecretsBundle(source_path=None, data={}, airtable=_extract_airtable_settings({}))
