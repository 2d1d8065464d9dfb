r"""Load an API specification and flatten it into a queryable index.

The builder accepts OpenAPI 3.x and Swagger 2.0 documents in JSON or YAML,
read from disk or fetched over HTTP. Every local ``$ref`` is substituted
inline so downstream consumers (hashing, planners, writers) never need to
dereference anything themselves.

Example
-------
>>> from specdocs.spec_index import build_spec_index
>>> index = build_spec_index(
...     {"openapi": "3.0.0", "info": {"title": "Pets", "version": "1"}, "paths": {}}
... )
>>> index.info["title"]
'Pets'
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import io
import json
import logging
import typing as typ
from pathlib import Path
from urllib.parse import unquote

import requests
from requests.adapters import HTTPAdapter
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from urllib3.util.retry import Retry

from ._constants import UNTAGGED

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")
_MISSING = object()


class ParseError(ValueError):
    """Raised when a specification cannot be read or has an unrecognized shape."""


@dc.dataclass(frozen=True, slots=True)
class SpecIndex:
    """Fully dereferenced view over an API specification.

    Attributes
    ----------
    info : dict[str, str]
        ``title``, ``version`` and ``description`` of the API.
    servers : list[dict[str, typ.Any]]
        Server descriptors; synthesized from host/basePath for Swagger 2.0.
    tags : list[dict[str, str]]
        Ordered ``{name, description}`` pairs.
    schemas : dict[str, typ.Any]
        Schema name to resolved definition.
    paths_by_tag : dict[str, list[dict[str, typ.Any]]]
        Tag name to ordered ``{path, method, operation}`` entries.
    security : list[dict[str, typ.Any]]
        Security scheme descriptors, each carrying its scheme ``id``.
    """

    info: dict[str, str]
    servers: list[dict[str, typ.Any]]
    tags: list[dict[str, str]]
    schemas: dict[str, typ.Any]
    paths_by_tag: dict[str, list[dict[str, typ.Any]]]
    security: list[dict[str, typ.Any]]

    def endpoints(self) -> typ.Iterator[dict[str, typ.Any]]:
        """Yield every endpoint entry across all tags."""
        for entries in self.paths_by_tag.values():
            yield from entries

    def endpoint_count(self) -> int:
        """Return the number of endpoint entries across all tags."""
        return sum(len(entries) for entries in self.paths_by_tag.values())

    def to_dict(self) -> dict[str, typ.Any]:
        """Return a plain mapping of the index, suitable for canonical hashing."""
        return {
            "info": self.info,
            "servers": self.servers,
            "tags": self.tags,
            "schemas": self.schemas,
            "pathsByTag": self.paths_by_tag,
            "security": self.security,
        }


class _RefResolver:
    """Substitute local ``$ref`` pointers with the definitions they target.

    Resolved targets are kept in an arena keyed by pointer. A pointer that is
    already being expanded is emitted as ``{"$ref": ..., "x-circular": True}``
    instead of being expanded again; expansions that hit such a marker are not
    cached, so the arena only ever holds complete definitions.
    """

    def __init__(self, document: typ.Mapping[str, typ.Any]) -> None:
        self.document = document
        self._arena: dict[str, typ.Any] = {}
        self._resolving: list[str] = []
        self._markers = 0

    def resolve(self, node: typ.Any) -> typ.Any:
        match node:
            case dict():
                ref = node.get("$ref")
                if isinstance(ref, str):
                    return self._resolve_ref(ref, node)
                return {str(key): self.resolve(value) for key, value in node.items()}
            case list() | tuple():
                return [self.resolve(item) for item in node]
            case dt.datetime() | dt.date():
                return node.isoformat()
            case _:
                return node

    def _resolve_ref(self, ref: str, node: typ.Mapping[str, typ.Any]) -> typ.Any:
        siblings = {
            str(key): self.resolve(value) for key, value in node.items() if key != "$ref"
        }
        resolved = self._expand(ref)
        if siblings and isinstance(resolved, dict):
            return {**resolved, **siblings}
        return resolved

    def _expand(self, ref: str) -> typ.Any:
        if not ref.startswith("#"):
            self._markers += 1
            return {"$ref": ref, "x-unresolved": True}
        if ref in self._resolving:
            self._markers += 1
            return {"$ref": ref, "x-circular": True}
        if ref in self._arena:
            return self._arena[ref]
        target = self._lookup(ref)
        if target is _MISSING:
            logger.debug("Unresolvable reference %s", ref)
            self._markers += 1
            return {"$ref": ref, "x-unresolved": True}

        markers_before = self._markers
        self._resolving.append(ref)
        try:
            resolved = self.resolve(target)
        finally:
            self._resolving.pop()
        if self._markers == markers_before:
            self._arena[ref] = resolved
        return resolved

    def _lookup(self, ref: str) -> typ.Any:
        current: typ.Any = self.document
        pointer = ref[1:]
        if not pointer:
            return current
        for raw in pointer.lstrip("/").split("/"):
            token = unquote(raw).replace("~1", "/").replace("~0", "~")
            if isinstance(current, dict) and token in current:
                current = current[token]
            elif isinstance(current, list) and token.isdigit() and int(token) < len(current):
                current = current[int(token)]
            else:
                return _MISSING
        return current


def load_document(source: str | Path) -> dict[str, typ.Any]:
    """Read a JSON or YAML specification from a path or ``http(s)`` URL.

    Parameters
    ----------
    source : str | Path
        Filesystem path or URL of the specification.

    Returns
    -------
    dict[str, typing.Any]
        The parsed top-level mapping.

    Raises
    ------
    ParseError
        If the source cannot be read, is not well-formed, or its top level is
        not a mapping.
    """
    text = _read_source(source)
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        if text.lstrip().startswith("{"):
            loaded = json.loads(text)
        else:
            loaded = loader.load(io.StringIO(text))
    except (json.JSONDecodeError, YAMLError) as exc:
        msg = f"Specification '{source}' is not well-formed: {exc}"
        raise ParseError(msg) from exc
    if not isinstance(loaded, dict):
        msg = f"Specification '{source}' must have a mapping at the top level."
        raise ParseError(msg)
    return loaded


def _read_source(source: str | Path) -> str:
    text_source = str(source)
    if text_source.startswith(("http://", "https://")):
        return _fetch_remote(text_source)
    path = Path(source)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Unable to read specification '{path}': {exc}"
        raise ParseError(msg) from exc


def _fetch_remote(url: str) -> str:
    """Download a specification with retries on transient server errors."""
    session = requests.Session()
    retry = Retry(
        total=5,
        read=5,
        connect=3,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    try:
        resp = session.get(url, timeout=30)
        resp.raise_for_status()
        return resp.text
    except requests.RequestException as exc:
        msg = f"Unable to fetch specification '{url}': {exc}"
        raise ParseError(msg) from exc
    finally:
        session.close()


def build_spec_index(source: str | Path | typ.Mapping[str, typ.Any]) -> SpecIndex:
    """Build a :class:`SpecIndex` from a path, URL, or already-parsed mapping.

    Raises
    ------
    ParseError
        If the document cannot be loaded or is neither OpenAPI 3.x nor
        Swagger 2.0.
    """
    if isinstance(source, typ.Mapping):
        document = dict(source)
    else:
        document = load_document(source)

    if "openapi" in document:
        schemas_raw, security_raw = _openapi3_components(document)
        servers_raw = document.get("servers") or []
    elif "swagger" in document:
        schemas_raw = document.get("definitions") or {}
        security_raw = document.get("securityDefinitions") or {}
        servers_raw = _swagger2_servers(document)
    else:
        msg = "Unrecognized specification: expected an 'openapi' or 'swagger' key."
        raise ParseError(msg)
    if not isinstance(document.get("paths") or {}, dict):
        msg = "Specification 'paths' must be a mapping."
        raise ParseError(msg)

    resolver = _RefResolver(document)
    info_raw = document.get("info") or {}
    info = {
        "title": str(info_raw.get("title") or ""),
        "version": str(info_raw.get("version") or ""),
        "description": str(info_raw.get("description") or ""),
    }
    schemas = {
        str(name): resolver.resolve({"$ref": _pointer_for(document, name)})
        for name in schemas_raw
    }
    security = [
        {"id": str(name), **resolver.resolve(scheme)}
        for name, scheme in security_raw.items()
        if isinstance(scheme, dict)
    ]
    paths_by_tag = _collect_operations(document, resolver)
    tags = _collect_tags(document, paths_by_tag)
    return SpecIndex(
        info=info,
        servers=resolver.resolve(list(servers_raw)),
        tags=tags,
        schemas=schemas,
        paths_by_tag=paths_by_tag,
        security=security,
    )


def _openapi3_components(
    document: typ.Mapping[str, typ.Any],
) -> tuple[dict[str, typ.Any], dict[str, typ.Any]]:
    components = document.get("components") or {}
    if not isinstance(components, dict):
        msg = "Specification 'components' must be a mapping."
        raise ParseError(msg)
    return components.get("schemas") or {}, components.get("securitySchemes") or {}


def _swagger2_servers(document: typ.Mapping[str, typ.Any]) -> list[dict[str, str]]:
    host = document.get("host")
    base_path = document.get("basePath") or ""
    if not host:
        return [{"url": base_path}] if base_path else []
    schemes = document.get("schemes") or ["https"]
    return [{"url": f"{scheme}://{host}{base_path}"} for scheme in schemes]


def _pointer_for(document: typ.Mapping[str, typ.Any], name: str) -> str:
    escaped = str(name).replace("~", "~0").replace("/", "~1")
    if "openapi" in document:
        return f"#/components/schemas/{escaped}"
    return f"#/definitions/{escaped}"


def _merge_parameters(
    shared: list[typ.Any], own: list[typ.Any]
) -> list[typ.Any]:
    """Merge path-level parameters into an operation's, keyed by (name, in)."""
    if not shared:
        return own
    merged: dict[tuple[typ.Any, typ.Any], typ.Any] = {}
    for param in [*shared, *own]:
        if isinstance(param, dict):
            merged[(param.get("name"), param.get("in"))] = param
    return list(merged.values())


def _collect_operations(
    document: typ.Mapping[str, typ.Any], resolver: _RefResolver
) -> dict[str, list[dict[str, typ.Any]]]:
    paths_by_tag: dict[str, list[dict[str, typ.Any]]] = {}
    for path, item_raw in (document.get("paths") or {}).items():
        item = resolver.resolve(item_raw)
        if not isinstance(item, dict):
            continue
        shared_params = item.get("parameters") or []
        for method in HTTP_METHODS:
            operation = item.get(method)
            if not isinstance(operation, dict):
                continue
            operation = dict(operation)
            params = _merge_parameters(shared_params, operation.get("parameters") or [])
            if params:
                operation["parameters"] = params
            entry = {"path": str(path), "method": method, "operation": operation}
            for tag in operation.get("tags") or [UNTAGGED]:
                paths_by_tag.setdefault(str(tag), []).append(entry)
    return paths_by_tag


def _collect_tags(
    document: typ.Mapping[str, typ.Any],
    paths_by_tag: typ.Mapping[str, typ.Any],
) -> list[dict[str, str]]:
    tags: list[dict[str, str]] = []
    seen: set[str] = set()
    for tag in document.get("tags") or []:
        if not isinstance(tag, dict) or not tag.get("name"):
            continue
        name = str(tag["name"])
        if name in seen:
            continue
        seen.add(name)
        tags.append({"name": name, "description": str(tag.get("description") or "")})
    for name in paths_by_tag:
        if name not in seen:
            seen.add(name)
            tags.append({"name": name, "description": ""})
    return tags


__all__ = [
    "HTTP_METHODS",
    "ParseError",
    "SpecIndex",
    "build_spec_index",
    "load_document",
]
