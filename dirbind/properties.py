from __future__ import annotations

from typing import Any, Mapping

DIRECTORY_PREFIX = "dirbind.directory"
DIRECTORY_CLASS = "dirbind.directory.class"
DIRECTORY_URL = "dirbind.directory.url"

CONTEXT_FACTORY = "naming.factory.initial"
PROVIDER_URL = "naming.provider.url"


def extract_directory_properties(config: Mapping[Any, Any]) -> dict[str, Any]:
    """Pick the directory-related entries out of a mixed configuration map.

    `dirbind.directory.class` and `dirbind.directory.url` are renamed to
    CONTEXT_FACTORY / PROVIDER_URL and kept only when not None, so the
    environment defaults stay in effect. Other `dirbind.directory.*` keys
    pass through with the prefix stripped.
    """
    props: dict[str, Any] = {}
    for key, value in (config or {}).items():
        if not isinstance(key, str):
            continue
        if not key.startswith(DIRECTORY_PREFIX + "."):
            continue
        if key == DIRECTORY_CLASS:
            if value is not None:
                props[CONTEXT_FACTORY] = value
        elif key == DIRECTORY_URL:
            if value is not None:
                props[PROVIDER_URL] = value
        else:
            props[key[len(DIRECTORY_PREFIX) + 1:]] = value
    return props
