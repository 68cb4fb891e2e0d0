from __future__ import annotations

import logging
from typing import Any, Mapping

from .log_config import TRACE


class Observer:
    """Structured events of the naming client, emitted through a logger.

    Constructed once and injected into `NamingClient` / `initial_context`.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.log = logger or logging.getLogger("dirbind.naming")

    def binding(self, name: Any) -> None:
        self.log.log(TRACE, "Binding: %s", name)

    def bound(self, name: Any) -> None:
        self.log.debug("Bound name: %s", name)

    def intermediate_lookup(self, segment: str) -> None:
        self.log.log(TRACE, "Intermediate lookup: %s", segment)

    def found_intermediate(self, segment: str) -> None:
        self.log.log(TRACE, "Found intermediate context: %s", segment)

    def creating_intermediate(self, segment: str) -> None:
        self.log.log(TRACE, "Creating subcontext: %s", segment)

    def lookup(self, name: Any) -> None:
        self.log.log(TRACE, "Lookup: %s", name)

    def context_properties(self, props: Mapping[str, Any]) -> None:
        self.log.info("Directory context properties: %s", _masked(props))

    def root_context_failed(self, exc: BaseException) -> None:
        self.log.error("Could not obtain root context", exc_info=exc)


def _masked(props: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for k, v in props.items():
        out[k] = "***" if "credentials" in k or "password" in k else v
    return out
