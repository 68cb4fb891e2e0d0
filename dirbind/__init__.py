"""Resilient bind/lookup over hierarchical naming directories.

Public API:
    - NamingClient (bind with auto-created subcontexts, lookup)
    - extract_directory_properties()
    - initial_context()
    - HierarchicalName, DirectoryNode, InMemoryContext
    - DirectoryError and its sub-causes
"""

from .client import NamingClient
from .context_factory import initial_context
from .directory import DirectoryNode
from .errors import (
    ContextUnavailableError,
    DirectoryError,
    DirectoryLookupError,
    IntermediateCreateError,
    IntermediateLookupError,
    LeafBindError,
    NameAlreadyBound,
    NameNotFound,
    NameParseError,
    NamingFault,
)
from .memory import InMemoryContext
from .names import CompositeNameParser, DnNameParser, HierarchicalName
from .observer import Observer
from .properties import CONTEXT_FACTORY, PROVIDER_URL, extract_directory_properties

__version__ = "0.1.0"

__all__ = [
    "NamingClient",
    "initial_context",
    "extract_directory_properties",
    "CONTEXT_FACTORY",
    "PROVIDER_URL",
    "DirectoryNode",
    "InMemoryContext",
    "HierarchicalName",
    "CompositeNameParser",
    "DnNameParser",
    "Observer",
    "DirectoryError",
    "NameParseError",
    "IntermediateLookupError",
    "IntermediateCreateError",
    "LeafBindError",
    "DirectoryLookupError",
    "ContextUnavailableError",
    "NamingFault",
    "NameNotFound",
    "NameAlreadyBound",
]
