"""Loaders that read exported event data into an EventSnapshot."""

from .base import SnapshotLoader

# Loader registry - import loaders here to register them
_loaders: list[type[SnapshotLoader]] = []


def register_loader(loader_class: type[SnapshotLoader]) -> type[SnapshotLoader]:
    """Decorator to register a loader class."""
    _loaders.append(loader_class)
    return loader_class


def get_all_loaders() -> list[type[SnapshotLoader]]:
    """Return all registered loader classes."""
    return _loaders.copy()


def detect_loader(source: str) -> SnapshotLoader | None:
    """Auto-detect and return an appropriate loader instance for the given source."""
    for loader_class in _loaders:
        loader = loader_class()
        if loader.can_parse(source):
            return loader
    return None


def detect_loader_by_content(content: bytes, filename: str) -> SnapshotLoader | None:
    """Return a loader that recognises the content itself, for uploads without a useful name."""
    for loader_class in _loaders:
        loader = loader_class()
        if loader.can_parse_content(content, filename):
            return loader
    return None


def get_supported_formats() -> str:
    """Return a user-friendly description of supported input formats."""
    lines = ["We currently support:"]
    for loader_class in _loaders:
        description = getattr(loader_class, "FORMAT_DESCRIPTION", None)
        if description:
            lines.append(f"  - {description}")
    return "\n".join(lines)
