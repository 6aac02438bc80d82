"""Abstract base class for snapshot loaders."""

from abc import ABC, abstractmethod

from hackvote.models import EventSnapshot


class SnapshotLoader(ABC):
    """Abstract base class for reading an exported event.

    Each loader handles one export format. Loaders are registered via the
    @register_loader decorator in hackvote/loaders/__init__.py.
    """

    @abstractmethod
    def can_parse(self, source: str) -> bool:
        """Check if this loader can handle the given source.

        Args:
            source: URL or filename to check

        Returns:
            True if this loader can handle the source, False otherwise
        """
        pass

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        """Check if this loader can handle the given file content.

        Used for uploads and URLs whose name gives nothing away. Subclasses
        should override this to look for tell-tale signs of their format.
        """
        return False

    @abstractmethod
    def parse(self, source: str, content: bytes) -> EventSnapshot:
        """Parse the content into an EventSnapshot.

        Args:
            source: Original URL or filename (for context)
            content: Raw bytes of the export

        Returns:
            Parsed EventSnapshot

        Raises:
            ValueError: If the content cannot be parsed
        """
        pass
