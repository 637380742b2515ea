"""
Host project interface.

The open project is injected, like the render queue. Persistence calls
must never change the project's in-memory content beyond marking it saved.
"""

from abc import ABC, abstractmethod
from typing import Optional


class ImportedItem(ABC):
    """An item created by importing a file into the open project."""

    @abstractmethod
    def remove(self) -> None:
        """Remove the imported item (and anything it brought along)."""
        pass


class HostProject(ABC):
    """The project currently open in the host application."""

    @property
    @abstractmethod
    def file(self) -> Optional[str]:
        """Backing file path, or None if the project was never saved."""
        pass

    @abstractmethod
    def save(self) -> None:
        """
        Save the project to its backing file.

        For a project without a backing file the host may ask the user
        for a location; the project may still have no file afterwards.
        """
        pass

    @abstractmethod
    def save_as(self, path: str) -> None:
        """Save the project to a new backing file."""
        pass

    @abstractmethod
    def copy_to(self, path: str) -> None:
        """Copy the saved project file to path. The open project is unchanged."""
        pass

    @abstractmethod
    def import_project(self, path: str) -> ImportedItem:
        """Import another project file into this one."""
        pass
