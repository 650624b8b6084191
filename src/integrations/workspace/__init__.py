"""Workspace collaborators: host identity, shared folder, note scanner."""

from src.integrations.workspace.file_scanner import NoteScanner, ScannedFile
from src.integrations.workspace.providers import FileIdentifierSource, HostIdentity, SharedFolder

__all__ = ["NoteScanner", "ScannedFile", "HostIdentity", "SharedFolder", "FileIdentifierSource"]
