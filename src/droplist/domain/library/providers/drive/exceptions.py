"""Drive-specific exceptions for error handling."""

from typing import Optional


class DriveError(Exception):
    """Base exception for shared-folder operations."""

    pass


class InvalidFolderReferenceError(DriveError):
    """Raised when a reference cannot be parsed into a folder id."""

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Not a valid folder link or id: {reference!r}")


class FolderFetchError(DriveError):
    """Raised when a listing page cannot be fetched (transport or non-2xx)."""

    def __init__(self, folder_id: str, status_code: Optional[int] = None, detail: str = ""):
        self.folder_id = folder_id
        self.status_code = status_code
        self.detail = detail
        if status_code is not None:
            message = f"Failed to fetch folder: HTTP {status_code}"
        else:
            message = "Failed to fetch folder"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class SubfolderFetchError(FolderFetchError):
    """Raised when a nested folder fetch fails or times out."""

    pass


class TracksFolderNotFoundError(DriveError):
    """Raised when the configured tracks subfolder is missing from the root listing."""

    def __init__(self, folder_name: str):
        self.folder_name = folder_name
        super().__init__(
            f'Tracks folder "{folder_name}" not found. Make sure a subfolder with '
            f"that name exists in the shared folder, or clear the tracks folder "
            f"setting to play the root folder."
        )
