class ImageUploadError(Exception):
    """Base exception for all upload-related errors."""


class ReadError(ImageUploadError):
    """Raised when a file cannot be read into a local preview."""


class FetchError(ReadError):
    """Raised when a pasted image cannot be materialised into a file object."""


class UploadError(ImageUploadError):
    """Raised when the upload adapter reports a failure."""


class LoaderAborted(ImageUploadError):
    """Raised to awaiters of a read or upload that was aborted."""


class LoaderStateError(ImageUploadError):
    """Raised when a loader operation is called from the wrong status."""


class ConfigurationError(ImageUploadError):
    """Raised when no upload adapter factory is configured."""


class SchemaRejection(ImageUploadError):
    """Raised when the schema does not allow an image at the target position."""
