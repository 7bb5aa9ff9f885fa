"""Custom exception classes for the package transfer subsystem."""


class TransferException(Exception):
    """
    Base exception class for all store, server and upload errors.
    """
    pass


class NotFoundError(TransferException):
    """
    Raised when a file, bundle member or served path does not exist.
    """
    pass


class MalformedArchiveError(TransferException):
    """
    Raised when an unpacked archive lacks the Payload folder or a unique .app bundle.
    """
    pass


class MissingMetadataError(TransferException):
    """
    Raised when the application bundle carries no Info.plist.
    """
    pass


class UnreadableMetadataError(TransferException):
    """
    Raised when Info.plist cannot be parsed into a dictionary.
    """
    pass


class StorageFaultError(TransferException):
    """
    Raised when a move, delete or create fails on the filesystem.
    """
    pass


class BindFaultError(TransferException):
    """
    Raised when the local file server cannot acquire its port.
    """
    pass
