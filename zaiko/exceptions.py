class ZaikoError(Exception):
    """Base class for application-specific errors."""
    status_code = 400


class SetNotFoundError(ZaikoError):
    """Raised when no set matches the given name."""
    status_code = 404


class ItemNotFoundError(ZaikoError):
    """Raised when an item id is not present in the set."""
    status_code = 404


class DuplicateNameError(ZaikoError):
    """Raised when a set or item name collides with an existing one."""
    status_code = 409


class InvalidRecordError(ZaikoError):
    """Raised when a set or item fails validation before it is stored."""
    pass


class InvalidStockError(ZaikoError):
    """Raised for a stock change that is not a non-negative integer."""
    pass


class InvalidImportError(ZaikoError):
    """Raised when an imported document is rejected before anything is overwritten."""
    pass


class SettingsError(ZaikoError):
    """Raised for out-of-range preference values."""
    pass


class BarcodeNotAssignedError(ZaikoError):
    """Raised when a label is asked for a code the item does not have."""
    status_code = 404
