"""Exceptions raised by the data-access layer"""


class RealtyError(Exception):
    """Base class for errors reported back to the menu"""


class ValidationError(RealtyError):
    """A field value or a business rule was rejected before reaching the database"""


class NotFound(RealtyError):
    """The requested record does not exist"""


class DeleteBlocked(RealtyError):
    """
    A delete was refused because current rows still reference the record.

    `dependents` maps a human-readable label to the number of blocking rows.
    """

    def __init__(self, entity, record_id, dependents):
        self.entity = entity
        self.record_id = record_id
        self.dependents = dependents
        details = ', '.join(f"{count} {label}" for label, count in dependents.items())
        super().__init__(f"Cannot delete {entity} {record_id}: {details}")


class ConfigError(RealtyError):
    """A setting in the environment or .env file cannot be used"""
