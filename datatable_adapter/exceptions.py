from sqlalchemy.exc import SQLAlchemyError


class DataTablesError(Exception):
    """Base class for errors raised by the adapter itself."""


class ConfigurationError(DataTablesError):
    """A column map, extra filter or table descriptor is malformed."""


# Failures from the database are never wrapped; this alias only names them.
DataAccessError = SQLAlchemyError
