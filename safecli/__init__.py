"""FilesContainers, published immutable data and coin balances kept in a local fake vault."""

__version__ = "0.1.0"