"""Fleet, expense and purchase & sale ledger API."""

__version__ = "1.0.0"
