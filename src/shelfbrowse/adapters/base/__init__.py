"""Base backend interface — Abstract contract for shelf browse search backends."""

from shelfbrowse.adapters.base.backend import BackendHealth, SearchBackend

__all__ = ["BackendHealth", "SearchBackend"]
