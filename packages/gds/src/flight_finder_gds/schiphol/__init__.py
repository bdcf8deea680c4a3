from .client import DeparturesPage, ScheduledFlight, SchipholClient

__all__ = ["DeparturesPage", "ScheduledFlight", "SchipholClient"]
