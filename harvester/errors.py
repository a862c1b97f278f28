"""
Harvester exceptions.
"""


class HarvesterError(Exception):
    """Base class for all harvester errors."""


class FetchError(HarvesterError):
    """The BGG API call failed or returned something unusable."""


class SourceError(HarvesterError):
    """The input key list could not be read."""
