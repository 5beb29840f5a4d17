"""Typed wrappers for individual 1CRM endpoints.

These are thin helpers over :class:`~onecrm.client.Client`: they pick the
path, attach endpoint-specific headers and decode the response into a
model from :mod:`onecrm.models`.
"""

from onecrm.endpoints.client import EndpointClient
from onecrm.endpoints.files import Files

__all__ = ["EndpointClient", "Files"]
