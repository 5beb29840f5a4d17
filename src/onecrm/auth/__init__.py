"""Pluggable authentication for onecrm.

- :class:`Auth` -- abstract base: decorate an outgoing request.
- :class:`BasicAuth` -- HTTP Basic credentials.
- :class:`OAuth2AccessToken` -- bearer token returned by an OAuth2 grant.
- :class:`APIKeyAuth` -- static key in a header.
- :class:`AuthFlow` -- OAuth2 engine (authorization code, password and
  client credentials grants).

Typical usage::

    from onecrm.auth import AuthFlow

    flow = AuthFlow.from_env("https://crm.example.com/api.php")
    token = flow.init_client_credentials()
"""

from onecrm.auth.api_key import APIKeyAuth
from onecrm.auth.base import Auth
from onecrm.auth.basic import BasicAuth
from onecrm.auth.flow import AuthFlow
from onecrm.auth.oauth2 import OAuth2AccessToken

__all__ = [
    "APIKeyAuth",
    "Auth",
    "AuthFlow",
    "BasicAuth",
    "OAuth2AccessToken",
]
