"""Pydantic models shared across onecrm modules.

The models fall into three groups:

**Configuration models**: :class:`FlowConfig` (fully resolved OAuth2
parameters handed to :class:`~onecrm.auth.flow.AuthFlow`) and
:class:`Settings` (the persisted CLI settings file).

**Grant request bodies**: :class:`ClientCredentialsRequest`,
:class:`ResourceOwnerRequest` and :class:`AuthCodeRequest`, serialised as
JSON and posted to the ``access_token`` endpoint. Field declaration order
is the JSON key order on the wire.

**Endpoint payloads**: :class:`UserInfo`, :class:`FileMetadata` and
:class:`UploadResult`, decoded by :mod:`onecrm.endpoints`.

:class:`~onecrm.auth.oauth2.OAuth2AccessToken` is also a pydantic model
but lives in :mod:`onecrm.auth.oauth2` because it doubles as an auth
strategy.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---


class FlowConfig(BaseModel):
    """Fully resolved OAuth2 flow parameters.

    Built once by :func:`onecrm.config.load_flow_config` (defaults, then
    settings file, then environment, then explicit overrides) and treated
    as immutable afterwards.

    Example::

        FlowConfig(client_id="abc", client_secret="xyz")
    """

    model_config = ConfigDict(frozen=True)

    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = ""
    username: str = ""
    password: str = ""
    scope: str = "profile"
    owner_type: str = Field(
        default="user", description="Principal kind in OAuth2 paths: user or contact"
    )
    state: str = ""


class Settings(BaseModel):
    """CLI settings persisted as ``config.json`` in the config directory."""

    base_url: Optional[str] = Field(
        default=None, description="Base URL of the 1CRM API, e.g. https://crm.example.com/api.php"
    )
    flow: FlowConfig = Field(default_factory=FlowConfig)


# --- Grant request bodies ---


class ClientCredentialsRequest(BaseModel):
    grant_type: Literal["client_credentials"] = "client_credentials"
    client_id: str
    client_secret: str
    scope: str


class ResourceOwnerRequest(BaseModel):
    grant_type: Literal["password"] = "password"
    client_id: str
    client_secret: str
    scope: str
    username: str
    password: str


class AuthCodeRequest(BaseModel):
    grant_type: Literal["authorization_code"] = "authorization_code"
    client_id: str
    client_secret: str
    scope: str
    code: str
    redirect_uri: str


# --- Endpoint payloads ---


class UserInfo(BaseModel):
    """Result of ``GET me``."""

    id: str = ""
    name: str = ""
    first_name: str = ""
    last_name: str = ""
    role: str = ""
    email: str = ""
    timezone: str = ""
    is_partner: bool = False


class FileMetadata(BaseModel):
    """Metadata of a Document, DocumentRevision or Note attachment."""

    name: str = ""
    size: int = 0
    mime_type: str = ""
    modified: int = 0


class UploadResult(BaseModel):
    id: str
