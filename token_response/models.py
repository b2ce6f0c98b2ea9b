"""
Wire models for authorization server responses and decoded request state.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ServerAuthorizationCodeResponse(BaseModel):
    """Callback or fragment payload from the authorization endpoint"""
    model_config = ConfigDict(extra="ignore")

    state: Optional[str] = None
    code: Optional[str] = None
    client_info: Optional[str] = None
    error: Optional[str] = None
    error_description: Optional[str] = None
    suberror: Optional[str] = None


class ServerAuthorizationTokenResponse(BaseModel):
    """JSON payload from the token endpoint"""
    model_config = ConfigDict(extra="ignore")

    token_type: Optional[str] = None
    scope: Optional[str] = None
    expires_in: Optional[int] = None
    ext_expires_in: Optional[int] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None
    client_info: Optional[str] = None
    foci: Optional[str] = None
    error: Optional[str] = None
    error_description: Optional[str] = None
    suberror: Optional[str] = None
    error_codes: Optional[List[int]] = None
    timestamp: Optional[str] = None
    trace_id: Optional[str] = None
    correlation_id: Optional[str] = None


@dataclass
class LibraryStateObject:
    """Library-internal portion of the echoed state

    Attributes:
        id: Random identifier generated when the request was sent
        ts: Request timestamp in epoch seconds
        meta: Optional request metadata
    """
    id: str
    ts: int
    meta: Optional[Dict[str, str]] = None


@dataclass
class RequestStateObject:
    """Echoed state split into its library and caller portions"""
    user_request_state: str
    library_state: LibraryStateObject


@dataclass
class ClientInfo:
    """Decoded client_info: directory object id and tenant id"""
    uid: str = ""
    utid: str = ""
