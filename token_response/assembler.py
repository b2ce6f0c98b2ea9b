"""Derives cache entities from a validated token response"""

import logging
from typing import List, Optional

from .authority import Authority, AuthorityType, ProtocolMode, generate_environment_from_authority
from .entities import (
    AccessTokenEntity,
    AccountEntity,
    AppMetadataEntity,
    CacheRecord,
    IdTokenEntity,
    RefreshTokenEntity,
)
from .errors import ClientInfoEmptyError, InvalidCacheEnvironmentError
from .id_token import IdToken
from .models import LibraryStateObject, ServerAuthorizationTokenResponse
from .utils import dedupe_scopes, is_empty, now_seconds, print_scopes, scopes_from_string

logger = logging.getLogger(__name__)


class CacheRecordAssembler:
    """Builds the CacheRecord for one token response

    Holds only the client id. Per-call values such as the home account id
    are passed to ``assemble``.
    """

    def __init__(self, client_id: str):
        self.client_id = client_id

    def assemble(
        self,
        response: ServerAuthorizationTokenResponse,
        authority: Authority,
        home_account_id: str,
        id_token: Optional[IdToken] = None,
        library_state: Optional[LibraryStateObject] = None,
        request_scopes: Optional[List[str]] = None,
        obo_assertion: Optional[str] = None,
    ) -> CacheRecord:
        """Derive up to five cache entities from a token response

        Args:
            response: Validated token endpoint response
            authority: Authority the request was sent to
            home_account_id: Home account id computed for this response
            id_token: Parsed identity token, if the response had one
            library_state: Decoded library state carrying the request timestamp
            request_scopes: Scopes of the original request
            obo_assertion: On-behalf-of assertion the tokens were obtained with

        Returns:
            CacheRecord; entities whose raw secret is empty are left unset

        Raises:
            InvalidCacheEnvironmentError: If no environment can be derived
            ClientInfoEmptyError: If a directory authority response lacks client_info
        """
        environment = generate_environment_from_authority(authority)
        if is_empty(environment):
            raise InvalidCacheEnvironmentError()

        record = CacheRecord()

        # Non-directory authorities may issue id tokens without a tenant
        if not is_empty(response.id_token) and id_token is not None:
            record.id_token = IdTokenEntity.create(
                home_account_id,
                environment,
                response.id_token,
                self.client_id,
                id_token.claims.tid or "",
                obo_assertion,
            )
            record.account = self._generate_account_entity(
                response, id_token, authority, home_account_id, obo_assertion
            )

        if not is_empty(response.access_token):
            if response.scope:
                scopes = scopes_from_string(response.scope)
            else:
                scopes = dedupe_scopes(request_scopes or [])

            # The request timestamp accounts for time spent waiting on the server
            timestamp = library_state.ts if library_state else now_seconds()
            expires_on = timestamp + (response.expires_in or 0)
            ext_expires_on = expires_on + (response.ext_expires_in or 0)

            realm = (id_token.claims.tid or "") if id_token is not None else authority.tenant
            record.access_token = AccessTokenEntity.create(
                home_account_id,
                environment,
                response.access_token,
                self.client_id,
                realm,
                print_scopes(scopes),
                expires_on,
                ext_expires_on,
                response.token_type,
                obo_assertion,
            )

        if not is_empty(response.refresh_token):
            record.refresh_token = RefreshTokenEntity.create(
                home_account_id,
                environment,
                response.refresh_token,
                self.client_id,
                response.foci,
                obo_assertion,
            )

        if not is_empty(response.foci):
            record.app_metadata = AppMetadataEntity(
                client_id=self.client_id,
                environment=environment,
                family_id=response.foci,
            )

        logger.debug(
            "Assembled cache record: "
            f"account={record.account is not None}, id_token={record.id_token is not None}, "
            f"access_token={record.access_token is not None}, refresh_token={record.refresh_token is not None}, "
            f"app_metadata={record.app_metadata is not None}"
        )
        return record

    def _generate_account_entity(
        self,
        response: ServerAuthorizationTokenResponse,
        id_token: IdToken,
        authority: Authority,
        home_account_id: str,
        obo_assertion: Optional[str],
    ) -> AccountEntity:
        if authority.authority_type == AuthorityType.ADFS:
            logger.debug("Authority type is ADFS, creating ADFS account")
            return AccountEntity.create_generic_account(authority, home_account_id, id_token, obo_assertion)

        # B2C authorities also speak the AAD protocol and need client_info
        if is_empty(response.client_info) and authority.protocol_mode == ProtocolMode.AAD:
            raise ClientInfoEmptyError()

        if response.client_info:
            return AccountEntity.create_account(
                response.client_info, home_account_id, authority, id_token, obo_assertion
            )
        return AccountEntity.create_generic_account(authority, home_account_id, id_token, obo_assertion)
