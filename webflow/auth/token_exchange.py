"""Exchange of an authorization code for an access token."""

import asyncio
import base64
import json
import logging
from typing import Dict

import aiohttp

from .errors import ConfigError, ExchangeError
from .models import TOKEN_AUTH_METHODS, AccessToken

logger = logging.getLogger(__name__)


class TokenExchanger:
    """Performs the back-channel POST to the provider token endpoint."""

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        verify_tls: bool = True,
        auth_method: str = 'client_secret_basic',
        timeout: float = 30,
    ):
        """
        Initialize the exchanger.

        Args:
            token_url: Provider token endpoint.
            client_id: OAuth client id.
            client_secret: OAuth client secret.
            redirect_uri: Redirect URI sent with the authorization request.
            verify_tls: Verify the token endpoint certificate. Only disable for
                local test providers.
            auth_method: "client_secret_basic" sends the credentials in an
                Authorization header, "client_secret_post" in the form body.
            timeout: Total seconds allowed for the request.
        """
        if auth_method not in TOKEN_AUTH_METHODS:
            raise ConfigError(f"Unsupported token auth method: {auth_method}")
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.verify_tls = verify_tls
        self.auth_method = auth_method
        self.timeout = timeout

        if not verify_tls:
            logger.warning(f"TLS certificate verification is disabled for {token_url}")

    def _form(self, code: str) -> Dict[str, str]:
        data = {
            'grant_type': 'authorization_code',
            'code': code,
            'redirect_uri': self.redirect_uri,
        }
        if self.auth_method == 'client_secret_post':
            data['client_id'] = self.client_id
            data['client_secret'] = self.client_secret
        return data

    def _headers(self) -> Dict[str, str]:
        headers = {
            'Content-Type': 'application/x-www-form-urlencoded',
            'Accept': 'application/json',
        }
        if self.auth_method == 'client_secret_basic':
            credentials = f"{self.client_id}:{self.client_secret}".encode('utf-8')
            headers['Authorization'] = 'Basic ' + base64.b64encode(credentials).decode('ascii')
        return headers

    async def exchange(self, code: str) -> AccessToken:
        """
        Exchange an authorization code for an access token.

        Args:
            code: Authorization code received on the redirect.

        Returns:
            The decoded access token.

        Raises:
            ExchangeError: On transport failure, non-2xx status or an
                undecodable response body.
        """
        connector = aiohttp.TCPConnector(ssl=self.verify_tls)
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        async with aiohttp.ClientSession(connector=connector, timeout=timeout) as session:
            try:
                async with session.post(
                    self.token_url,
                    data=self._form(code),
                    headers=self._headers(),
                ) as response:
                    body = (await response.read()).decode('utf-8', errors='replace')
                    status = response.status
            except asyncio.TimeoutError as e:
                raise ExchangeError("Token exchange timed out") from e
            except aiohttp.ClientError as e:
                logger.error(f"Token exchange error: {e}")
                raise ExchangeError(f"Token exchange failed: {e}") from e

        if not 200 <= status < 300:
            raise ExchangeError(f"Token exchange failed: {status} - {body}", status=status, body=body)

        try:
            token = AccessToken.from_dict(json.loads(body))
        except (ValueError, TypeError) as e:
            raise ExchangeError(f"Token response could not be decoded: {e}", status=status, body=body) from e

        logger.info(f"Successfully obtained {token.token_type or 'access'} token from {self.token_url}")
        return token
