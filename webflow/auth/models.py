"""Data types shared by the authorization code flow components."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from .errors import FlowError

TOKEN_AUTH_METHODS = ('client_secret_basic', 'client_secret_post')


@dataclass(frozen=True)
class FlowConfig:
    """Static provider parameters for one flow."""
    authorize_url: str
    token_url: str
    client_id: str
    client_secret: str
    scope: str = ''
    # Sent with the authorization request only, e.g. access_type=offline
    extra_authorize_params: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, section: Mapping[str, Any]) -> 'FlowConfig':
        """
        Build a FlowConfig from a settings section.

        Args:
            section: Mapping with authorize_url, token_url, client_id,
                client_secret and optionally scope and access_type.

        Returns:
            The frozen provider configuration.
        """
        extra = dict(section.get('extra_authorize_params') or {})
        if section.get('access_type'):
            extra['access_type'] = section['access_type']
        return cls(
            authorize_url=section.get('authorize_url') or '',
            token_url=section.get('token_url') or '',
            client_id=section.get('client_id') or '',
            client_secret=section.get('client_secret') or '',
            scope=section.get('scope') or '',
            extra_authorize_params=extra,
        )


@dataclass(frozen=True)
class CallbackSettings:
    """Where the local listener binds and how the flow behaves around it."""
    host: str = 'localhost'
    port: int = 5000
    path: str = '/'
    # Seconds to wait for the redirect; None waits until cancelled
    timeout: Optional[float] = None
    exchange_timeout: float = 30
    verify_tls: bool = True
    token_auth_method: str = 'client_secret_basic'
    tls_cert_path: Optional[str] = None
    tls_key_path: Optional[str] = None
    open_browser: bool = True
    abort_on_browser_error: bool = False

    @property
    def use_tls(self) -> bool:
        return bool(self.tls_cert_path and self.tls_key_path)

    @property
    def redirect_uri(self) -> str:
        scheme = 'https' if self.use_tls else 'http'
        # IPv6 literals need brackets in a URL authority
        host = f"[{self.host}]" if ':' in self.host and not self.host.startswith('[') else self.host
        uri = f"{scheme}://{host}:{self.port}"
        if self.path and self.path != '/':
            uri += self.path if self.path.startswith('/') else f"/{self.path}"
        return uri

    def with_port(self, port: int) -> 'CallbackSettings':
        """Return a copy bound to another port (used once an ephemeral port is known)."""
        return replace(self, port=port)


@dataclass
class CallbackResult:
    """Query parameters carried by the provider redirect."""
    code: Optional[str]
    state: Optional[str]
    error: Optional[str] = None
    error_description: Optional[str] = None

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> 'CallbackResult':
        return cls(
            code=query.get('code'),
            state=query.get('state'),
            error=query.get('error'),
            error_description=query.get('error_description'),
        )


@dataclass
class AccessToken:
    """Token endpoint response. The caller owns persistence and refresh."""
    access_token: str
    token_type: str = ''
    scope: str = ''
    expires_in: int = 0
    refresh_token: str = ''
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'AccessToken':
        """
        Decode a token endpoint JSON object.

        Unknown fields are kept in ``raw`` and otherwise ignored.

        Raises:
            ValueError: If the payload has no access_token or a non-numeric expires_in.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Token response is not a JSON object: {type(data).__name__}")
        access_token = data.get('access_token')
        if not access_token:
            raise ValueError("Token response has no access_token")
        scope = data.get('scope') or ''
        # Some providers return scope as a list
        if isinstance(scope, (list, tuple)):
            scope = ' '.join(str(s) for s in scope)
        expires_in = data.get('expires_in')
        return cls(
            access_token=str(access_token),
            token_type=str(data.get('token_type') or ''),
            scope=str(scope),
            expires_in=int(expires_in) if expires_in not in (None, '') else 0,
            refresh_token=str(data.get('refresh_token') or ''),
            raw=dict(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.raw)
        data.update({
            'access_token': self.access_token,
            'token_type': self.token_type,
            'scope': self.scope,
            'expires_in': self.expires_in,
            'refresh_token': self.refresh_token,
        })
        return data


@dataclass
class FlowResult:
    """Outcome handed from the callback server to the waiting caller."""
    token: Optional[AccessToken] = None
    error: Optional[FlowError] = None

    @classmethod
    def success(cls, token: AccessToken) -> 'FlowResult':
        return cls(token=token)

    @classmethod
    def failure(cls, error: FlowError) -> 'FlowResult':
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None and self.token is not None

    def unwrap(self) -> AccessToken:
        """Return the token or raise the delivered error."""
        if self.error is not None:
            raise self.error
        if self.token is None:
            raise FlowError("Flow finished without a result")
        return self.token
