"""Console display module for rendering the outcome of an authorization flow."""

import json
import logging
from datetime import datetime, timedelta
from typing import Optional

from ..auth.models import AccessToken, FlowResult

logger = logging.getLogger(__name__)


def mask_secret(value: str, visible: int = 4) -> str:
    """Show only the last ``visible`` characters of a credential."""
    if not value:
        return '-'
    if len(value) <= visible:
        return '*' * len(value)
    return '*' * (len(value) - visible) + value[-visible:]


class ConsoleDisplay:
    """Handles console-based display of flow results."""

    def __init__(self, use_colors: bool = True, output_format: str = 'table'):
        self.use_colors = use_colors
        self.output_format = output_format
        self._setup_colors()
        logger.info("Console Display initialized")

    def _setup_colors(self) -> None:
        if self.use_colors:
            self.colors = {
                'reset': '\033[0m',
                'bold': '\033[1m',
                'green': '\033[92m',
                'red': '\033[91m',
                'yellow': '\033[93m',
                'cyan': '\033[96m',
                'gray': '\033[90m',
            }
        else:
            self.colors = {k: '' for k in ['reset', 'bold', 'green', 'red', 'yellow', 'cyan', 'gray']}

    def show_result(self, result: FlowResult, obtained_at: Optional[datetime] = None) -> None:
        obtained_at = obtained_at or datetime.now()
        if self.output_format == 'json':
            print(json.dumps(self.as_dict(result, obtained_at), indent=2))
            return
        self._print_header()
        if result.ok:
            self._print_token(result.token, obtained_at)
        else:
            self._print_error(result)
        self._print_footer(obtained_at)

    def as_dict(self, result: FlowResult, obtained_at: datetime) -> dict:
        """Summary of the result with token values masked."""
        if not result.ok:
            error = result.error
            return {
                'status': 'error',
                'error': getattr(error, 'error', 'flow_error'),
                'description': getattr(error, 'description', str(error)),
            }
        token = result.token
        expires_at = obtained_at + timedelta(seconds=token.expires_in) if token.expires_in else None
        return {
            'status': 'ok',
            'token_type': token.token_type,
            'scope': token.scope,
            'expires_in': token.expires_in,
            'expires_at': expires_at.isoformat() if expires_at else None,
            'access_token': mask_secret(token.access_token),
            'refresh_token': mask_secret(token.refresh_token),
        }

    def _print_header(self) -> None:
        print(f"{self.colors['cyan']}{self.colors['bold']}")
        print("╔══════════════════════════════════════════════════════════════╗")
        print("║                 OAUTH2 AUTHORIZATION RESULT                  ║")
        print("╚══════════════════════════════════════════════════════════════╝")
        print(self.colors['reset'])

    def _print_token(self, token: AccessToken, obtained_at: datetime) -> None:
        print(f"{self.colors['green']}✅ Authorization complete{self.colors['reset']}")
        print("═" * 60)
        print(f"Token type:     {self.colors['bold']}{token.token_type or '-'}{self.colors['reset']}")
        print(f"Scope:          {token.scope or '-'}")
        if token.expires_in:
            expires_at = obtained_at + timedelta(seconds=token.expires_in)
            print(f"Expires in:     {token.expires_in}s ({expires_at.strftime('%Y-%m-%d %H:%M:%S')})")
        else:
            print("Expires in:     -")
        print(f"Access token:   {self.colors['gray']}{mask_secret(token.access_token)}{self.colors['reset']}")
        print(f"Refresh token:  {self.colors['gray']}{mask_secret(token.refresh_token)}{self.colors['reset']}")

    def _print_error(self, result: FlowResult) -> None:
        error = result.error
        code = getattr(error, 'error', 'flow_error')
        print(f"{self.colors['red']}❌ Authorization failed ({code}){self.colors['reset']}")
        print("═" * 60)
        print(f"{self.colors['yellow']}{getattr(error, 'description', None) or error}{self.colors['reset']}")

    def _print_footer(self, obtained_at: datetime) -> None:
        print(f"\n{self.colors['gray']}" + "─" * 60)
        print(f"Flow finished at {obtained_at.strftime('%Y-%m-%d %H:%M:%S')}")
        print(self.colors['reset'])
