"""
Obtain a user access token for testing authenticated mutations.

Signs in with email/password through Supabase auth; when that fails, tries to
sign the user up. Prints the token and a ready-to-run curl command.

Usage: python -m blog_api.auth_token EMAIL PASSWORD
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

import httpx
from supabase import AuthError as SupabaseAuthError
from supabase import Client, ClientOptions, create_client

from .config import Settings, load_settings

logger = logging.getLogger(__name__)


class AuthError(Exception):
    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class AuthClient:
    """Password sign-in and sign-up through the SDK's auth client."""

    def __init__(self, settings: Settings, client: Optional[Client] = None) -> None:
        if client is None:
            if not settings.supabase_url or not settings.supabase_anon_key:
                raise AuthError("Missing SUPABASE_URL or SUPABASE_ANON_KEY in .env file")
            options = ClientOptions(
                httpx_client=httpx.Client(timeout=settings.http_timeout),
                auto_refresh_token=False,
                persist_session=False,
            )
            client = create_client(settings.supabase_url, settings.supabase_anon_key, options=options)
        self.client = client

    def sign_in(self, email: str, password: str):
        try:
            return self.client.auth.sign_in_with_password({"email": email, "password": password})
        except SupabaseAuthError as e:
            raise AuthError(e.message) from e

    def sign_up(self, email: str, password: str):
        try:
            return self.client.auth.sign_up({"email": email, "password": password})
        except SupabaseAuthError as e:
            raise AuthError(e.message) from e


def _hint_for(message: str) -> Optional[str]:
    lowered = message.lower()
    if "already registered" in lowered:
        return "This email is already registered. Reset the password in the Supabase dashboard if needed."
    if "email not confirmed" in lowered:
        return "Check your email for the confirmation link, or disable email confirmation in Supabase settings."
    if "invalid login credentials" in lowered:
        return "Double-check your email and password are correct."
    if "password" in lowered:
        return "Password requirements not met; use at least 6 characters."
    if "email" in lowered:
        return "Email format is invalid."
    return None


def _access_token(response) -> Optional[str]:
    return response.session.access_token if response.session else None


def obtain_token(client: AuthClient, email: str, password: str) -> Optional[str]:
    """Return an access token, or None when the account still needs email confirmation."""
    try:
        token = _access_token(client.sign_in(email, password))
        if token:
            logger.info("Successfully signed in (user already exists)")
            return token
    except AuthError as e:
        logger.info(f"Sign in failed, creating new user: {e}")

    signup = client.sign_up(email, password)
    token = _access_token(signup)
    if token:
        logger.info("User created and auto-confirmed")
        return token

    user = signup.user
    logger.info(f"User created: {user.id if user else None}")
    if user is None or not user.email_confirmed_at:
        return None

    return _access_token(client.sign_in(email, password))


def render_token(access_token: str, port: int) -> str:
    rule = "-" * 80
    return "\n".join(
        [
            "Your JWT token:",
            rule,
            access_token,
            rule,
            f"Authorization: Bearer {access_token[:50]}...",
            "",
            "Test with curl:",
            f"curl -X POST http://localhost:{port}/graphql \\",
            '  -H "Content-Type: application/json" \\',
            f'  -H "Authorization: Bearer {access_token}" \\',
            "  -d '{\"query\":\"mutation { createPost(title: \\\"Test Post\\\", content: \\\"Content\\\", "
            "author: \\\"Test Author\\\") { id title } }\"}'",
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="blog-auth-token", description="Get a Supabase access token")
    parser.add_argument("email")
    parser.add_argument("password")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(message)s")
    args = build_parser().parse_args(argv)
    settings = load_settings()

    try:
        token = obtain_token(AuthClient(settings), args.email, args.password)
    except AuthError as e:
        print(f"Error: {e}", file=sys.stderr)
        hint = _hint_for(str(e))
        if hint:
            print(hint, file=sys.stderr)
        return e.exit_code

    if token is None:
        print("Email confirmation required. Confirm the address, then run this command again.")
        return 0

    print(render_token(token, settings.port))
    return 0


if __name__ == "__main__":
    sys.exit(main())
