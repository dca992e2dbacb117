"""
Basic Session Example - login, authenticated calls and logout against a live API.

Configure with environment variables, e.g.:
    SESSION_AUTH_API_URL=http://localhost:3000/api
    SESSION_AUTH_STORAGE_BACKEND=memory
"""

import asyncio
import sys
from session_auth import AuthClient, SessionExpiredError, ValidationError
from session_auth.logging_config import setup_logging


def navigate(path):
    print(f"\nSession ended, redirecting to {path}")


async def main(email, password):
    setup_logging()

    async with AuthClient.from_settings(navigator=navigate) as client:
        # Stored credentials from a previous run are verified first
        await client.controller.ready()
        print(f"Starting state: {client.state.status.value}")

        if not client.state.is_authenticated:
            try:
                result = await client.login(email, password)
            except ValidationError as e:
                print(f"Form errors: {e.errors}")
                return
            print(f"\n{result.message}")
            if not result.success:
                return

        profile = client.state.profile
        if profile:
            print(f"Logged in as: {profile.display_name}")

        expires_at = client.controller.expires_at
        if expires_at:
            print(f"Token expires at: {expires_at.isoformat()}")

        # Authenticated call, the gateway attaches the bearer token
        try:
            response = await client.gateway.get("/auth/verify")
            print(f"\nVerify returned {response.status_code}")
        except SessionExpiredError as e:
            print(f"\n{e.message}")
            return

        await client.logout()
        print(f"\nLogged out, state: {client.state.status.value}")


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("usage: basic_session.py EMAIL PASSWORD")
        sys.exit(1)
    asyncio.run(main(sys.argv[1], sys.argv[2]))
