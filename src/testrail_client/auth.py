"""Authentication module for loading TestRail credentials.

This module handles loading TestRail credentials from environment variables
using python-dotenv. It validates that all required credentials are present and
raises ConfigurationError naming every missing variable.
"""

import os
from typing import NamedTuple

from dotenv import load_dotenv

from .errors import ConfigurationError


class Credentials(NamedTuple):
    """TestRail API credentials."""
    url: str
    user: str
    api_key: str


class Authenticator:
    """Loads and validates TestRail credentials from environment variables.

    Credentials are loaded from a .env file using python-dotenv and are never
    cached or logged.

    Required environment variables:
        TESTRAIL_URL: TestRail instance URL (e.g., https://yourcompany.testrail.io)
        TESTRAIL_USER: TestRail user email address
        TESTRAIL_API_KEY: TestRail API key (or password)

    Raises:
        ConfigurationError: If any required credential is missing

    Example:
        >>> auth = Authenticator()
        >>> creds = auth.get_credentials()
        >>> print(f"Connecting to {creds.url}")
    """

    REQUIRED_VARIABLES = ('TESTRAIL_URL', 'TESTRAIL_USER', 'TESTRAIL_API_KEY')

    def __init__(self):
        """Initialize the authenticator by loading environment variables from .env file."""
        load_dotenv()

    def get_credentials(self) -> Credentials:
        """Get TestRail credentials from environment variables.

        Returns:
            Credentials: A named tuple containing url, user, and api_key

        Raises:
            ConfigurationError: If any required credential is missing
        """
        url = os.getenv('TESTRAIL_URL')
        user = os.getenv('TESTRAIL_USER')
        api_key = os.getenv('TESTRAIL_API_KEY')

        missing = [
            name for name, value in zip(self.REQUIRED_VARIABLES, (url, user, api_key))
            if not value or not value.strip()
        ]
        if missing:
            raise ConfigurationError(
                f"TestRail credentials not available; set {', '.join(missing)}",
                missing=missing,
            )

        # Type checker: these are guaranteed to be str due to validation above
        return Credentials(
            url=url.strip().rstrip('/'),  # type: ignore[union-attr]
            user=user.strip(),  # type: ignore[union-attr]
            api_key=api_key,  # type: ignore[arg-type]
        )
