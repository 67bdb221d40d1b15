"""Credential handling for gemnexus.

Modules:

prompter : module
    CredentialPrompter protocol and the terminal implementation.
resolver : module
    Basic Authorization header construction and the sign-in flow.

"""

from .prompter import CredentialPrompter, TerminalPrompter
from .resolver import (
    ANONYMOUS,
    AuthResolver,
    Credential,
    authorization_header,
    parse_credential,
)

__all__ = [
    "ANONYMOUS",
    "AuthResolver",
    "Credential",
    "CredentialPrompter",
    "TerminalPrompter",
    "authorization_header",
    "parse_credential",
]
