"""
Friendly messages for Supabase Auth errors.

Supabase returns free-text error messages. The sign-in and sign-up flows map
the phrases we know about to a status code and a message that can be shown
to the user as-is. Rules are checked in order; the first rule whose phrases
all match (case-insensitive substring) wins.
"""

from typing import List, Tuple

# (phrase groups, status code, friendly message)
# A rule matches when any group matches; a group matches when all its phrases occur.
AuthErrorRule = Tuple[Tuple[Tuple[str, ...], ...], int, str]

SIGN_IN_ERRORS: List[AuthErrorRule] = [
    (
        (("invalid login credentials",), ("invalid email or password",), ("invalid credentials",),
         ("wrong password",), ("incorrect password",)),
        401,
        "Invalid email or password. Please check your credentials and try again.",
    ),
    (
        (("email not confirmed",), ("email not verified",), ("confirmation required",)),
        401,
        "Please check your email and click the confirmation link before signing in.",
    ),
    (
        (("too many requests",), ("rate limit",), ("too many attempts",)),
        429,
        "Too many login attempts. Please wait a moment and try again.",
    ),
    (
        (("user not found",), ("user does not exist",), ("no user found",)),
        401,
        "No account found with this email. Please sign up first.",
    ),
    (
        (("account disabled",), ("account suspended",), ("account banned",), ("user is banned",)),
        403,
        "Your account has been disabled. Please contact support.",
    ),
    (
        (("password", "required"),),
        400,
        "Password is required.",
    ),
    (
        (("email", "required"),),
        400,
        "Email is required.",
    ),
    (
        (("invalid email",), ("invalid email format",)),
        400,
        "Please enter a valid email address.",
    ),
]

SIGN_UP_ERRORS: List[AuthErrorRule] = [
    (
        (("already registered",), ("already been registered",), ("already exists",), ("duplicate key",)),
        400,
        "An account with this email already exists. Please sign in instead.",
    ),
    (
        (("invalid email",), ("email format",)),
        400,
        "Please enter a valid email address.",
    ),
    (
        (("password should be at least",), ("password too short",), ("weak password",)),
        400,
        "Password must be at least 8 characters long.",
    ),
    (
        (("password", "required"),),
        400,
        "Password is required.",
    ),
    (
        (("email", "required"),),
        400,
        "Email is required.",
    ),
    (
        (("too many requests",), ("rate limit",)),
        429,
        "Too many signup attempts. Please wait a moment and try again.",
    ),
    (
        (("signup disabled",), ("signups not allowed",), ("registration disabled",)),
        403,
        "New account registration is currently disabled. Please contact support.",
    ),
]

SIGN_IN_FALLBACK = (500, "Unable to sign in. Please try again or contact support if the problem persists.")
SIGN_UP_FALLBACK = (500, "Unable to create account. Please try again or contact support if the problem persists.")


def match_auth_error(message: str, rules: List[AuthErrorRule]):
    """Return (status_code, friendly_message) for the first matching rule, or None."""
    lowered = (message or "").lower()
    for phrase_groups, status_code, friendly in rules:
        for group in phrase_groups:
            if all(phrase in lowered for phrase in group):
                return status_code, friendly
    return None


def sign_in_error(message: str) -> Tuple[int, str]:
    return match_auth_error(message, SIGN_IN_ERRORS) or SIGN_IN_FALLBACK


def sign_up_error(message: str) -> Tuple[int, str]:
    return match_auth_error(message, SIGN_UP_ERRORS) or SIGN_UP_FALLBACK
