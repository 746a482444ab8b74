"""Typed auth errors raised by the client, with localized user-facing messages."""

DEFAULT_LOCALE = "fr"


class AuthClientError(Exception):
    """Auth call failed; code identifies the failure for the UI."""

    code = "auth/unknown"

    def __init__(self, message: str = "", status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message or self.code)


class InvalidCredential(AuthClientError):
    code = "auth/invalid-credential"


class InvalidEmail(AuthClientError):
    code = "auth/invalid-email"


class WeakPassword(AuthClientError):
    code = "auth/weak-password"


class EmailInUse(AuthClientError):
    code = "auth/email-already-in-use"


MESSAGES: dict[str, dict[str, str]] = {
    "fr": {
        InvalidCredential.code: "E-mail ou mot de passe invalide.",
        InvalidEmail.code: "Format d'e-mail invalide.",
        WeakPassword.code: "Le mot de passe doit contenir au moins 6 caractères.",
        EmailInUse.code: "Cet e-mail est déjà utilisé.",
        "generic": "Échec de l'opération. Veuillez réessayer.",
    },
    "en": {
        InvalidCredential.code: "Invalid email or password.",
        InvalidEmail.code: "Invalid email format.",
        WeakPassword.code: "Password must be at least 6 characters long.",
        EmailInUse.code: "This email is already in use.",
        "generic": "Something went wrong. Please try again.",
    },
}


def describe_error(error: BaseException, locale: str = DEFAULT_LOCALE) -> str:
    """Message to show for error. Unknown codes fall back to the generic message."""
    table = MESSAGES.get(locale) or MESSAGES[DEFAULT_LOCALE]
    code = getattr(error, "code", None)
    if code in table:
        return table[code]
    return table["generic"]
