"""
Exception classes for the Eventoria API.

Every domain error is an HTTPException carrying a Romanian, user-facing
message, a stable error code and, for form submissions, the per-field errors.
"""

from typing import Dict, List, Optional
from fastapi import HTTPException, status


GENERIC_ERROR_MESSAGE = "A apărut o eroare. Vă rugăm să încercați din nou."
FORM_ERROR_MESSAGE = "Vă rugăm să corectați erorile din formular"

# Authentication error codes and the message shown for each of them
AUTH_ERROR_MESSAGES = {
    "email-already-in-use": "Această adresă de email este deja folosită de un alt cont.",
    "invalid-email": "Adresa de email nu este validă.",
    "weak-password": "Parola este prea slabă. Alegeți o parolă cu cel puțin 6 caractere.",
    "invalid-credential": "Email-ul sau parola introdusă sunt incorecte. Vă rugăm să verificați datele și să încercați din nou.",
    "user-not-found": "Nu există niciun cont cu această adresă de email.",
    "user-disabled": "Acest cont a fost dezactivat. Contactați administratorul.",
    "invalid-token": "Sesiunea a expirat. Vă rugăm să vă autentificați din nou.",
}


def auth_error_message(code: str) -> str:
    return AUTH_ERROR_MESSAGES.get(code, GENERIC_ERROR_MESSAGE)


class EventoriaError(HTTPException):
    """Base class for all errors rendered to API clients"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        field_errors: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code or self.__class__.__name__
        self.field_errors = field_errors or {}


class NotFoundError(EventoriaError):
    def __init__(self, detail: str, error_code: str = "not-found"):
        super().__init__(status.HTTP_404_NOT_FOUND, detail, error_code)


class PermissionDeniedError(EventoriaError):
    def __init__(self, detail: str, error_code: str = "permission-denied"):
        super().__init__(status.HTTP_403_FORBIDDEN, detail, error_code)


class ConflictError(EventoriaError):
    """The document is no longer in the state the operation expects"""

    def __init__(self, detail: str, error_code: str = "conflict"):
        super().__init__(status.HTTP_409_CONFLICT, detail, error_code)


class FormValidationError(EventoriaError):
    def __init__(self, field_errors: Dict[str, str], detail: str = FORM_ERROR_MESSAGE):
        super().__init__(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail,
            "validation-failed",
            field_errors=field_errors,
        )


class AuthError(EventoriaError):
    """Authentication failure identified by one of AUTH_ERROR_MESSAGES' codes"""

    def __init__(self, code: str, status_code: int = status.HTTP_401_UNAUTHORIZED):
        super().__init__(
            status_code,
            auth_error_message(code),
            code,
            headers={"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None,
        )


class CascadeError(EventoriaError):
    """A multi-collection delete failed; `unrestored` lists collections the rollback could not repair"""

    def __init__(self, detail: str, failed_step: str, unrestored: Optional[List[str]] = None):
        self.unrestored = unrestored or []
        super().__init__(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail,
            "cascade-incomplete" if self.unrestored else "cascade-failed",
            field_errors={name: "Datele nu au putut fi restaurate" for name in self.unrestored},
        )
        self.failed_step = failed_step
