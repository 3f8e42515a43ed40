from app.domain.code_vault import CodeVault
from app.domain.enums import CodePurpose
from app.domain.errors import InvalidOrExpiredCode
from app.domain.services import normalize_email


def verify_reset_code(code_vault: CodeVault, email: str, code: str) -> None:
    """
    Pre-check a reset code. The code stays valid for the reset call that
    follows, so nothing is invalidated here.
    """
    normalized_email = normalize_email(email)
    if not code_vault.verify(normalized_email, code, CodePurpose.PASSWORD_RESET):
        raise InvalidOrExpiredCode()
