"""
JWT token signer adapter - Implements TokenSigner protocol.

Access tokens are HS256 JWTs carrying the account id and email. They are
never stored; validity is the signature plus the ``exp`` claim.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from src.domain.exceptions import InvalidToken
from src.domain.models import TokenClaims


class JwtTokenSigner:
    """
    Implements TokenSigner protocol via python-jose.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expires_minutes: int = 720) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expires = timedelta(minutes=expires_minutes)

    def sign(self, account_id: int, email: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(account_id),
            "accountId": account_id,
            "email": email,
            "iat": now,
            "exp": now + self._expires,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            raise InvalidToken(str(e)) from e

        account_id = payload.get("accountId")
        email = payload.get("email")
        if not isinstance(account_id, int) or not isinstance(email, str):
            raise InvalidToken("Token is missing account claims")
        return TokenClaims(account_id=account_id, email=email)
