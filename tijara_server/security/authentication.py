from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError, ExpiredSignatureError

from tijara_server.exception.UnauthorizedError import UnauthorizedError


class AuthSecurity:
    """JWT helpers shared by the HTTP layer and the Socket.IO gateway.

    Token issuance (login/registration) lives outside this service; here we
    only need to verify the caller identity and, for tests and tooling, mint
    tokens with the same secret.
    """
    secret_key = None
    algorithm = 'HS256'
    # Default: access token valid for 7 days
    access_token_expire_minutes = 7 * 24 * 60

    @classmethod
    def configure(cls, secret_key, algorithm='HS256', access_token_expire_minutes=7 * 24 * 60):
        cls.secret_key = secret_key
        cls.algorithm = algorithm
        cls.access_token_expire_minutes = access_token_expire_minutes

    @classmethod
    def encode_token(cls, data: dict, expires_delta: timedelta = None) -> str:
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=cls.access_token_expire_minutes))
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, cls.secret_key, algorithm=cls.algorithm)

    @classmethod
    def create_access_token(cls, user_id: str, role: str = 'USER', expires_delta: timedelta = None) -> str:
        return cls.encode_token({'user_id': user_id, 'role': role, 'type': 'access'}, expires_delta)

    @classmethod
    def decode_token(cls, token: str) -> dict:
        # A JWT always has exactly two dots
        if not token or token.count('.') != 2:
            raise UnauthorizedError("Malformed or missing token. Please provide a valid JWT token in the Authorization header.")
        if not cls.secret_key:
            raise UnauthorizedError("Authentication is not configured on this server.")
        try:
            payload = jwt.decode(token, cls.secret_key, algorithms=[cls.algorithm])
        except ExpiredSignatureError:
            raise UnauthorizedError("Token expired. Please login again or refresh your session.")
        except JWTError as e:
            msg = str(e)
            if 'Signature verification failed' in msg:
                raise UnauthorizedError("Invalid token signature. Please login again.")
            raise UnauthorizedError(f"Invalid token: {msg}.")
        if payload.get('type') not in (None, 'access'):
            raise UnauthorizedError("Invalid token type.")
        if not payload.get('user_id'):
            raise UnauthorizedError("Token does not identify a user.")
        return payload


def extract_bearer_token(header_value) -> str:
    if not header_value or not header_value.startswith('Bearer '):
        return ''
    return header_value.split(' ', 1)[1].strip()


def get_auth_payload(request):
    """
    Extracts and decodes the Bearer token from the Authorization header in the request.
    Raises UnauthorizedError if missing or invalid.
    Returns the decoded payload.
    """
    token = extract_bearer_token(request.headers.get('Authorization'))
    if not token:
        raise UnauthorizedError('Missing or invalid token')
    return AuthSecurity.decode_token(token)
