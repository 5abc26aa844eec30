import jwt, datetime, bcrypt
from eldercare.config import settings

def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")

def verify_password(plain: str, hashed: str) -> bool:
    # hashed es bcrypt (formato $2a$/$2b$...)
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False

def create_access_token(user_id: int, username: str, role: str, expires_hours: int | None = None) -> str:
    now = datetime.datetime.now(datetime.timezone.utc)
    hours = settings.token_expire_hours if expires_hours is None else expires_hours
    payload = {
        "id": user_id,
        "username": username,
        "role": role,
        "iat": now,
        "exp": now + datetime.timedelta(hours=hours),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_alg)

def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_alg])
