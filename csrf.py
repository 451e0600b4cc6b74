import time

from itsdangerous import BadSignature, URLSafeTimedSerializer

from config import get_settings


def _serializer() -> URLSafeTimedSerializer:
    settings = get_settings()
    return URLSafeTimedSerializer(settings.csrf_secret, salt="csrf-token")


def generate_csrf_token(client_id: str, max_age_hours: int = 2) -> str:
    serializer = _serializer()
    timestamp = int(time.time())
    expiry = timestamp + (max_age_hours * 3600)

    token_data = {"c": client_id, "exp": expiry}

    return serializer.dumps(token_data)


def validate_csrf_token(
    token: str, client_id: str, max_age_hours: int = 2
) -> bool:
    if not token or not client_id:
        return False
    serializer = _serializer()
    try:
        data = serializer.loads(token, max_age=max_age_hours * 3600)
    except BadSignature:
        return False

    if data.get("c") != client_id:
        return False

    return int(time.time()) <= data.get("exp", 0)
