import hashlib
import hmac
import logging
import re
import secrets

from planty.core.exceptions import StorageError
from planty.core.settings import settings
from planty.core.store import PlantStore
from planty.models.api_key import IssuedKey
from planty.models.tables.user import User

logger = logging.getLogger(__name__)

# 32 random bytes, url-safe base64 encoded
TOKEN_BYTES = 32
HASH_PATTERN = re.compile(r"^[0-9a-f]{64}$")


class CredentialManager:
    """
    Issues and verifies bearer api keys.

    Only an HMAC-SHA256 of each key is stored, together with a short
    plaintext prefix so users can tell their keys apart. The plaintext key
    is returned once by :meth:`issue` and never written anywhere.
    """

    def __init__(
            self,
            store: PlantStore,
            secret_key: str = settings.SECRET_KEY,
            prefix: str = settings.API_KEY_PREFIX,
            display_length: int = settings.API_KEY_DISPLAY_LENGTH,
    ):
        self.store = store
        self.prefix = prefix
        self.display_length = display_length
        self._secret = secret_key.encode()
        self._pattern = re.compile("^" + re.escape(prefix) + r"[A-Za-z0-9_-]+$")

    def generate_token(self) -> str:
        return self.prefix + secrets.token_urlsafe(TOKEN_BYTES)

    def hash_token(self, token: str) -> str:
        return hmac.new(self._secret, token.encode(), hashlib.sha256).hexdigest()

    def is_well_formed(self, token: str) -> bool:
        return self._pattern.match(token) is not None

    def issue(self, user_id: str) -> str:
        token = self.generate_token()
        key_prefix = token[:self.display_length]
        self.store.add_api_key(
            user_id=user_id,
            key_hash=self.hash_token(token),
            key_prefix=key_prefix,
        )
        logger.info(f"issued api key {key_prefix}... for user {user_id}")
        return token

    def create_identity(self, email: str | None = None) -> IssuedKey:
        # a new identity never takes over an account that already owns the email
        user_id = self.store.create_user(email, existing_ok=False)
        return IssuedKey(api_key=self.issue(user_id), user_id=user_id)

    def resolve(self, token: str) -> User | None:
        # cheap format check before touching the database
        if not self.is_well_formed(token):
            return None

        key_hash = self.hash_token(token)
        user = self.store.find_user_by_key_hash(key_hash)
        if user is None:
            return None

        try:
            self.store.touch_api_key(key_hash)
        except StorageError as e:
            logger.warning(f"could not record api key usage for user {user.id}: {e}")

        return user

    def revoke(self, token_or_hash: str) -> bool:
        if HASH_PATTERN.match(token_or_hash):
            key_hash = token_or_hash
        else:
            key_hash = self.hash_token(token_or_hash)
        return self.store.deactivate_api_key(key_hash)
