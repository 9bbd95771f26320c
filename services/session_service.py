import base64
import binascii
import json
import time
from typing import Optional

from pydantic import ValidationError

from core.config import settings
from core.logger import logger
from db.store import KeyValueStore, Raw
from models.session import SessionSnapshot


class SessionStateService:
    """Reads and writes session snapshots under "<namespace>:<key>".

    With `encrypt` on, the JSON is base64 encoded. That only hides the payload
    from casual inspection; it is not encryption.
    """

    def __init__(self, store: KeyValueStore, namespace: Optional[str] = None, encrypt: bool = False):
        self.store = store
        self.namespace = settings.QUIZ_STORAGE_NAMESPACE if namespace is None else namespace
        self.encrypt = encrypt

    def storage_key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def encode(self, snapshot: SessionSnapshot) -> str:
        payload = snapshot.model_dump_json(by_alias=True)
        if self.encrypt:
            return base64.b64encode(payload.encode("utf-8")).decode("ascii")
        return payload

    def decode(self, raw: Raw) -> Optional[SessionSnapshot]:
        """Parse a stored payload, returning None if it is unreadable."""
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            payload = base64.b64decode(raw, validate=True).decode("utf-8") if self.encrypt else raw
            return SessionSnapshot.model_validate(json.loads(payload))
        except (binascii.Error, UnicodeDecodeError, ValueError, ValidationError) as e:
            logger.warning("Invalid saved state", error=str(e))
            return None

    async def save(self, key: str, snapshot: SessionSnapshot):
        if snapshot.saved_at is None:
            snapshot = snapshot.model_copy(update={"saved_at": time.time()})
        storage_key = self.storage_key(key)
        await self.store.set(storage_key, self.encode(snapshot))
        logger.info("Session state saved", key=storage_key, step=snapshot.current_question_index,
                    status=snapshot.status.value)

    async def load(self, key: str) -> Optional[SessionSnapshot]:
        storage_key = self.storage_key(key)
        raw = await self.store.get(storage_key)
        if not raw:
            return None
        snapshot = self.decode(raw)
        if snapshot is not None:
            logger.info("Session state loaded", key=storage_key, step=snapshot.current_question_index)
        return snapshot
