"""
OpenAI credential pool with round-robin rotation.

Keys are merged at startup from three sources, in order:
  OPENAI_API_KEY          single key
  OPENAI_API_KEY_1..N     numbered keys, stops at the first missing one
  OPENAI_API_KEYS         comma-separated list

Usage:
    rotator = CredentialRotator(load_credentials())
    key = rotator.current()
    rotator.rotate()
"""
import os
from typing import List, Mapping, Optional

from app.utils.logger import get_logger

logger = get_logger("credentials")


def load_credentials(environ: Mapping[str, str] = None) -> List[str]:
    """Collect, strip and de-duplicate API keys (first occurrence wins)."""
    environ = os.environ if environ is None else environ
    keys: List[str] = []

    single = (environ.get("OPENAI_API_KEY") or "").strip()
    if single:
        keys.append(single)

    index = 1
    while True:
        key = (environ.get(f"OPENAI_API_KEY_{index}") or "").strip()
        if not key:
            break
        keys.append(key)
        index += 1

    listed = environ.get("OPENAI_API_KEYS") or ""
    keys.extend(k.strip() for k in listed.split(",") if k.strip())

    unique = list(dict.fromkeys(keys))

    if unique:
        logger.info(f"Initialized {len(unique)} OpenAI API key(s)")
    else:
        logger.warning(
            "No OpenAI API keys found. AI features will use fallback responses. "
            "Set OPENAI_API_KEY, OPENAI_API_KEY_1..N or OPENAI_API_KEYS=key1,key2"
        )
    return unique


class CredentialRotator:
    """Ordered key pool shared by every request in the process.

    Rotation is a plain index update without locking; a request racing a
    rotation just uses the key being superseded, which is still valid.
    """

    def __init__(self, keys: List[str]):
        self._keys = list(dict.fromkeys(keys))
        self._index = 0

    @property
    def size(self) -> int:
        return len(self._keys)

    @property
    def index(self) -> int:
        return self._index

    def has_credential(self) -> bool:
        return bool(self._keys)

    def current(self) -> Optional[str]:
        if not self._keys:
            return None
        return self._keys[self._index]

    def rotate(self) -> None:
        if len(self._keys) <= 1:
            return
        self._index = (self._index + 1) % len(self._keys)
        logger.info(
            f"Rotated to API key {self._index + 1} of {len(self._keys)}",
            extra={"key_index": self._index},
        )
