"""Self-describing binary envelope for cached values.

Every cached value is stored as one flag byte followed by the payload:

    +------+--------------------------------+
    | flag | payload (gzip when flag says)  |
    +------+--------------------------------+

Flags:
- 0x01: UTF-8 text
- 0x02: UTF-8 text, gzip
- 0x03: structured JSON
- 0x04: structured JSON, gzip

Strings skip JSON quoting and take the text path. Anything else is
serialized with orjson. Payloads at or above the compression threshold
are gzipped. Unknown flags are logged and decoded as structured JSON.

Example:
    codec = EnvelopeCodec(compression_threshold=2048)
    envelope = codec.encode([CharacterResponse(...)])
    characters = codec.decode(envelope, list[CharacterResponse])
"""

from __future__ import annotations

import gzip
import logging
import zlib
from enum import IntEnum
from functools import lru_cache
from typing import Any, TypeVar, cast

import orjson
from pydantic import BaseModel, TypeAdapter, ValidationError

from catalog.cache.errors import CacheDecodeError, CacheEncodeError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_COMPRESSION_THRESHOLD = 2048
DEFAULT_COMPRESSION_LEVEL = 1


class EnvelopeFlag(IntEnum):
    """Leading byte of an envelope; fully determines how to read the payload."""

    PLAIN_TEXT = 0x01
    PLAIN_TEXT_GZIP = 0x02
    STRUCTURED = 0x03
    STRUCTURED_GZIP = 0x04

    @property
    def is_text(self) -> bool:
        return self in (EnvelopeFlag.PLAIN_TEXT, EnvelopeFlag.PLAIN_TEXT_GZIP)

    @property
    def is_compressed(self) -> bool:
        return self in (EnvelopeFlag.PLAIN_TEXT_GZIP, EnvelopeFlag.STRUCTURED_GZIP)

    def compressed(self) -> EnvelopeFlag:
        """Return the gzip variant of this flag."""
        if self.is_text:
            return EnvelopeFlag.PLAIN_TEXT_GZIP
        return EnvelopeFlag.STRUCTURED_GZIP


@lru_cache(maxsize=256)
def _adapter(as_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(as_type)


def _default(value: Any) -> Any:
    """orjson fallback for types it does not serialize natively."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (set, frozenset)):
        return list(value)
    raise TypeError(f"Type is not cacheable: {type(value).__name__}")


class EnvelopeCodec:
    """Encode values to envelopes and back.

    Encoding and decoding are synchronous and CPU-bound; callers do the I/O.
    """

    def __init__(
        self,
        compression_threshold: int = DEFAULT_COMPRESSION_THRESHOLD,
        compression_level: int = DEFAULT_COMPRESSION_LEVEL,
    ):
        if compression_threshold < 1:
            raise ValueError("compression_threshold must be positive")
        self.compression_threshold = compression_threshold
        self.compression_level = compression_level

    # -------------------------------------------------------------------------
    # Encoding
    # -------------------------------------------------------------------------

    def encode(self, value: Any) -> bytes:
        """Serialize a value into a flag-prefixed envelope."""
        if isinstance(value, str):
            flag = EnvelopeFlag.PLAIN_TEXT
            payload = self._dump_text(value)
        else:
            flag = EnvelopeFlag.STRUCTURED
            payload = self._dump_structured(value)

        if len(payload) >= self.compression_threshold:
            flag = flag.compressed()
            payload = gzip.compress(payload, compresslevel=self.compression_level, mtime=0)

        return bytes((flag,)) + payload

    @staticmethod
    def _dump_text(value: str) -> bytes:
        try:
            return value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise CacheEncodeError(f"Text is not encodable as UTF-8: {e.reason}") from e

    @staticmethod
    def _dump_structured(value: Any) -> bytes:
        try:
            return orjson.dumps(value, default=_default, option=orjson.OPT_NON_STR_KEYS)
        except TypeError as e:
            raise CacheEncodeError(f"Cannot serialize {type(value).__name__}: {e}") from e

    # -------------------------------------------------------------------------
    # Decoding
    # -------------------------------------------------------------------------

    def decode(self, envelope: bytes, as_type: type[T]) -> T | None:
        """Deserialize an envelope into ``as_type``.

        Returns None for an empty envelope. A text envelope requested as
        anything other than ``str`` is parsed as structured JSON instead;
        that fallback is intentionally loose and fails if the text is not
        valid JSON for the requested type.

        Raises:
            CacheDecodeError: corrupt gzip stream or undecodable payload
        """
        if not envelope:
            return None

        raw_flag = envelope[0]
        payload = bytes(envelope[1:])

        try:
            flag = EnvelopeFlag(raw_flag)
        except ValueError:
            logger.warning(
                f"Unknown cache envelope flag {raw_flag:#04x}, attempting structured decode",
                extra={"envelope_flag": raw_flag},
            )
            return self._load_structured(payload, as_type, raw_flag)

        if flag.is_compressed:
            payload = self._gunzip(payload, flag)

        if flag.is_text and as_type is str:
            try:
                return cast(T, payload.decode("utf-8"))
            except UnicodeDecodeError as e:
                raise CacheDecodeError("Text envelope is not valid UTF-8", flag) from e

        return self._load_structured(payload, as_type, flag)

    @staticmethod
    def _gunzip(payload: bytes, flag: int) -> bytes:
        try:
            return gzip.decompress(payload)
        except (OSError, EOFError, zlib.error) as e:
            raise CacheDecodeError(f"Corrupt gzip payload for flag {flag:#04x}", flag) from e

    @staticmethod
    def _load_structured(payload: bytes, as_type: type[T], flag: int) -> T | None:
        try:
            data = orjson.loads(payload)
            if as_type is object or as_type is Any:
                return cast(T, data)
            return cast(T, _adapter(as_type).validate_python(data))
        except (orjson.JSONDecodeError, ValidationError) as e:
            raise CacheDecodeError(
                f"Cannot decode payload (flag {flag:#04x}) as {as_type!r}", flag
            ) from e
