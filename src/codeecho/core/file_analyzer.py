"""
File analysis module for codeecho.

This module handles individual blob processing:
- Binary file detection by extension
- Base64 payload decoding with encoding fallbacks
- Token estimation
"""

import base64
import binascii
import logging
from typing import Any, Mapping, Optional

from .models import Config
from .tokenizer import TokenCounter

logger = logging.getLogger(__name__)


class FileAnalyzer:
    """Handles blob analysis and content extraction."""

    def __init__(self, config: Config):
        self.config = config
        self.token_counter = TokenCounter(config.token_encoder)
        self._binary_suffixes = tuple(ext.lower() for ext in config.binary_extensions)

    def is_binary_file(self, file_path: str) -> bool:
        """
        Check the path against the binary extension list.

        The match is a case-insensitive suffix test on the whole path,
        so ``LOGO.PNG`` is binary and ``png`` alone is not.
        """
        return file_path.lower().endswith(self._binary_suffixes)

    def decode_blob(self, payload: Any) -> Optional[str]:
        """
        Decode a blob payload of the form ``{encoding, content}``.

        Only base64 payloads with non-empty content are decodable.

        Returns:
            The decoded text, or None when the payload has an unexpected
            shape, an unsupported encoding, or cannot be decoded.
        """
        if not isinstance(payload, Mapping):
            return None

        if payload.get('encoding') != 'base64':
            return None

        content_b64 = payload.get('content')
        if not content_b64 or not isinstance(content_b64, str):
            return None

        try:
            raw = base64.b64decode(content_b64.replace('\n', ''))
        except (binascii.Error, ValueError) as e:
            logger.debug(f"Invalid base64 payload: {e}")
            return None

        for encoding in self.config.encoding_fallbacks:
            try:
                return raw.decode(encoding)
            except UnicodeDecodeError:
                continue

        return None

    def count_tokens(self, text: str) -> int:
        """Approximate token cost of text (see TokenCounter.estimate_tokens)."""
        return self.token_counter.estimate_tokens(text)
