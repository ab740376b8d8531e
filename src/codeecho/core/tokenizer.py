"""
Token counting functionality for codeecho.

The export total is an approximation: one token per four characters,
rounded up. ``TokenCounter.count`` gives an exact tiktoken count for
callers that want to compare the estimate against a real encoder.
"""

import logging
import math
from typing import Any, Optional

import tiktoken

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4


class TokenCounter:
    """
    Handles token counting for text content.

    The tiktoken encoder is loaded on first use, since fetching the
    encoding may need network access.
    """

    def __init__(self, encoding_name: str = "cl100k_base"):
        """
        Initialize the token counter.

        Args:
            encoding_name: The name of the tiktoken encoding to use.
                         Default is cl100k_base (used by GPT-4).
        """
        self.encoding_name = encoding_name
        self.encoder: Optional[Any] = None
        self._load_failed = False

    def _get_encoder(self) -> Optional[Any]:
        if self.encoder is None and not self._load_failed:
            try:
                self.encoder = tiktoken.get_encoding(self.encoding_name)
            except Exception as e:
                self._load_failed = True
                logger.warning(f"Failed to initialize token encoder '{self.encoding_name}': {e}")
        return self.encoder

    def count(self, text: str) -> int:
        """
        Count tokens in the given text with tiktoken.

        Args:
            text: The text to count tokens for.

        Returns:
            Number of tokens, or 0 if counting is unavailable.
        """
        if not text:
            return 0

        encoder = self._get_encoder()
        if encoder is None:
            return 0

        try:
            return len(encoder.encode(text))
        except Exception as e:
            logger.debug(f"Error counting tokens: {e}")
            return 0

    @staticmethod
    def estimate_tokens(text: str) -> int:
        """
        Estimate token count as ceil(characters / 4).

        This is a rough heuristic, not a tokenizer.

        Args:
            text: The text to estimate tokens for.

        Returns:
            Estimated number of tokens.
        """
        if not text:
            return 0
        return math.ceil(len(text) / CHARS_PER_TOKEN)
