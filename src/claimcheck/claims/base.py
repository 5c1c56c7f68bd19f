"""Protocol for claim extraction."""

from typing import Protocol

from claimcheck.data import Claim


class ClaimExtractor(Protocol):
    """Interface for mining checkable assertions from generated prose."""

    def extract(self, content: str) -> list[Claim]:
        """Extract claims from content.

        Args:
            content: Article text.

        Returns:
            Claims in order of discovery, bounded by the extractor's limit.
        """
        ...
