"""
Base Candidate Source

Common interface for the data sources tried by the candidate fallback chain.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

import structlog

from ....models.metadata_models import CandidateTrack, Seed
from ...provider_gateway import ProviderGateway


@dataclass
class TierOutcome:
    """
    What one source produced for a seed.

    ``settled`` marks a tier that applied to the seed: the chain stops there
    even when the candidate list is empty.
    """
    candidates: List[CandidateTrack] = field(default_factory=list)
    settled: bool = False


class BaseCandidateSource(ABC):
    """
    Abstract base class for all candidate sources.

    A source produces an ordered candidate list for one seed, or an empty
    list when it has nothing to offer. Sources never raise for provider
    failures.
    """

    name = "base"

    def __init__(self, gateway: ProviderGateway):
        """
        Initialize the candidate source.

        Args:
            gateway: Provider gateway used for lookups
        """
        self.gateway = gateway
        self.logger = structlog.get_logger(__name__).bind(source=self.name)

    @abstractmethod
    async def generate(self, seed: Seed) -> List[CandidateTrack]:
        """
        Produce candidates for a seed.

        Args:
            seed: Resolved seed

        Returns:
            Candidates in provider order (best first)
        """
        pass

    async def outcome(self, seed: Seed) -> TierOutcome:
        """Run the source. By default the chain only stops here on surviving candidates."""
        return TierOutcome(candidates=await self.generate(seed))
