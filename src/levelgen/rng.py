from __future__ import annotations

import hashlib
import logging
import random
import secrets
from dataclasses import dataclass, field
from typing import Any, List, MutableSequence, Optional, Sequence, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


def derive_seed(source: str) -> int:
    """Derive a 64-bit integer seed from an arbitrary string using SHA256."""
    digest = hashlib.sha256(source.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big", signed=False)


@dataclass
class RandomSource:
    """
    A thin wrapper around random.Random to:
    - centralize RNG handling for the catalog, the generator and room placement
    - support deterministic seeding for tests (int or string seeds)
    - remember the effective seed so an unseeded run can be reproduced later
    """

    seed: Optional[Union[int, str]] = None
    effective_seed: int = field(init=False)

    def __post_init__(self) -> None:
        if self.seed is None:
            self.effective_seed = secrets.randbits(64)
            logger.info("No seed provided; generated random seed: %d", self.effective_seed)
        elif isinstance(self.seed, int):
            self.effective_seed = self.seed
        else:
            self.effective_seed = derive_seed(str(self.seed))
        self._rng = random.Random(self.effective_seed)
        logger.debug("Initialized RandomSource with seed=%r (effective=%d)", self.seed, self.effective_seed)

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def random(self) -> float:
        return self._rng.random()

    def choice(self, seq: Sequence[T]) -> T:
        if not seq:
            raise ValueError("RandomSource.choice() received an empty sequence")
        return seq[self._rng.randrange(0, len(seq))]

    def shuffle(self, items: MutableSequence[Any]) -> None:
        self._rng.shuffle(items)

    def shuffled(self, items: Sequence[T]) -> List[T]:
        out = list(items)
        self._rng.shuffle(out)
        return out


__all__ = ["RandomSource", "derive_seed"]
