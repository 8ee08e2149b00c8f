from typing import Iterable, Tuple

from intersim.domain.models import Vehicle

class VehicleFeed:
    """Single-writer, multi-reader handoff of a vehicle set between kernels.

    The leader publishes a copy of its vehicles after every tick; followers
    only ever see immutable snapshots, so nothing they do reaches the
    leader's registry.
    """

    def __init__(self):
        self.version = 0
        self.tick_id = 0
        self._owner = None
        self._snapshot: Tuple[Vehicle, ...] = ()

    def claim(self, owner) -> None:
        if self._owner is not None and self._owner is not owner:
            raise RuntimeError("vehicle feed already has a publisher")
        self._owner = owner

    def publish(self, owner, tick_id: int, vehicles: Iterable[Vehicle]) -> None:
        if owner is not self._owner:
            raise RuntimeError("only the claiming kernel may publish to this feed")
        self._snapshot = tuple(v.model_copy() for v in vehicles)
        self.tick_id = tick_id
        self.version += 1

    def latest(self) -> Tuple[Vehicle, ...]:
        return tuple(v.model_copy() for v in self._snapshot)
