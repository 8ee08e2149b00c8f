from abc import ABC, abstractmethod
from typing import Optional

from intersim.domain.models import Axis, Density

class Controller(ABC):
    """Green-time policy consulted by the signal phase controller."""

    name = "base"

    @abstractmethod
    def green_duration(self, axis: Axis, density: Optional[Density]) -> int:
        pass
