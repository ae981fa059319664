from abc import ABC, abstractmethod
from typing import Iterable


class PacketSource(ABC):
    """
    Abstract packet source.
    Offline only: reads frames that were captured earlier.
    """

    @abstractmethod
    def packets(self) -> Iterable[object]:
        """
        Yield packets one-by-one.
        Failures surface as CaptureOpenError / CaptureReadError.
        """
        raise NotImplementedError
