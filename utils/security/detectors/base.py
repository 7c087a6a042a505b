"""
Detector protocol shared by every analysis rule.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import DeviceState, Finding, Observation


class Detector(ABC):
    """
    A single vulnerability detection rule.

    ``analyze`` must not raise on missing or malformed data; absence of the
    data a rule needs simply means no finding. Unless a detector documents
    otherwise it must not modify the DeviceState it is given.
    """

    detector_id: str = ''
    name: str = ''

    @abstractmethod
    def analyze(self, observation: Observation, device: DeviceState) -> list[Finding]:
        """Return the findings for this observation and device history."""

    def reset(self) -> None:
        """Clear any internal state. Stateless detectors need not override."""

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.detector_id!r})'
