"""Named fit parameters with a frozen flag."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Parameter:
    """A parameter value and whether it is held fixed."""

    value: float = 0.0
    frozen: bool = False


class FitParameters:
    """Mapping from parameter name to :class:`Parameter`."""

    def __init__(self) -> None:
        self._params: dict[str, Parameter] = {}

    def set(self, name: str, value: float, frozen: bool) -> None:
        """Store ``value`` and ``frozen`` under ``name``, replacing any entry."""
        self._params[name] = Parameter(float(value), bool(frozen))

    def __getitem__(self, name: str) -> Parameter:
        """Return the entry for ``name``, creating a zero, free one if missing."""
        return self._params.setdefault(name, Parameter())

    def at(self, name: str) -> Parameter:
        """Return the entry for ``name``; raise KeyError if it does not exist."""
        try:
            return self._params[name]
        except KeyError:
            raise KeyError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._params

    def __len__(self) -> int:
        return len(self._params)