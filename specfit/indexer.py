"""Mapping of (component, dataset, stellar parameter) to a global parameter slot."""

from __future__ import annotations

from collections.abc import Iterable

STELLAR_PARAMS = ("vrad", "vsini", "zeta", "teff", "logg", "xi", "z", "he")
N_STELLAR_PARAMS = len(STELLAR_PARAMS)


class ParameterIndexer:
    """Positions of the stellar parameters in the unified parameter vector.

    A tied parameter shares one slot among all datasets of a component; an
    untied parameter gets one slot per dataset.  Parameters are numbered
    component by component, in the order of :data:`STELLAR_PARAMS`.
    """

    def __init__(self) -> None:
        self.idx: list[list[list[int]]] = []
        self.total_stellar_params = 0

    @property
    def n_components(self) -> int:
        """Number of stellar components covered."""
        return len(self.idx)

    @property
    def n_datasets(self) -> int:
        """Number of datasets covered."""
        return len(self.idx[0]) if self.idx else 0

    def build(
        self, n_components: int, n_datasets: int, untie_params: Iterable[str] = ()
    ) -> "ParameterIndexer":
        """Assign slots for ``n_components`` x ``n_datasets``; returns ``self``."""
        if n_components < 0 or n_datasets < 0:
            raise ValueError("ParameterIndexer.build: counts must not be negative")
        untied = set(untie_params)
        idx = [
            [[0] * N_STELLAR_PARAMS for _ in range(n_datasets)]
            for _ in range(n_components)
        ]
        total = 0
        for comp in idx:
            for p, name in enumerate(STELLAR_PARAMS):
                if name in untied:
                    for row in comp:
                        row[p] = total
                        total += 1
                elif comp:
                    for row in comp:
                        row[p] = total
                    total += 1
        self.idx = idx
        self.total_stellar_params = total
        return self

    def get(self, comp: int, dataset: int, par: int) -> int:
        """Global slot of parameter ``par`` of component ``comp`` in ``dataset``."""
        if comp < 0 or dataset < 0 or par < 0:
            raise IndexError("ParameterIndexer.get: negative index")
        return self.idx[comp][dataset][par]