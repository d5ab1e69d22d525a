"""Registry of live infoviews and infos, keyed by integer identity."""

from __future__ import annotations

import logging

from ..errors import UnknownInfoviewError
from .models import Info, Infoview

__all__ = ["InfoviewStore"]

LOGGER = logging.getLogger(__name__)


class InfoviewStore:
    """Owns every Infoview and Info and allocates their identifiers.

    Identifiers are monotonically increasing and never reissued, even after the
    object they named has been retired. Retired objects are remembered until
    :meth:`drain_retired` is called so that verification can account for them.
    """

    def __init__(self) -> None:
        self._infoviews: dict[int, Infoview] = {}
        self._infos: dict[int, Info] = {}
        self._by_tab: dict[int, int] = {}
        self._owners: dict[int, int] = {}
        self._last_infoview_id = 0
        self._last_info_id = 0
        self._retired_infoviews: list[Infoview] = []
        self._retired_infos: list[Info] = []

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------
    def mint_info(self, bufnr: int) -> Info:
        self._last_info_id += 1
        info = Info(id=self._last_info_id, bufnr=bufnr)
        self._infos[info.id] = info
        return info

    def mint_infoview(self, tab: int, info: Info) -> Infoview:
        if tab in self._by_tab:
            raise ValueError(f"Tab {tab} already has infoview {self._by_tab[tab]}")
        self._claim(info)
        self._last_infoview_id += 1
        infoview = Infoview(id=self._last_infoview_id, tab=tab, info=info)
        self._infoviews[infoview.id] = infoview
        self._by_tab[tab] = infoview.id
        self._owners[info.id] = infoview.id
        LOGGER.debug("Minted infoview %s for tab %s with info %s", infoview.id, tab, info.id)
        return infoview

    def replace_info(self, infoview: Infoview, info: Info) -> Info:
        """Hand ``info`` to ``infoview`` and retire the Info it owned before."""

        self._claim(info)
        previous = infoview.info
        infoview.info = info
        self._owners[info.id] = infoview.id
        self._retire_info(previous)
        LOGGER.debug("Infoview %s now owns info %s (was %s)", infoview.id, info.id, previous.id)
        return previous

    def retire(self, infoview: Infoview) -> None:
        """Forget ``infoview`` and the Info it owns."""

        if self._infoviews.get(infoview.id) is not infoview:
            raise UnknownInfoviewError(infoview.id)
        del self._infoviews[infoview.id]
        if self._by_tab.get(infoview.tab) == infoview.id:
            del self._by_tab[infoview.tab]
        self._retire_info(infoview.info)
        self._retired_infoviews.append(infoview)
        LOGGER.debug("Retired infoview %s", infoview.id)

    def drain_retired(self) -> tuple[list[Infoview], list[Info]]:
        infoviews, infos = self._retired_infoviews, self._retired_infos
        self._retired_infoviews, self._retired_infos = [], []
        return infoviews, infos

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def infoview(self, infoview_id: int) -> Infoview:
        try:
            return self._infoviews[infoview_id]
        except KeyError:
            raise UnknownInfoviewError(infoview_id) from None

    def get_infoview(self, infoview_id: int) -> Infoview | None:
        return self._infoviews.get(infoview_id)

    def get_info(self, info_id: int) -> Info | None:
        return self._infos.get(info_id)

    def for_tab(self, tab: int) -> Infoview | None:
        infoview_id = self._by_tab.get(tab)
        return self._infoviews.get(infoview_id) if infoview_id is not None else None

    def for_window(self, window: int) -> Infoview | None:
        for infoview in self._infoviews.values():
            if infoview.window == window:
                return infoview
        return None

    def owner_of(self, info_id: int) -> Infoview | None:
        owner = self._owners.get(info_id)
        return self._infoviews.get(owner) if owner is not None else None

    def infoviews(self) -> list[Infoview]:
        return [self._infoviews[key] for key in sorted(self._infoviews)]

    def infos(self) -> list[Info]:
        return [self._infos[key] for key in sorted(self._infos)]

    def is_live_info(self, info: Info) -> bool:
        return self._infos.get(info.id) is info

    @property
    def last_infoview_id(self) -> int:
        return self._last_infoview_id

    @property
    def last_info_id(self) -> int:
        return self._last_info_id

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _claim(self, info: Info) -> None:
        if self._infos.get(info.id) is not info:
            raise ValueError(f"Info {info.id} is not registered with this store")
        owner = self._owners.get(info.id)
        if owner is not None:
            raise ValueError(f"Info {info.id} is already owned by infoview {owner}")

    def _retire_info(self, info: Info) -> None:
        self._infos.pop(info.id, None)
        self._owners.pop(info.id, None)
        info.next_generation()
        self._retired_infos.append(info)
