"""BaseService — foundation for all boardctl services.

Every service receives a :class:`Store` at construction time. The Store
provides transactional access to the ordered card tables and owns the plugin
event bus. Services own their transaction boundaries via
``self._store.transaction()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from boardctl.services.notifier import SideEffectNotifier

if TYPE_CHECKING:
    from boardctl.infrastructure.store import Store


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class CardService(BaseService):
            def delete_card(self, card_id: str, actor_id: str) -> ServiceResult:
                with self._store.transaction() as txn:
                    ...
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    @property
    def _notifier(self) -> SideEffectNotifier:
        return SideEffectNotifier(self._store.event_bus)
