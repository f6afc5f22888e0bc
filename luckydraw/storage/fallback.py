"""Remote-first repository that degrades to the local tier."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..exceptions import NotFoundError, RemoteUnavailableError
from .base import FetchResult, FetchState, Record, Repository
from .local import LocalRepository

logger = logging.getLogger(__name__)


class FallbackRepository:
    """Dual-storage accessor for one entity.

    Each operation is attempted once against ``remote``. When the remote
    tier fails (:class:`RemoteUnavailableError`) the operation is replayed
    against ``local`` and the caller never sees the remote error. Only a
    failure of the local tier itself reaches the caller. The two tiers are
    never reconciled and may diverge.

    Parameters
    ----------
    remote : Repository
        Authoritative tier, usually a :class:`~luckydraw.storage.remote.SqlRepository`.
    local : LocalRepository
        Fallback tier.
    fallback_on_empty : bool, default: True
        When true, :meth:`get_all` also switches to the local tier if the
        remote read succeeds with zero rows. Set to false to treat an empty
        remote collection as authoritative.
    """

    def __init__(
        self,
        remote: Repository,
        local: LocalRepository,
        *,
        fallback_on_empty: bool = True,
    ) -> None:
        self.remote = remote
        self.local = local
        self.fallback_on_empty = fallback_on_empty

    @property
    def name(self) -> str:
        return self.local.spec.name

    def create(self, data: Record) -> Record:
        """Insert remotely, or locally when the remote insert fails.

        Raises
        ------
        PersistenceError
            If the local write fails as well.
        """
        try:
            record = self.remote.create(data)
        except RemoteUnavailableError as exc:
            logger.warning("%s; creating %s record in local storage", exc, self.name)
        else:
            return record
        return self.local.create(data)

    def fetch_remote(self) -> FetchResult:
        """Read the remote tier, mapping a failure to ``FetchState.FAILED``."""
        try:
            return self.remote.fetch_all()
        except RemoteUnavailableError as exc:
            logger.warning("%s; reading %s from local storage", exc, self.name)
            return FetchResult.failed()

    def fetch_all(self) -> FetchResult:
        """Like :meth:`get_all` but keeps the state of the tier that answered."""
        result = self.fetch_remote()
        if result.state is FetchState.OK:
            return result
        if result.state is FetchState.EMPTY and not self.fallback_on_empty:
            return result
        return self.local.fetch_all()

    def get_all(self) -> list[Record]:
        """Return the remote records, or the local ones when the remote gives none."""
        return self.fetch_all().records

    def get(self, record_id: Any) -> Optional[Record]:
        """Return the record from whichever tier holds it, or ``None``."""
        try:
            return self.remote.get(record_id)
        except (RemoteUnavailableError, NotFoundError):
            pass
        return self.local.find(record_id)

    def update(self, record_id: Any, fields: Record) -> Record:
        """Update remotely, or in the local tier when the remote cannot.

        Records created while the remote was down only exist locally, so a
        remote miss also falls through to the local tier.

        Raises
        ------
        NotFoundError
            If neither tier holds ``record_id``.
        """
        try:
            return self.remote.update(record_id, fields)
        except RemoteUnavailableError as exc:
            logger.warning("%s; updating %s %s in local storage", exc, self.name, record_id)
        except NotFoundError:
            logger.debug("%s %s not found remotely; trying local storage", self.name, record_id)
        return self.local.update(record_id, fields)

    def delete(self, record_id: Any) -> None:
        """Delete remotely, or from the local tier when the remote cannot.

        Raises
        ------
        NotFoundError
            If neither tier holds ``record_id``.
        """
        try:
            self.remote.delete(record_id)
            return
        except RemoteUnavailableError as exc:
            logger.warning("%s; deleting %s %s from local storage", exc, self.name, record_id)
        except NotFoundError:
            logger.debug("%s %s not found remotely; trying local storage", self.name, record_id)
        self.local.delete(record_id)


__all__ = ["FallbackRepository"]
