"""Change log repository. Rows are append-only: only create and list are used."""

from scopeguard.domain.logs import ChangeLog
from scopeguard.repositories.base import BaseRepository


class ChangeLogRepository(BaseRepository[ChangeLog]):
    model = ChangeLog
