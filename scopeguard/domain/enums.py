"""String enums shared by models, schemas and the matching engine.

Columns store the plain ``.value`` strings.
"""

from enum import Enum


class OwnerType(str, Enum):
    TENANT = "tenant"
    SUBSIDIARY = "subsidiary"
    TALENT = "talent"


class PatternType(str, Enum):
    KEYWORD = "keyword"
    REGEX = "regex"
    WILDCARD = "wildcard"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.LOW: 1, Severity.MEDIUM: 2, Severity.HIGH: 3}


class Action(str, Enum):
    ALLOW = "allow"
    REPLACE = "replace"
    FLAG = "flag"
    REJECT = "reject"

    @property
    def priority(self) -> int:
        return _ACTION_PRIORITY[self]


_ACTION_PRIORITY = {Action.ALLOW: 0, Action.REPLACE: 1, Action.FLAG: 2, Action.REJECT: 3}


class ChangeAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    REACTIVATE = "reactivate"
    DISABLE = "disable"
    ENABLE = "enable"


def severity_rank(value: str) -> int:
    """Rank a stored severity string; unknown values sort lowest."""
    try:
        return Severity(value).rank
    except ValueError:
        return 0
