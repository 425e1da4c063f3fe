"""Permission sets: the capability tokens granted to one user."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from estate_admin.access.roles import Role, parse_role


def normalize_tokens(raw: object) -> frozenset[str]:
    """Coerce a stored permission list into a set of tokens.

    Anything that is not a list/tuple/set of strings is treated as an empty
    grant: a malformed record is fully restrictive, never an error.
    """
    if not isinstance(raw, (list, tuple, set, frozenset)):
        return frozenset()
    return frozenset(
        token.strip() for token in raw if isinstance(token, str) and token.strip()
    )


@dataclass(frozen=True)
class PermissionSet:
    """Capabilities held by one user, bound to that user's role.

    Admins implicitly hold every capability, so both checks short-circuit
    for them without looking at the granted tokens.
    """

    role: Role
    tokens: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def for_user(cls, role: Role | str, record: object = None) -> "PermissionSet":
        """Build from a role token and a raw permission record.

        `record` may be None (never provisioned), a list of tokens, or a
        mapping with a `permissions` key as stored in the document store.
        """
        if isinstance(record, dict):
            record = record.get("permissions")
        return cls(role=parse_role(role) or Role.USER, tokens=normalize_tokens(record))

    @classmethod
    def empty(cls, role: Role | str) -> "PermissionSet":
        return cls.for_user(role)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def has_any(self, required: Iterable[str]) -> bool:
        required = frozenset(required)
        if not required or self.is_admin:
            return True
        return not self.tokens.isdisjoint(required)

    def has_all(self, required: Iterable[str]) -> bool:
        if self.is_admin:
            return True
        return frozenset(required) <= self.tokens

    def __contains__(self, token: object) -> bool:
        return self.is_admin or token in self.tokens

    def as_list(self) -> list[str]:
        return sorted(self.tokens)
