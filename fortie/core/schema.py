"""
Attribute Schema and Schema Filter.

Every provider declares which attributes Fortnox may return (readable),
which of those may be sent (writeable) and which must be present on
create/update. Before a body leaves the client it is filtered against
those declarations:

1. unknown attributes are dropped silently
2. read-only attributes are dropped silently
3. all required attributes must have survived, otherwise
   MissingRequiredAttributeError is raised with the full required set
4. the surviving mapping is nested under the wrapper key
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .exceptions import MissingRequiredAttributeError, SchemaDefinitionError


@dataclass(frozen=True)
class AttributeSchema:
    """
    Attribute declarations of one Fortnox resource.

    Attributes:
        readable: All attributes the remote entity may contain
        writeable: Attributes accepted on create/update
        required_create: Attributes a create request must carry
        required_update: Attributes an update request must carry
    """
    readable: frozenset[str]
    writeable: frozenset[str]
    required_create: frozenset[str] = frozenset()
    required_update: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        not_readable = self.writeable - self.readable
        if not_readable:
            raise SchemaDefinitionError(
                "Writeable attributes must be readable", not_readable
            )
        for name in ("required_create", "required_update"):
            not_writeable = getattr(self, name) - self.writeable
            if not_writeable:
                raise SchemaDefinitionError(
                    f"Attributes in {name} must be writeable", not_writeable
                )

    @classmethod
    def create(
        cls,
        readable: Iterable[str],
        writeable: Iterable[str],
        required_create: Iterable[str] = (),
        required_update: Iterable[str] = (),
    ) -> "AttributeSchema":
        return cls(
            readable=frozenset(readable),
            writeable=frozenset(writeable),
            required_create=frozenset(required_create),
            required_update=frozenset(required_update),
        )

    def filter(
        self,
        required: Iterable[str],
        wrapper: str | None,
        data: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Filter, validate and wrap an outbound payload."""
        return filter_data(self, required, wrapper, data)


def filter_data(
    schema: AttributeSchema,
    required: Iterable[str],
    wrapper: str | None,
    data: Mapping[str, Any],
) -> dict[str, Any]:
    """
    Apply the schema filter to ``data``.

    Args:
        schema: Attribute declarations of the target resource
        required: Attributes that must be present after filtering
        wrapper: Key the result is nested under, None to skip wrapping
        data: Caller supplied attributes

    Returns:
        ``{wrapper: filtered}`` or ``filtered`` when wrapper is None

    Raises:
        MissingRequiredAttributeError: A required attribute did not survive
    """
    readable = {key: value for key, value in data.items() if key in schema.readable}
    writeable = {key: value for key, value in readable.items() if key in schema.writeable}

    required = list(required)
    missing = [key for key in required if key not in writeable]
    if missing:
        raise MissingRequiredAttributeError(required, missing)

    if wrapper is None:
        return writeable
    return {wrapper: writeable}
