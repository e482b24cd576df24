"""Capability oracle: does this expression's type expose a safe accessor?

Generated message types are recognized by marker methods rather than by
declaration:

- ProtoReflect: current protobuf API (google.golang.org/protobuf)
- ProtoMessage: legacy API (github.com/golang/protobuf, gogo)
- MarshalToSizedBuffer: gogo "faster" variant, whose getters are not
  nil-safe, so its types are left alone
"""

import logging
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)

GETTER_PREFIX = "Get"
REFLECT_MARKER = "ProtoReflect"
LEGACY_MARKER = "ProtoMessage"
UNSAFE_GENERATOR_MARKER = "MarshalToSizedBuffer"


class TypeInfo(Protocol):
    """Narrow view of a type-resolution engine."""

    def type_of(self, node: Any) -> Optional[Any]:
        ...

    def has_method(self, go_type: Any, name: str) -> bool:
        ...


class CapabilityOracle:
    """Decides whether a field read should go through its accessor."""

    def __init__(self, type_info: TypeInfo, getter_prefix: str = GETTER_PREFIX):
        self.type_info = type_info
        self.getter_prefix = getter_prefix

    def is_getter_name(self, name: str) -> bool:
        """True if the name already follows the accessor convention (GetX)."""
        prefix = self.getter_prefix
        if not name.startswith(prefix) or len(name) == len(prefix):
            return False
        following = name[len(prefix)]
        return following.isupper() or following == "_" or following.isdigit()

    def is_managed(self, go_type: Any) -> bool:
        """True if the type belongs to a generated message family with nil-safe getters."""
        has_method = self.type_info.has_method
        if has_method(go_type, REFLECT_MARKER):
            return True
        if has_method(go_type, LEGACY_MARKER):
            return not has_method(go_type, UNSAFE_GENERATOR_MARKER)
        return False

    def accessor_for(self, operand: Any, field_name: str) -> Optional[str]:
        """Name of the accessor that should replace `operand.field_name`, if any."""
        if self.is_getter_name(field_name):
            return None

        accessor = self.getter_prefix + field_name
        try:
            go_type = self.type_info.type_of(operand)
            if go_type is None or not self.is_managed(go_type):
                return None
            if not self.type_info.has_method(go_type, accessor):
                return None
        except Exception as e:
            # Incomplete type information is a scope miss, never a failed run
            logger.debug(f"Type lookup failed for field {field_name}: {e}")
            return None
        return accessor

    def is_unsafe_direct_read(self, operand: Any, field_name: str) -> bool:
        return self.accessor_for(operand, field_name) is not None
