"""Recognizes useMutation registrations and checks their onSuccess callback."""
from dataclasses import dataclass
from typing import Optional, Union

from .reachability import INVALIDATE_QUERIES_NAME, InvalidationReachability
from .syntax import Call, Identifier, ObjectLiteral, Property

MUTATION_HOOK_NAME = "useMutation"
ON_SUCCESS_PROP = "onSuccess"

# Finding reasons. All three surface the same message to the user.
MISSING_OPTIONS = "missing-options"
MISSING_CALLBACK = "missing-callback"
NOT_INVALIDATED = "not-invalidated"


@dataclass(frozen=True)
class Finding:
    """A registration whose success path may leave stale query data."""
    anchor: Union[Call, Property]
    reason: str


class MutationCallMatcher:
    """Checks a single call-site; holds no state between calls."""

    def __init__(self, hook_name: str = MUTATION_HOOK_NAME,
                 callback_name: str = ON_SUCCESS_PROP,
                 operation: str = INVALIDATE_QUERIES_NAME):
        self.hook_name = hook_name
        self.callback_name = callback_name
        self.reachability = InvalidationReachability(operation)

    def is_registration(self, call: Call) -> bool:
        return isinstance(call.callee, Identifier) and call.callee.name == self.hook_name

    def find_options(self, call: Call) -> Optional[ObjectLiteral]:
        """First object literal among the top-level arguments."""
        for argument in call.arguments:
            if isinstance(argument, ObjectLiteral):
                return argument
        return None

    def find_callback(self, options: ObjectLiteral) -> Optional[Property]:
        for prop in options.properties:
            if isinstance(prop.key, Identifier) and prop.key.name == self.callback_name:
                return prop
        return None

    def check(self, call: Call) -> Optional[Finding]:
        """Return a finding for a registration missing invalidation, else None.

        Non-registration calls always return None.
        """
        if not self.is_registration(call):
            return None

        options = self.find_options(call)
        if options is None:
            return Finding(anchor=call, reason=MISSING_OPTIONS)

        callback = self.find_callback(options)
        if callback is None:
            return Finding(anchor=call, reason=MISSING_CALLBACK)

        if not self.reachability.is_reachable(callback.value):
            return Finding(anchor=callback, reason=NOT_INVALIDATED)

        return None
