from typing import Any, Dict, List, Optional

from khukuri.errors import KhukuriRuntimeError
from khukuri.values import copy_value


class Environment:
    """A stack of scopes mapping variable names to values.

    The first scope is the global scope and is never removed. Lookups walk
    from the innermost scope outward, so inner bindings shadow outer ones.
    New bindings are only ever created in the innermost scope.
    """
    def __init__(self):
        self.scopes: List[Dict[str, Any]] = [{}]

    @property
    def depth(self) -> int:
        return len(self.scopes)

    def push_scope(self):
        self.scopes.append({})

    def pop_scope(self):
        # The global scope stays put.
        if len(self.scopes) > 1:
            self.scopes.pop()

    def define(self, name: str, value: Any):
        self.scopes[-1][name] = value

    def get(self, name: str) -> Optional[Any]:
        """Return a copy of the nearest binding of name, or None if unbound."""
        for scope in reversed(self.scopes):
            if name in scope:
                return copy_value(scope[name])
        return None

    def set(self, name: str, value: Any):
        # Overwrite the nearest existing binding; never create one.
        for scope in reversed(self.scopes):
            if name in scope:
                scope[name] = value
                return
        raise KhukuriRuntimeError(f'Undefined variable: {name}')
