"""Adapters — bindings to the host toolchain.

Only the protocol is re-exported here; concrete hosts live in their
own modules (``python_source``, ``filesystem``, ``mock``).
"""

from storegen.adapters.base import Declaration, DeclarationKind, Expression, Host

__all__ = [
    "Declaration",
    "DeclarationKind",
    "Expression",
    "Host",
]
