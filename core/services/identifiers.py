"""
Human readable external identifiers (``PAT12345678`` and friends).

Codes are a fixed prefix followed by eight random digits.  A code is
re-drawn while it is already taken; the unique index on the column is
what finally guarantees uniqueness.
"""
import secrets

CODE_DIGITS = 8
MAX_ATTEMPTS = 20


def random_code(prefix: str) -> str:
    return f"{prefix}{secrets.randbelow(10 ** CODE_DIGITS):0{CODE_DIGITS}d}"


def new_external_code(model, prefix: str, *, field: str = 'code') -> str:
    """Return a code with ``prefix`` that no row of ``model`` uses yet."""
    for _ in range(MAX_ATTEMPTS):
        code = random_code(prefix)
        if not model._default_manager.filter(**{field: code}).exists():
            return code
    raise RuntimeError(f'could not allocate a free {prefix} code')
