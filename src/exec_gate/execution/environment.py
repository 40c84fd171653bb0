"""Child process environment construction.

The child inherits the full parent environment; variables supplied with
the request are merged on top (overriding inherited values of the same
name), never replacing the environment wholesale.
"""
from __future__ import annotations

import os
from collections.abc import Mapping


def build_child_env(extra: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return a copy of ``os.environ`` with *extra* merged in.

    Raises
    ------
    ValueError
        If a variable name is empty or contains ``=`` or a NUL byte, or a
        value contains a NUL byte.
    """
    env = dict(os.environ)
    if not extra:
        return env

    for key, value in extra.items():
        if not key or "=" in key or "\x00" in key:
            raise ValueError(f"Invalid environment variable name: {key!r}")
        if "\x00" in value:
            raise ValueError(f"Environment variable {key!r} contains a NUL byte")
        env[key] = value
    return env
