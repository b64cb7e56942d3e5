"""Config var reconciliation.

The config-vars endpoint takes a single sparse mapping per call: a string
value sets a variable, ``null`` removes it, and absent keys are left alone.
Desired state is declared as separate ``public`` and ``private`` groups, so
the previous and desired groups are merged and compared to build the one
minimal request body.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

ConfigVarPatch = dict[str, str | None]


class ConfigVarConflictError(ValueError):
    """Raised when a variable is declared in both the public and private group."""

    def __init__(self, keys: list[str]) -> None:
        super().__init__(f"Config vars declared as both public and private: {', '.join(keys)}")
        self.keys = keys


def merge_config_vars(
    public: Mapping[str, str] | None, private: Mapping[str, str] | None
) -> dict[str, str]:
    """Merge the two groups into one mapping, rejecting shared keys."""
    public = public or {}
    private = private or {}
    shared = sorted(set(public) & set(private))
    if shared:
        raise ConfigVarConflictError(shared)
    return {**public, **private}


def diff_config_vars(
    old_public: Mapping[str, str] | None,
    old_private: Mapping[str, str] | None,
    new_public: Mapping[str, str] | None,
    new_private: Mapping[str, str] | None,
) -> ConfigVarPatch:
    """Compute the minimal config-vars patch from previous to desired state.

    - a key whose desired value differs from its previous value is set
    - a key that was previously managed but is no longer declared maps to
      ``None`` (removal)
    - unchanged keys are omitted, including keys that only moved between the
      public and private groups

    Raises:
        ConfigVarConflictError: A key is in both desired groups.
    """
    desired = merge_config_vars(new_public, new_private)
    # Previous groups come from state and are not re-validated; private wins.
    previous = {**(old_public or {}), **(old_private or {})}

    patch: ConfigVarPatch = {}
    for key in sorted(previous.keys() | desired.keys()):
        if key in desired:
            if previous.get(key) != desired[key]:
                patch[key] = desired[key]
        else:
            patch[key] = None
    return patch
