"""
License value handed over to edition management.

Licenses reach the platform already decoded; only the edition they grant and
the plugins making up that edition matter here.
"""

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class License:
    """
    Attributes:
        edition_key: Key of the edition granted by the license
        plugin_keys: Keys of the plugins the edition is made of
    """

    edition_key: str
    plugin_keys: frozenset[str]

    def __post_init__(self):
        if not self.edition_key:
            raise ValueError("License must name an edition")
        # Accept any iterable of keys
        object.__setattr__(self, "plugin_keys", frozenset(self.plugin_keys))

    @classmethod
    def of(cls, edition_key: str, plugin_keys: Iterable[str]) -> "License":
        return cls(edition_key, frozenset(plugin_keys))
