"""
Manifest Classifier

Decides whether a manifest dependency is an internal client library
(graphed) or an ordinary third-party library (ignored), and derives
the short label shown for it in rendered maps.

Two classification modes exist side by side:
- strict: ``<prefix>/openapi/clients/go/<name>[/v<major>]``, used for
  graph generation;
- loose: any module under ``<prefix>/`` mentioning ``client``, used by
  the client-package listing.
"""

import re
from functools import lru_cache

from archmap.shared.config import ClassifierConfig

OPENAPI_CLIENTS_SEGMENT = "/openapi/clients/go/"


@lru_cache(maxsize=32)
def _strict_pattern(internal_prefix: str) -> re.Pattern[str]:
    return re.compile(
        "^" + re.escape(internal_prefix) + r"/openapi/clients/go/[^/]+(?:/v\d+)?$"
    )


def is_client_module(module_path: str, internal_prefix: str) -> bool:
    """Strict check against the generated OpenAPI client layout."""
    module_path = module_path.strip()
    if not module_path or not internal_prefix:
        return False
    return _strict_pattern(internal_prefix.rstrip("/")).match(module_path) is not None


def is_client_module_loose(module_path: str, internal_prefix: str) -> bool:
    """Loose check: internal module whose path contains ``client`` anywhere."""
    lower = module_path.strip().lower()
    if not lower or not internal_prefix:
        return False
    if not lower.startswith(internal_prefix.rstrip("/").lower() + "/"):
        return False
    return "client" in lower


def _label_after_openapi_segment(module_path: str) -> str | None:
    idx = module_path.find(OPENAPI_CLIENTS_SEGMENT)
    if idx < 0:
        return None
    return module_path[idx + len(OPENAPI_CLIENTS_SEGMENT):] or None


def _label_from_client_segment(module_path: str) -> str | None:
    parts = module_path.split("/")
    for i, part in enumerate(parts):
        if part.lower() == "client":
            return "/".join(parts[i:])
    return None


# Tried in order, first match wins.
_LABEL_RULES = (
    _label_after_openapi_segment,
    _label_from_client_segment,
)


def derive_label(module_path: str) -> str:
    """
    Short display name for a client module.

    Rules are tried in order and the first match wins:
      1. ``.../openapi/clients/go/<rest>``  -> ``<rest>``
      2. ``.../client/<rest>``               -> ``client/<rest>``
      3. anything else                       -> the module path unchanged

    e.g. ``git.example.com/platform/openapi/clients/go/billingclient/v2``
    becomes ``billingclient/v2``.
    """
    for rule in _LABEL_RULES:
        label = rule(module_path)
        if label is not None:
            return label
    return module_path


class ClientClassifier:
    """Classifier bound to one ``ClassifierConfig``."""

    def __init__(self, config: ClassifierConfig | None = None):
        self.config = config or ClassifierConfig()

    def is_client(self, module_path: str) -> bool:
        if self.config.strict:
            return is_client_module(module_path, self.config.internal_prefix)
        return is_client_module_loose(module_path, self.config.internal_prefix)

    def label(self, module_path: str) -> str:
        return derive_label(module_path)
