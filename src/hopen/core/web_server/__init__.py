"""Local static site server: port arbitration, path mapping and lifecycle.

Only the side-effect-free parts are re-exported here. Import
``hopen.core.web_server.server`` and ``.lifecycle`` directly; they depend on
``hopen.core.config``, which itself imports :mod:`.models`.
"""

from .models import (
    ExistingServerChoice,
    LaunchSpec,
    LifecycleOutcome,
    LifecycleState,
    PathMapping,
    PortRange,
    ServerHandle,
    StartupChoice,
)
from .paths import build_url, has_html_files, resolve
from .probe import PortProbe

__all__ = [
    "ExistingServerChoice",
    "LaunchSpec",
    "LifecycleOutcome",
    "LifecycleState",
    "PathMapping",
    "PortRange",
    "PortProbe",
    "ServerHandle",
    "StartupChoice",
    "build_url",
    "has_html_files",
    "resolve",
]
