"""Local-first artifact acquisition with operator-gated downloads."""

from .acquirer import ArtifactAcquirer, OfflineSwitch
from .decisions import (
    ConsoleDecisionProvider,
    DecisionProvider,
    NonInteractiveDecisionProvider,
    ScriptedDecisionProvider,
)
from .models import AcquisitionChoice, AcquisitionState, ArchiveMode, ArtifactBundle, DownloadKind

__all__ = [
    "AcquisitionChoice",
    "AcquisitionState",
    "ArchiveMode",
    "ArtifactAcquirer",
    "ArtifactBundle",
    "ConsoleDecisionProvider",
    "DecisionProvider",
    "DownloadKind",
    "NonInteractiveDecisionProvider",
    "OfflineSwitch",
    "ScriptedDecisionProvider",
]
