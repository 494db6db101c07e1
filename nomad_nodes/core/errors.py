"""Exceptions de l'outil d'inventaire des nœuds Nomad."""

from typing import Optional


class NomadNodesError(Exception):
    """Erreur de base du projet."""


class ConfigError(NomadNodesError):
    """Configuration invalide ou illisible (fatale au démarrage)."""


class NomadAPIError(NomadNodesError):
    """Échec d'un appel à l'API Nomad hors requête par nœud (fatal)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NodeQueryError(NomadNodesError):
    """Échec de la récupération du détail d'un nœud.

    Réseau, timeout, 404 ou réponse invalide: tout est regroupé ici, seul
    l'identifiant du nœud compte pour le rapport.
    """

    def __init__(self, node_id: str, reason: str = "") -> None:
        message = f"échec de la requête pour le nœud {node_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.node_id = node_id
        self.reason = reason


class PipelineError(NomadNodesError):
    """Invariant du pipeline violé (transition d'état, comptage des résultats)."""
