"""Modèles de données des nœuds Nomad.

Les réponses JSON de l'API sont décodées avec pydantic; les résultats
échangés entre les tâches de récupération et le collecteur sont de simples
dataclasses immuables.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Attributs rapportés par l'agent Nomad
CONSUL_VERSION_ATTR = "consul.version"
NETWORK_ADDRESS_ATTR = "unique.network.ip-address"


class SchedulingEligibility(Enum):
    ELIGIBLE = "eligible"
    INELIGIBLE = "ineligible"


class NodeSummary(BaseModel):
    """Entrée minimale renvoyée par `/v1/nodes`."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(alias="ID", min_length=1)
    name: str = Field(default="", alias="Name")
    address: str = Field(default="", alias="Address")


class NodeDetail(BaseModel):
    """Détail complet d'un nœud renvoyé par `/v1/node/<id>`."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(alias="ID", min_length=1)
    name: str = Field(default="", alias="Name")
    attributes: Dict[str, str] = Field(default_factory=dict, alias="Attributes")
    scheduling_eligibility: SchedulingEligibility = Field(alias="SchedulingEligibility")

    @field_validator("attributes", mode="before")
    @classmethod
    def _null_attributes(cls, value):
        # Nomad renvoie `null` pour un nœud sans attributs
        return value if value is not None else {}

    @field_validator("scheduling_eligibility", mode="before")
    @classmethod
    def _unknown_is_ineligible(cls, value):
        # Toute valeur autre que "eligible" rend le nœud inéligible
        if isinstance(value, SchedulingEligibility):
            return value
        if value == SchedulingEligibility.ELIGIBLE.value:
            return SchedulingEligibility.ELIGIBLE
        return SchedulingEligibility.INELIGIBLE

    @property
    def network_address(self) -> str:
        return self.attributes.get(NETWORK_ADDRESS_ATTR, "")

    @property
    def consul_version(self) -> str:
        return self.attributes.get(CONSUL_VERSION_ATTR, "")

    @property
    def has_consul(self) -> bool:
        """Un agent Consul est présent si sa version est rapportée."""
        return self.consul_version != ""

    @property
    def is_eligible(self) -> bool:
        return self.scheduling_eligibility is SchedulingEligibility.ELIGIBLE


@dataclass(frozen=True)
class FetchResult:
    """Résultat d'une récupération: soit un `NodeDetail`, soit une erreur.

    L'identifiant est toujours présent pour pouvoir signaler un échec
    même sans détail.
    """

    node_id: str
    node: Optional[NodeDetail] = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, node_id: str, node: NodeDetail) -> "FetchResult":
        return cls(node_id=node_id, node=node)

    @classmethod
    def failure(cls, node_id: str, error: Exception) -> "FetchResult":
        return cls(node_id=node_id, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None and self.node is not None


@dataclass(frozen=True)
class FilterPredicate:
    """Filtre fixé au démarrage pour toute la durée de l'exécution."""

    want_consul: bool = False
    want_ineligible: bool = False

    def matches(self, node: NodeDetail) -> bool:
        """Les deux critères doivent correspondre (ET logique)."""
        return (self.want_consul == node.has_consul
                and self.want_ineligible == (not node.is_eligible))

    @property
    def eligibility_label(self) -> str:
        return "Ineligible" if self.want_ineligible else "Eligible"

    @property
    def consul_label(self) -> str:
        return "with" if self.want_consul else "without"
