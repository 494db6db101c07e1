"""Client HTTP minimal pour l'API Nomad (liste et détail des nœuds)."""

import ssl
from typing import List, Optional

import httpx
from pydantic import ValidationError

from nomad_nodes.config.logging_config import get_logger
from nomad_nodes.config.nomad_config import NomadSettings
from nomad_nodes.core.errors import ConfigError, NodeQueryError, NomadAPIError
from nomad_nodes.core.models import NodeDetail, NodeSummary

# Configuration du logger
logger = get_logger(__name__)

class NomadClient:
    def __init__(self, settings: NomadSettings,
                 transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        """Prépare un client `httpx.AsyncClient` partagé par toutes les requêtes.

        Args:
            settings: paramètres de connexion (adresse, jeton, TLS, timeout).
            transport: transport httpx alternatif (tests).
        """
        self.settings = settings
        headers = {"Accept": "application/json"}
        if settings.token:
            headers["X-Nomad-Token"] = settings.token

        params = {}
        if settings.region:
            params["region"] = settings.region
        if settings.namespace:
            params["namespace"] = settings.namespace

        try:
            self._client = httpx.AsyncClient(
                base_url=settings.address,
                headers=headers,
                params=params,
                timeout=httpx.Timeout(settings.timeout),
                verify=self._ssl_context(settings),
                transport=transport,
                # Pas de plafond implicite du pool: seul max_concurrency limite
                limits=httpx.Limits(
                    max_connections=settings.max_concurrency,
                    max_keepalive_connections=settings.max_concurrency,
                ),
            )
        except (OSError, ValueError) as e:
            raise ConfigError(f"impossible d'initialiser le client Nomad: {e}")

    @staticmethod
    def _ssl_context(settings: NomadSettings):
        """Contexte TLS: CA personnalisée et certificat client si fournis."""
        if settings.tls_skip_verify:
            return False
        if not (settings.ca_cert or settings.client_cert):
            return True
        ctx = ssl.create_default_context(cafile=settings.ca_cert)
        if settings.client_cert and settings.client_key:
            ctx.load_cert_chain(settings.client_cert, settings.client_key)
        return ctx

    async def __aenter__(self) -> "NomadClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def list_nodes(self) -> List[NodeSummary]:
        """Liste tous les nœuds du cluster (un seul appel, sans pagination)."""
        try:
            resp = await self._client.get("/v1/nodes")
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            raise NomadAPIError(
                f"liste des nœuds refusée: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            )
        except httpx.HTTPError as e:
            raise NomadAPIError(f"liste des nœuds indisponible: {e}")
        except ValueError as e:
            raise NomadAPIError(f"réponse JSON invalide pour /v1/nodes: {e}")

        if not isinstance(payload, list):
            raise NomadAPIError("réponse inattendue pour /v1/nodes: liste attendue")
        try:
            nodes = [NodeSummary.model_validate(item) for item in payload]
        except ValidationError as e:
            raise NomadAPIError(f"entrée de nœud invalide: {e}")
        logger.debug(f"{len(nodes)} nœuds listés depuis {self.settings.address}")
        return nodes

    async def node_info(self, node_id: str) -> NodeDetail:
        """Récupère le détail d'un nœud.

        Toute erreur (réseau, timeout, 404, réponse invalide) devient une
        `NodeQueryError`; aucune nouvelle tentative n'est faite.
        """
        try:
            resp = await self._client.get(f"/v1/node/{node_id}")
            resp.raise_for_status()
            return NodeDetail.model_validate(resp.json())
        except httpx.HTTPStatusError as e:
            raise NodeQueryError(node_id, f"HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            raise NodeQueryError(node_id, str(e) or type(e).__name__)
        except ValueError as e:
            # ValidationError de pydantic hérite de ValueError
            raise NodeQueryError(node_id, f"réponse invalide: {e}")
