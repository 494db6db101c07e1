"""Pipeline d'inventaire: liste, dispatch concurrent, collecte, fin.

Cycle de vie: IDLE -> LISTING -> DISPATCHING -> DRAINING -> DONE. Un échec
de requête sur un nœud ne fait jamais reculer la machine.
"""

from enum import Enum
from typing import Any, Optional
import asyncio

from nomad_nodes.config.logging_config import get_logger
from nomad_nodes.core.dispatcher import Dispatcher
from nomad_nodes.core.errors import PipelineError
from nomad_nodes.core.models import FilterPredicate
from nomad_nodes.core.reporter import CLOSED, Reporter, ReportStats

logger = get_logger(__name__)


class PipelineState(Enum):
    IDLE = 0
    LISTING = 1
    DISPATCHING = 2
    DRAINING = 3
    DONE = 4


class InventoryPipeline:
    def __init__(self, client: Any, predicate: FilterPredicate,
                 reporter: Optional[Reporter] = None,
                 timeout: Optional[float] = None,
                 max_concurrency: Optional[int] = None) -> None:
        """Args:
            client: source des nœuds, expose `list_nodes()` et `node_info(id)`
                (`NomadClient` en production).
            predicate: filtre fixé pour toute l'exécution.
        """
        self.client = client
        self.predicate = predicate
        self.reporter = reporter or Reporter(predicate)
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        self.state = PipelineState.IDLE

    def _advance(self, state: PipelineState) -> None:
        if state.value <= self.state.value:
            raise PipelineError(f"transition interdite: {self.state.name} -> {state.name}")
        logger.debug(f"Pipeline: {self.state.name} -> {state.name}")
        self.state = state

    async def run(self) -> ReportStats:
        """Exécute le pipeline complet et retourne les compteurs du rapport.

        Les erreurs de listing se propagent avant tout dispatch.
        """
        self._advance(PipelineState.LISTING)
        nodes = await self.client.list_nodes()
        total = len(nodes)
        logger.info(f"{total} nœuds trouvés")
        self.reporter.write_header(total)

        if total == 0:
            self.reporter.flush()
            self._advance(PipelineState.DONE)
            return self.reporter.stats()

        self._advance(PipelineState.DISPATCHING)
        results: "asyncio.Queue[Any]" = asyncio.Queue()
        collector = asyncio.create_task(self.reporter.drain(results, total), name="collector")
        dispatcher = Dispatcher(
            self.client.node_info,
            results,
            timeout=self.timeout,
            max_concurrency=self.max_concurrency
        )
        tasks = dispatcher.dispatch(node.id for node in nodes)

        self._advance(PipelineState.DRAINING)
        try:
            # Attendre toutes les requêtes avant de fermer la file
            await asyncio.gather(*tasks)
        finally:
            await results.put(CLOSED)
        stats = await collector
        await self.reporter.flushed.wait()

        self._advance(PipelineState.DONE)
        logger.info(
            f"Terminé: {stats.processed}/{stats.total} traités, "
            f"{stats.matched} correspondants, {stats.failed} en échec "
            f"(dispatch: {dispatcher.dispatch_stats})"
        )
        return stats
