"""Collecteur des résultats et rapport texte.

Le `Reporter` est l'unique consommateur de la file de résultats: il est le
seul à modifier le compteur et à écrire sur la sortie, aucun verrou n'est
donc nécessaire.
"""

import asyncio
import sys
from dataclasses import dataclass
from typing import Any, Optional, TextIO

from nomad_nodes.config.logging_config import get_logger
from nomad_nodes.core.errors import PipelineError
from nomad_nodes.core.models import FetchResult, FilterPredicate

logger = get_logger(__name__)

PROGRESS_EVERY = 50

# Marqueur de fermeture de la file, posé une fois toutes les requêtes terminées
CLOSED: Any = object()


@dataclass(frozen=True)
class ReportStats:
    total: int = 0
    processed: int = 0
    matched: int = 0
    failed: int = 0


class Reporter:
    def __init__(self, predicate: FilterPredicate, out: Optional[TextIO] = None,
                 progress_every: int = PROGRESS_EVERY) -> None:
        self.predicate = predicate
        self.out = out if out is not None else sys.stdout
        self.progress_every = progress_every
        self.total = 0
        self.processed = 0
        self.matched = 0
        self.failed = 0
        # Acquittement explicite: la sortie a été vidée
        self.flushed = asyncio.Event()

    def _emit(self, line: str) -> None:
        self.out.write(line + "\n")

    def write_header(self, total: int) -> None:
        """En-tête du rapport; rien d'autre n'est écrit s'il n'y a aucun nœud."""
        self.total = total
        self._emit(f"=> Found {total} nodes")
        if total == 0:
            return
        self._emit(f"=> {self.predicate.eligibility_label} nodes "
                   f"{self.predicate.consul_label} Consul:")
        self._emit("")

    def handle(self, result: FetchResult) -> None:
        """Traite un résultat: échec signalé, nœud affiché s'il correspond au filtre."""
        self.processed += 1
        if not result.ok:
            self.failed += 1
            self._emit(f"Failed to query node {result.node_id}")
            logger.debug(f"Nœud {result.node_id} en échec: {result.error}")
        else:
            node = result.node
            if self.predicate.matches(node):
                self.matched += 1
                self._emit(f"   {node.network_address} - {node.name} - {node.id}")

        if self.processed % self.progress_every == 0:
            self._emit(f"Processed {self.processed}/{self.total}")

    def stats(self) -> ReportStats:
        return ReportStats(
            total=self.total,
            processed=self.processed,
            matched=self.matched,
            failed=self.failed
        )

    def flush(self) -> None:
        self.out.flush()
        self.flushed.set()

    async def drain(self, results: "asyncio.Queue[Any]", total: int) -> ReportStats:
        """Consomme la file jusqu'au marqueur de fermeture.

        Lève `PipelineError` si le nombre de résultats reçus diffère du
        nombre de nœuds listés.
        """
        self.total = total
        try:
            while True:
                result = await results.get()
                if result is CLOSED:
                    break
                self.handle(result)
        finally:
            self.flush()

        if self.processed != total:
            raise PipelineError(f"{self.processed} résultats reçus pour {total} nœuds")
        return self.stats()
