"""Dispatcher des requêtes de détail: une tâche asyncio par nœud.

Chaque tâche pousse exactement un `FetchResult` (succès ou échec) dans la
file partagée. Le dispatcher lance les tâches puis rend la main; l'attente
de leur fin est à la charge de l'appelant.
"""

from typing import Awaitable, Callable, Dict, Iterable, List, Optional
import asyncio

from nomad_nodes.config.logging_config import get_logger
from nomad_nodes.core.models import FetchResult, NodeDetail

logger = get_logger(__name__)

Fetcher = Callable[[str], Awaitable[NodeDetail]]

class Dispatcher:
    def __init__(self, fetch: Fetcher, results: "asyncio.Queue[FetchResult]",
                 timeout: Optional[float] = None,
                 max_concurrency: Optional[int] = None) -> None:
        """Args:
            fetch: coroutine de récupération d'un nœud (`NomadClient.node_info`).
            results: file partagée lue par un unique collecteur.
            timeout: borne par requête, appliquée en plus de celle du client.
            max_concurrency: nombre maximal de requêtes en vol (None = une par nœud).
        """
        self.fetch = fetch
        self.results = results
        self.timeout = timeout
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None
        self.dispatch_stats: Dict[str, int] = {
            "dispatched": 0,
            "succeeded": 0,
            "failed": 0,
            "timed_out": 0
        }

    def dispatch(self, node_ids: Iterable[str]) -> List["asyncio.Task[None]"]:
        """Lance une tâche par identifiant et retourne les tâches lancées."""
        tasks = []
        for node_id in node_ids:
            task = asyncio.create_task(self._run(node_id), name=f"fetch-{node_id}")
            tasks.append(task)
        self.dispatch_stats["dispatched"] += len(tasks)
        logger.debug(f"{len(tasks)} requêtes de nœud lancées")
        return tasks

    async def _run(self, node_id: str) -> None:
        if self._semaphore is None:
            result = await self._fetch_one(node_id)
        else:
            async with self._semaphore:
                result = await self._fetch_one(node_id)
        await self.results.put(result)

    async def _fetch_one(self, node_id: str) -> FetchResult:
        try:
            if self.timeout:
                node = await asyncio.wait_for(self.fetch(node_id), timeout=self.timeout)
            else:
                node = await self.fetch(node_id)
        except asyncio.TimeoutError as e:
            logger.debug(f"Timeout pour le nœud {node_id} après {self.timeout}s")
            self.dispatch_stats["failed"] += 1
            self.dispatch_stats["timed_out"] += 1
            return FetchResult.failure(node_id, e)
        except Exception as e:
            logger.debug(f"Échec de la requête pour {node_id}: {e}")
            self.dispatch_stats["failed"] += 1
            return FetchResult.failure(node_id, e)
        self.dispatch_stats["succeeded"] += 1
        return FetchResult.success(node_id, node)
