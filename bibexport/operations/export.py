"""Export workflow running the engine over many items."""

import logging
import time
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

from bibexport.core.engine import ExportEngine
from bibexport.core.exceptions import ExportError
from bibexport.core.models import Item

from .results import StepResult, WorkflowResult

logger = logging.getLogger(__name__)


class ExportWorkflow:
    """Export a collection of items, one record each.

    A record that fails to build is reported as a failed step and does
    not stop the export of the others. In testing mode items are
    exported sequentially so the output order matches the input order;
    otherwise they are spread over a thread pool.
    """

    def __init__(self, engine: ExportEngine, max_workers: int | None = None):
        self.engine = engine
        self.max_workers = max_workers

    def execute(self, items: Iterable[Item], source: str | None = None) -> WorkflowResult:
        """Export all items."""
        items = list(items)
        config = self.engine.config
        result = WorkflowResult(
            workflow="export",
            source=source,
            config={
                "dialect": config.dialect.value,
                "testing": config.testing,
                "caching": config.caching,
                "items": len(items),
            },
        )

        if config.testing or self.max_workers == 1 or len(items) < 2:
            steps = [self._export_item(item) for item in items]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                steps = list(executor.map(self._export_item, items))

        for step in steps:
            result.add_step(step)

        result.junior_comma = self.engine.state.junior_comma
        result.complete()

        summary = result.get_summary()
        logger.info(
            f"Exported {summary['successful_steps']} of {summary['total_steps']} "
            f"records ({summary['cached']} cached)"
        )
        return result

    def _export_item(self, item: Item) -> StepResult:
        start = time.perf_counter()

        cached = self._from_cache(item)
        if cached is not None:
            return StepResult(
                step="export",
                success=True,
                message="Loaded from cache",
                entity_id=item.citekey,
                data={"cached": True, "item_id": item.item_id},
                duration_ms=int((time.perf_counter() - start) * 1000),
            )

        try:
            exported = self.engine.export(item)
        except ExportError as e:
            logger.warning(f"Failed to export {item.citekey}: {e}")
            return StepResult(
                step="export",
                success=False,
                message=f"Failed to export {item.citekey}",
                entity_id=item.citekey,
                errors=[str(e)],
                duration_ms=int((time.perf_counter() - start) * 1000),
            )

        return StepResult(
            step="export",
            success=True,
            message=f"Exported @{exported.reference_type}",
            entity_id=exported.citekey,
            warnings=exported.warnings or None,
            data={
                "cached": False,
                "item_id": exported.item_id,
                "reference_type": exported.reference_type,
                "copy_requests": exported.copy_requests,
                "junior_comma": exported.junior_comma,
            },
            duration_ms=int((time.perf_counter() - start) * 1000),
        )

    def _from_cache(self, item: Item) -> str | None:
        engine = self.engine
        if not engine.config.caching or engine.cache is None:
            return None

        text = engine.cache.get(item.item_id, engine.config.dialect, item.citekey)
        if text is not None and engine.sink is not None:
            engine.sink.write(text)
        return text
