# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Run extraction over compiled modules and combine their catalogs."""

import concurrent.futures
import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass

from typemeta.extractor import DataMapperVisitor
from typemeta.model import ExtractionOutcome, FunctionRecord
from typemeta.module import CompiledModule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TypeCatalog:
    """Represent the catalogs extracted from one or more modules.

    Attributes:
        modules: Identifiers of the modules the catalogs were built from.
        record_types: Qualified record name to serialized field map.
        client_map: Client name to remote method name to signature record.
        outcomes: Per-unit extraction outcomes.
    """

    modules: tuple[str, ...]
    record_types: dict[str, str]
    client_map: dict[str, dict[str, FunctionRecord]]
    outcomes: tuple[ExtractionOutcome, ...]

    def to_payload(self) -> dict[str, object]:
        """Render the catalog as JSON-ready data."""
        return {
            "modules": list(self.modules),
            "record_types": dict(self.record_types),
            "client_map": {
                client_name: {
                    method_name: record.to_dict()
                    for method_name, record in methods.items()
                }
                for client_name, methods in self.client_map.items()
            },
            "outcomes": [asdict(outcome) for outcome in self.outcomes],
        }


def extract_module(module: CompiledModule) -> TypeCatalog:
    """Extract record and client catalogs from one compiled module.

    Args:
        module: Compiled module to traverse.

    Returns:
        Catalog for the module.
    """
    visitor = DataMapperVisitor()
    visitor.bind(module)
    visitor.visit(module.syntax_tree)
    catalog = TypeCatalog(
        modules=(str(module.module_id),),
        record_types=dict(visitor.get_record_types()),
        client_map={
            name: dict(methods) for name, methods in visitor.get_client_map().items()
        },
        outcomes=visitor.outcomes,
    )
    logger.info(
        f"Module extraction completed (module={module.module_id} "
        f"records={len(catalog.record_types)} clients={len(catalog.client_map)})"
    )
    return catalog


def extract_modules(
    modules: Sequence[CompiledModule], max_workers: int = 4
) -> list[TypeCatalog]:
    """Extract catalogs from several modules concurrently.

    Each module is traversed by its own visitor.

    Args:
        modules: Compiled modules to traverse.
        max_workers: Maximum number of worker threads.

    Returns:
        Catalogs in the same order as ``modules``.

    Raises:
        ValueError: If ``max_workers`` is not greater than zero.
    """
    if max_workers <= 0:
        raise ValueError("max_workers must be > 0")
    if not modules:
        return []
    catalogs: list[TypeCatalog | None] = [None] * len(modules)
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {
            executor.submit(extract_module, module): index
            for index, module in enumerate(modules)
        }
        for future in concurrent.futures.as_completed(future_to_index):
            catalogs[future_to_index[future]] = future.result()
    return [catalog for catalog in catalogs if catalog is not None]


def merge_catalogs(catalogs: Sequence[TypeCatalog]) -> TypeCatalog:
    """Merge per-module catalogs in order.

    Record names are module-qualified; client names are not, so a later client
    with the same name replaces an earlier one.

    Args:
        catalogs: Catalogs to merge.

    Returns:
        Combined catalog.
    """
    modules: list[str] = []
    record_types: dict[str, str] = {}
    client_map: dict[str, dict[str, FunctionRecord]] = {}
    outcomes: list[ExtractionOutcome] = []
    for catalog in catalogs:
        modules.extend(catalog.modules)
        record_types.update(catalog.record_types)
        for client_name, methods in catalog.client_map.items():
            if client_name in client_map:
                logger.warning(
                    "Client name defined in several modules; keeping the last one",
                    extra={"client": client_name, "modules": ",".join(catalog.modules)},
                )
            client_map[client_name] = methods
        outcomes.extend(catalog.outcomes)
    return TypeCatalog(
        modules=tuple(modules),
        record_types=record_types,
        client_map=client_map,
        outcomes=tuple(outcomes),
    )
