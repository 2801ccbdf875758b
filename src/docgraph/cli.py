"""CLI for docgraph."""

import asyncio
import json
import sys
from pathlib import Path
from typing import NoReturn

import click
import structlog

from docgraph.config import configure_logging, get_settings
from docgraph.core.exceptions import DocGraphError
from docgraph.core.models.graph import Direction, EdgeType, KnowledgeNode, NodeType
from docgraph.factory import ServiceFactory
from docgraph.pipelines.ingestion import ProcessingOptions

logger = structlog.get_logger(__name__)


def run_async(coro):
    """Run an async function synchronously."""
    return asyncio.run(coro)


def _create_factory() -> ServiceFactory:
    return ServiceFactory(get_settings())


def _snippet(text: str, length: int = 120) -> str:
    text = " ".join(text.split())
    return text[:length] + "..." if len(text) > length else text


def _echo_node(index: int, node: KnowledgeNode) -> None:
    click.echo(f"  {index}. [{node.type.value}] {node.name} ({node.key})")
    if node.content:
        click.echo(f"     {_snippet(node.content)}")


def _fail(exc: DocGraphError) -> NoReturn:
    click.echo(f"Error: {exc.message}", err=True)
    sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool) -> None:
    """docgraph: documents into a searchable knowledge graph."""
    settings = get_settings()
    log_level = "DEBUG" if verbose else settings.log_level
    configure_logging(log_level=log_level, json_logs=settings.log_format == "json")


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--category", "-c", help="Category metadata (default: from file extension)")
@click.option("--entities", is_flag=True, help="Create ENTITY nodes from structured elements")
@click.option("--no-structured", is_flag=True, help="Skip the structured-extraction service")
@click.option("--resume", "resume_key", help="Complete a partially written document by key")
def ingest(
    paths: tuple[str, ...],
    category: str | None,
    entities: bool,
    no_structured: bool,
    resume_key: str | None,
) -> None:
    """Ingest one or more files.

    Failures on one file are reported and the remaining files continue.
    """
    if resume_key and len(paths) > 1:
        click.echo("Error: --resume takes exactly one file", err=True)
        sys.exit(1)

    async def _ingest() -> int:
        factory = _create_factory()
        failures = 0
        try:
            pipeline = await factory.get_ingestion_pipeline()
            for path in paths:
                try:
                    result = await pipeline.ingest_file(
                        path,
                        metadata={"category": category} if category else None,
                        options=ProcessingOptions(
                            extract_entities=entities,
                            resume_document_key=resume_key,
                        ),
                        extraction_options=pipeline.extraction_defaults.model_copy(
                            update={"use_structured_extraction": not no_structured}
                        ),
                    )
                except DocGraphError as exc:
                    failures += 1
                    click.echo(f"  ✗ {Path(path).name}: {exc.message}", err=True)
                    continue
                click.echo(
                    f"  ✓ {Path(path).name}: document {result.document_node.key}, "
                    f"{len(result.chunk_nodes)} chunks, {len(result.entity_nodes)} entities"
                )
        finally:
            await factory.close()
        return failures

    failures = run_async(_ingest())
    if failures:
        sys.exit(1)


@cli.command()
@click.argument("query")
@click.option("--limit", "-l", default=5, help="Max results")
@click.option(
    "--type",
    "node_type",
    type=click.Choice([t.value for t in NodeType]),
    default=None,
    help="Only nodes of this type",
)
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
def search(query: str, limit: int, node_type: str | None, output_json: bool) -> None:
    """Search nodes by similarity, falling back to text match."""

    async def _search() -> None:
        factory = _create_factory()
        try:
            service = await factory.get_knowledge_service()
            nodes = await service.search_nodes(
                query, limit=limit, node_type=NodeType(node_type) if node_type else None
            )
        except DocGraphError as exc:
            _fail(exc)
        finally:
            await factory.close()

        if output_json:
            payload = [n.model_dump(mode="json", exclude={"embedding"}) for n in nodes]
            click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
            return
        if not nodes:
            click.echo("No results found.")
            return
        click.echo(f"Found {len(nodes)} results:\n")
        for i, node in enumerate(nodes, 1):
            _echo_node(i, node)

    run_async(_search())


@cli.command()
@click.argument("document_key")
def chunks(document_key: str) -> None:
    """List the chunks of a document in order."""

    async def _chunks() -> None:
        factory = _create_factory()
        try:
            service = await factory.get_knowledge_service()
            nodes = await service.get_document_chunks(document_key)
        finally:
            await factory.close()

        if not nodes:
            click.echo("No chunks found.")
            return
        for i, node in enumerate(nodes, 1):
            _echo_node(i, node)

    run_async(_chunks())


@cli.command()
@click.argument("key")
@click.option(
    "--edge-type",
    type=click.Choice([t.value for t in EdgeType]),
    default=None,
    help="Only edges of this type",
)
@click.option(
    "--direction",
    type=click.Choice([d.value for d in Direction]),
    default=Direction.BOTH.value,
    help="Traversal direction",
)
def connections(key: str, edge_type: str | None, direction: str) -> None:
    """Show nodes one hop away from KEY."""

    async def _connections() -> None:
        factory = _create_factory()
        try:
            service = await factory.get_knowledge_service()
            connected = await service.get_connected_nodes(
                key, EdgeType(edge_type) if edge_type else None, direction
            )
        finally:
            await factory.close()

        if not connected:
            click.echo("No connections found.")
            return
        for item in connected:
            arrow = "->" if item.edge.from_key == key else "<-"
            click.echo(
                f"  {arrow} {item.edge.type.value}: [{item.node.type.value}] "
                f"{item.node.name} ({item.node.key})"
            )

    run_async(_connections())


@cli.command()
@click.argument("key")
@click.confirmation_option(prompt="Delete this node and all of its edges?")
def delete(key: str) -> None:
    """Delete a node and every edge touching it."""

    async def _delete() -> bool:
        factory = _create_factory()
        try:
            service = await factory.get_knowledge_service()
            return await service.delete_node(key)
        finally:
            await factory.close()

    if run_async(_delete()):
        click.echo(f"Deleted {key}")
    else:
        click.echo(f"Node not found: {key}", err=True)
        sys.exit(1)


@cli.command()
def health() -> None:
    """Check the graph store and the structured-extraction service."""

    async def _health() -> bool:
        factory = _create_factory()
        healthy = True
        try:
            try:
                store = await factory.get_graph_store()
                count = await store.count_nodes()
                click.echo(f"Graph store ({factory.settings.graph_store}): ok, {count} nodes")
            except DocGraphError as exc:
                healthy = False
                click.echo(f"Graph store ({factory.settings.graph_store}): {exc.message}")

            if factory.settings.structured_extraction_enabled:
                result = await factory.get_structured_client().check_health()
                click.echo(
                    f"Structured extraction: {result['status']} "
                    f"({result['response_time_ms']}ms, {result['endpoint']})"
                )
            else:
                click.echo("Structured extraction: disabled")
        finally:
            await factory.close()
        return healthy

    if not run_async(_health()):
        sys.exit(1)


if __name__ == "__main__":
    cli()
