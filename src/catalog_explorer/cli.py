"""
Command-line interface for Catalog Explorer.

Provides commands to classify labels and to query the catalog
service for listings, versions and diffs.
"""

import asyncio
import json
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from catalog_explorer.config import get_settings
from catalog_explorer.logger import get_logger, setup_logging

if TYPE_CHECKING:
    from catalog_explorer.client import CatalogServiceClient
    from catalog_explorer.taxonomy import TaxonomyStore

# resolved on first use, after setup_logging() in main()
logger = get_logger(__name__)


class CLIOutput(BaseModel):
    """Structured output for CLI commands."""

    success: bool
    command: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    data: dict[str, Any] | list[Any] | None = None
    error: str | None = None


def print_json(output: CLIOutput) -> None:
    """Print output as formatted JSON."""
    print(json.dumps(output.model_dump(mode="json"), indent=2, default=str))


def get_option(args: list[str], name: str, default: str = "") -> str:
    """Value following ``--name`` in args, or default."""
    flag = f"--{name}"
    if flag in args:
        idx = args.index(flag)
        if idx + 1 < len(args):
            return args[idx + 1]
    return default


def positional(args: list[str]) -> list[str]:
    """Arguments that are neither flags nor flag values."""
    values = []
    skip = False
    for arg in args:
        if skip:
            skip = False
            continue
        if arg.startswith("--"):
            skip = True
            continue
        values.append(arg)
    return values


def _status_value(status: Any) -> str | None:
    return status.value if status is not None else None


async def _load_taxonomy(client: "CatalogServiceClient") -> "TaxonomyStore":
    from catalog_explorer.taxonomy import TaxonomyStore

    store = TaxonomyStore()
    await store.ensure_overrides(client.fetch_overrides)
    return store


async def cmd_classify(label: str) -> None:
    """Classify a label against the taxonomy."""
    from catalog_explorer.client import CatalogServiceClient
    from catalog_explorer.taxonomy import Classifier

    async with CatalogServiceClient() as client:
        store = await _load_taxonomy(client)

    categories = Classifier(store).classify(label)
    output = CLIOutput(
        success=True,
        command="classify",
        data={
            "label": label,
            "overrides_loaded": store.overrides_loaded,
            "categories": {group.value: keys for group, keys in categories.items()},
        },
    )
    print_json(output)


async def cmd_shortcuts(group_name: str) -> None:
    """List category shortcuts of one group."""
    from catalog_explorer.client import CatalogServiceClient
    from catalog_explorer.taxonomy import Classifier, TaxonomyGroup

    group = TaxonomyGroup(group_name)
    async with CatalogServiceClient() as client:
        store = await _load_taxonomy(client)

    shortcuts = Classifier(store).shortcuts(group)
    output = CLIOutput(
        success=True,
        command="shortcuts",
        data=[
            {"key": s.key, "display": s.display, "query_param": s.query_param}
            for s in shortcuts
        ],
    )
    print_json(output)


async def cmd_search(args: list[str]) -> None:
    """Search the catalog and print one page."""
    from catalog_explorer.client import CatalogServiceClient
    from catalog_explorer.diff.presenter import STATUS_ALL
    from catalog_explorer.diff.versions import VersionSelection
    from catalog_explorer.taxonomy import CategorySelection, Classifier
    from catalog_explorer.views import SearchViewModel

    settings = get_settings()
    values = positional(args)
    query = values[0] if values else ""
    selection = CategorySelection(
        media=[k for k in get_option(args, "media").split(",") if k],
        character=[k for k in get_option(args, "character").split(",") if k],
        tag=[k for k in get_option(args, "tags").split(",") if k],
        type=get_option(args, "type"),
    )

    logger.info("Searching catalog", query=query)

    async with CatalogServiceClient() as client:
        store = await _load_taxonomy(client)
        vm = SearchViewModel(client, Classifier(store))
        vm.view.set_sort(
            get_option(args, "sort", settings.view.sort_key),
            get_option(args, "dir", settings.view.sort_direction),
        )
        if get_option(args, "layout", "grid") == "list":
            default_size = settings.view.list_page_size
        else:
            default_size = settings.view.page_size
        vm.view.set_page_size(int(get_option(args, "page-size", str(default_size))))
        await vm.load(query)
        vm.apply_filters(selection, get_option(args, "mode", "any"))
        diff_status = get_option(args, "diff-status", STATUS_ALL)
        if diff_status != STATUS_ALL:
            await vm.set_diff_filter(
                diff_status,
                VersionSelection(get_option(args, "from"), get_option(args, "to")),
            )

    page = vm.page(int(get_option(args, "page", "1")))
    output = CLIOutput(
        success=not vm.status.failed,
        command="search",
        data={
            "state": vm.status.state.value,
            "page": page.page,
            "total_pages": page.total_pages,
            "total": page.total,
            "items": [
                {
                    **entry.model_dump(by_alias=True),
                    "diffStatus": _status_value(vm.diff_status_of(entry.label)),
                }
                for entry in page.items
            ],
            "diff_error": vm.diff_error,
        },
        error=vm.status.error,
    )
    print_json(output)


async def cmd_versions() -> None:
    """List catalog snapshots."""
    from catalog_explorer.client import CatalogServiceClient
    from catalog_explorer.views import VersionsViewModel

    async with CatalogServiceClient() as client:
        vm = VersionsViewModel(client)
        await vm.load()

    output = CLIOutput(
        success=not vm.status.failed,
        command="versions",
        data={
            "current": vm.current,
            "versions": [v.model_dump() for v in vm.versions],
            "selection": {
                "from": vm.selection.from_version,
                "to": vm.selection.to_version,
                "state": vm.selection_state.value,
            },
        },
        error=vm.status.error,
    )
    print_json(output)


async def cmd_diff(from_version: str, to_version: str, args: list[str]) -> None:
    """Diff two snapshots and print the presented result."""
    from catalog_explorer.client import CatalogServiceClient
    from catalog_explorer.views import DiffViewModel, VersionsViewModel

    status = get_option(args, "status", "all")
    keyword = get_option(args, "keyword")
    limit_text = get_option(args, "limit")

    async with CatalogServiceClient() as client:
        versions = VersionsViewModel(client)
        await versions.load()
        versions.select(from_version, to_version)
        vm = DiffViewModel(client, versions)
        await vm.load(int(limit_text) if limit_text else None)

    view = vm.view(status, keyword)
    data: dict[str, Any] = {
        "state": vm.status.state.value,
        "selection": vm.selection_state.value,
    }
    if view is not None:
        data.update(
            {
                "summary": view.summary.model_dump(),
                "hint": {"key": view.hint.message_key, "params": view.hint.params},
                "rows": [
                    {
                        "label": row.label,
                        "status": row.status.value,
                        "from_checksum": row.from_checksum,
                        "to_checksum": row.to_checksum,
                        "size": f"{row.from_size} -> {row.to_size}",
                        "can_open": row.can_open,
                    }
                    for row in view.rows
                ],
            }
        )

    output = CLIOutput(
        success=not vm.status.failed,
        command="diff",
        data=data,
        error=vm.status.error,
    )
    print_json(output)


async def cmd_test_config() -> None:
    """Test configuration loading."""
    settings = get_settings()

    output = CLIOutput(
        success=True,
        command="test-config",
        data={
            "environment": settings.environment,
            "catalog_base_url": settings.catalog.base_url,
            "catalog_diff_limit": settings.catalog.diff_limit,
            "view_page_size": settings.view.page_size,
            "retry_max_attempts": settings.retry.max_attempts,
        },
    )
    print_json(output)


def print_usage() -> None:
    """Print CLI usage information."""
    usage = """
Catalog Explorer CLI
====================

Usage: python -m catalog_explorer.cli <command> [arguments]

Commands:
  test-config                   Test configuration loading
  classify <label>              Show the categories a label belongs to
  shortcuts <group>             List category shortcuts (media, character, tag)
  search [query]                Search the catalog and print one page
  versions                      List catalog snapshots
  diff <from> <to>              Compare two snapshots

Search options:
  --sort <key>                  label, type, size, resource_type, modified_at
  --dir <asc|desc>              Sort direction
  --page <n> --page-size <n>    Page to print and entries per page
  --layout <grid|list>          Default page size: grid or list view
  --media/--character/--tags    Comma-separated category keys
  --mode <any|all>              How keys within a group combine
  --type <type>                 Exact entry type
  --diff-status <status>        Keep entries with this status between
  --from <v> --to <v>           two versions (added, removed, modified,
                                unchanged, missing)

Diff options:
  --status <status>             all, added, removed, modified
  --keyword <text>              Free-text filter
  --limit <n>                   Item limit requested from the service

Global options:
  --log-level <level>           Override LOG_LEVEL for this run

Examples:
  python -m catalog_explorer.cli search bgm --media audio --sort size --dir desc
  python -m catalog_explorer.cli diff 20250101 20250201 --status modified
"""
    print(usage)


def main() -> None:
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print_usage()
        sys.exit(1)

    command = sys.argv[1]
    args = sys.argv[2:]

    try:
        setup_logging(level=get_option(args, "log-level") or None)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        if command == "test-config":
            asyncio.run(cmd_test_config())

        elif command == "classify":
            if not positional(args):
                print("Error: label required")
                sys.exit(1)
            asyncio.run(cmd_classify(positional(args)[0]))

        elif command == "shortcuts":
            if not positional(args):
                print("Error: group required (media, character, tag)")
                sys.exit(1)
            asyncio.run(cmd_shortcuts(positional(args)[0]))

        elif command == "search":
            asyncio.run(cmd_search(args))

        elif command == "versions":
            asyncio.run(cmd_versions())

        elif command == "diff":
            values = positional(args)
            if len(values) < 2:
                print("Error: from and to versions required")
                sys.exit(1)
            asyncio.run(cmd_diff(values[0], values[1], args))

        elif command in ("help", "--help", "-h"):
            print_usage()

        else:
            print(f"Unknown command: {command}")
            print_usage()
            sys.exit(1)

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.exception("CLI error", error=str(e))
        output = CLIOutput(
            success=False,
            command=command,
            error=str(e),
        )
        print_json(output)
        sys.exit(1)


if __name__ == "__main__":
    main()
