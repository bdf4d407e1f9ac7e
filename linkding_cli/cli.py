"""
Command-line interface for the linkding CLI.

This module provides the ``ld`` command: bookmark listing and editing, tag
management, saved-search bundles, and import, export, backup and restore of
the whole bookmark collection.
"""

import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TextIO

from pydantic import ValidationError

from . import __version__
from .config.configuration import Configuration
from .config.pydantic_config import LinkdingConfig, format_config_error, save_config
from .core.api_client import LinkdingClient
from .core.data_models import BookmarkRecord, ExportOptions, ImportOptions, merge_tags
from .core.export_module import BACKUP_PREFIX, BookmarkExportManager, create_backup
from .core.formats import AUTO, BookmarkFormat
from .core.import_module import BookmarkImporter
from .core.pagination import (
    PaginationAggregator,
    fetch_all_bookmarks,
    fetch_all_bundles,
)
from .core.parsers import ParseResult
from .core.tag_operations import SORT_KEYS, TagManager
from .utils.error_handler import (
    CommandError,
    ConfigurationError,
    LinkdingCLIError,
    PartialFailureError,
    ServiceError,
)
from .utils.logging_setup import setup_logging
from .utils.output_formatter import ICONS, OutputFormatter
from .utils.progress import ProgressBar

ClientFactory = Callable[[Configuration], LinkdingClient]

FORMAT_CHOICES = [fmt.value for fmt in BookmarkFormat]


def create_client(config: Configuration) -> LinkdingClient:
    """Build an API client from loaded configuration."""
    return LinkdingClient(
        config.url,
        config.token,
        timeout=config.timeout,
        max_retries=config.max_retries,
    )


def split_tags(values: Optional[List[str]]) -> List[str]:
    """Flatten repeated and comma-separated ``--tags`` values."""
    if not values:
        return []
    return list(merge_tags(part for value in values for part in value.split(",")))


def bundle_tags(value: Optional[str]) -> Optional[str]:
    """Normalize a comma- or space-separated tag list to linkding's form."""
    if value is None:
        return None
    return " ".join(merge_tags(value.replace(",", " ").split()))


class CLIInterface:
    """Command line interface for linkding."""

    def __init__(
        self,
        client_factory: Optional[ClientFactory] = None,
        environ: Optional[Dict[str, str]] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ):
        """
        Initialize the interface.

        Args:
            client_factory: Builds the API client from configuration
            environ: Environment used for LINKDING_URL / LINKDING_TOKEN
            stdin: Stream for confirmation prompts
            stdout: Stream for results
            stderr: Stream for status messages and prompts
        """
        self.client_factory = client_factory or create_client
        self.environ = environ
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.formatter = OutputFormatter(self.stdout)
        self.logger = logging.getLogger(__name__)
        self.parser = self._create_parser()

    # ------------------------------------------------------------------
    # Parser
    # ------------------------------------------------------------------

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser with all subcommands."""
        parser = argparse.ArgumentParser(
            prog="ld",
            description="Command-line client for the linkding bookmark manager",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  ld config init
  ld list --tags python --limit 20
  ld add https://example.com --tags reading,later
  ld tags --sort count
  ld tags rename k8s kubernetes
  ld bundles create Work --any-tags project,task
  ld import bookmarks.html --dry-run
  ld import bookmarks.csv --skip-duplicates --add-tags imported
  ld export --format html --output bookmarks.html
  ld backup --output ~/backups
  ld restore linkding-backup-2024-01-31T142500.json --wipe

Configuration:
  Settings are read from ~/.config/ld/config.toml (written by 'ld config
  init'). LINKDING_URL and LINKDING_TOKEN override the file.
            """,
        )

        parser.add_argument(
            "--version", "-V", action="version", version=f"%(prog)s {__version__}"
        )
        self._add_global_arguments(parser, argparse_defaults=True)

        # Global flags are also accepted after the subcommand
        common = argparse.ArgumentParser(add_help=False)
        self._add_global_arguments(common, argparse_defaults=False)

        subparsers = parser.add_subparsers(dest="command", metavar="<command>")

        self._add_config_commands(subparsers, common)
        self._add_bookmark_commands(subparsers, common)
        self._add_tag_commands(subparsers, common)
        self._add_bundle_commands(subparsers, common)
        self._add_transfer_commands(subparsers, common)

        user_parser = subparsers.add_parser(
            "user", parents=[common], help="User account information"
        )
        user_sub = user_parser.add_subparsers(dest="user_command", metavar="<action>")
        profile_parser = user_sub.add_parser(
            "profile", parents=[common], help="Show user profile preferences"
        )
        profile_parser.set_defaults(handler=self._cmd_user_profile)

        return parser

    @staticmethod
    def _add_global_arguments(
        parser: argparse.ArgumentParser, argparse_defaults: bool
    ) -> None:
        def default(value: Any) -> Any:
            return value if argparse_defaults else argparse.SUPPRESS

        parser.add_argument(
            "--config",
            "-c",
            type=Path,
            default=default(None),
            help="Configuration file (default: ~/.config/ld/config.toml)",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            default=default(False),
            help="Machine-readable JSON output",
        )
        parser.add_argument(
            "--debug",
            action="store_true",
            default=default(False),
            help="Enable debug logging on stderr",
        )
        parser.add_argument(
            "--log-file",
            type=Path,
            default=default(None),
            help="Also write debug logs to this file",
        )
        parser.add_argument(
            "--timeout",
            type=int,
            default=default(None),
            help="Request timeout in seconds (overrides configuration)",
        )

    def _add_config_commands(self, subparsers, common) -> None:
        config_parser = subparsers.add_parser(
            "config", parents=[common], help="Manage CLI configuration"
        )
        config_sub = config_parser.add_subparsers(
            dest="config_command", metavar="<action>"
        )

        init_parser = config_sub.add_parser(
            "init", parents=[common], help="Interactively create a configuration"
        )
        init_parser.add_argument("--url", help="linkding URL (prompted if omitted)")
        init_parser.add_argument(
            "--token", help="API token (prompted if omitted, input is hidden)"
        )
        init_parser.set_defaults(handler=self._cmd_config_init)

        show_parser = config_sub.add_parser(
            "show", parents=[common], help="Show configuration with the token redacted"
        )
        show_parser.set_defaults(handler=self._cmd_config_show)

        test_parser = config_sub.add_parser(
            "test", parents=[common], help="Test the connection to linkding"
        )
        test_parser.set_defaults(handler=self._cmd_config_test)

    def _add_bookmark_commands(self, subparsers, common) -> None:
        list_parser = subparsers.add_parser(
            "list", parents=[common], help="List bookmarks"
        )
        list_parser.add_argument("--query", "-q", default="", help="Search query")
        list_parser.add_argument(
            "--tags", "-T", action="append", help="Filter by tags (AND, comma-separated)"
        )
        list_parser.add_argument(
            "--unread", "-u", action="store_true", help="Show only unread bookmarks"
        )
        list_parser.add_argument(
            "--archived", "-a", action="store_true", help="Show only archived bookmarks"
        )
        list_parser.add_argument(
            "--limit", "-l", type=int, default=100, help="Maximum results (default: 100)"
        )
        list_parser.add_argument(
            "--offset", "-o", type=int, default=0, help="Pagination offset"
        )
        list_parser.set_defaults(handler=self._cmd_list)

        add_parser = subparsers.add_parser(
            "add", parents=[common], help="Add a bookmark"
        )
        add_parser.add_argument("url", help="URL to bookmark")
        add_parser.add_argument(
            "--title", "-t", default="", help="Custom title (default: fetched by linkding)"
        )
        add_parser.add_argument("--description", "-d", default="", help="Description")
        add_parser.add_argument("--notes", "-n", default="", help="Notes")
        add_parser.add_argument(
            "--tags", "-T", action="append", help="Tags (comma-separated)"
        )
        add_parser.add_argument(
            "--unread", "-u", action="store_true", help="Mark as unread"
        )
        add_parser.add_argument(
            "--shared", "-s", action="store_true", help="Share publicly"
        )
        add_parser.set_defaults(handler=self._cmd_add)

        get_parser = subparsers.add_parser(
            "get", parents=[common], help="Show one bookmark"
        )
        get_parser.add_argument("id", type=int, help="Bookmark ID")
        get_parser.set_defaults(handler=self._cmd_get)

        update_parser = subparsers.add_parser(
            "update", parents=[common], help="Update a bookmark"
        )
        update_parser.add_argument("id", type=int, help="Bookmark ID")
        update_parser.add_argument("--url", help="New URL")
        update_parser.add_argument("--title", "-t", help="New title")
        update_parser.add_argument("--description", "-d", help="New description")
        update_parser.add_argument("--notes", "-n", help="New notes")
        update_parser.add_argument(
            "--tags", "-T", action="append", help="Replace tags (comma-separated)"
        )
        update_parser.add_argument(
            "--add-tags", action="append", help="Add tags to the existing ones"
        )
        update_parser.add_argument(
            "--remove-tags", action="append", help="Remove specific tags"
        )
        update_parser.add_argument(
            "--unread",
            action=argparse.BooleanOptionalAction,
            default=None,
            help="Set unread status",
        )
        update_parser.add_argument(
            "--shared",
            action=argparse.BooleanOptionalAction,
            default=None,
            help="Set shared status",
        )
        archive_group = update_parser.add_mutually_exclusive_group()
        archive_group.add_argument(
            "--archive", "-a", action="store_true", help="Archive the bookmark"
        )
        archive_group.add_argument(
            "--unarchive", action="store_true", help="Unarchive the bookmark"
        )
        update_parser.set_defaults(handler=self._cmd_update)

        delete_parser = subparsers.add_parser(
            "delete", parents=[common], help="Delete a bookmark"
        )
        delete_parser.add_argument("id", type=int, help="Bookmark ID")
        delete_parser.add_argument(
            "--force", "-f", action="store_true", help="Skip the confirmation prompt"
        )
        delete_parser.set_defaults(handler=self._cmd_delete)

    def _add_tag_commands(self, subparsers, common) -> None:
        tags_parser = subparsers.add_parser(
            "tags", parents=[common], help="List and manage tags"
        )
        tags_parser.add_argument(
            "--sort", "-s", choices=SORT_KEYS, default="name", help="Sort order"
        )
        tags_parser.add_argument(
            "--unused", action="store_true", help="Show only tags with no bookmarks"
        )
        tags_parser.set_defaults(handler=self._cmd_tags)

        tags_sub = tags_parser.add_subparsers(dest="tags_command", metavar="<action>")

        rename_parser = tags_sub.add_parser(
            "rename", parents=[common], help="Rename a tag on every bookmark"
        )
        rename_parser.add_argument("old_name", help="Existing tag")
        rename_parser.add_argument("new_name", help="New tag name")
        rename_parser.add_argument(
            "--force", "-f", action="store_true", help="Skip the confirmation prompt"
        )
        rename_parser.set_defaults(handler=self._cmd_tags_rename)

        delete_parser = tags_sub.add_parser(
            "delete", parents=[common], help="Remove a tag from every bookmark"
        )
        delete_parser.add_argument("name", help="Tag to remove")
        delete_parser.add_argument(
            "--force", "-f", action="store_true", help="Skip the confirmation prompt"
        )
        delete_parser.set_defaults(handler=self._cmd_tags_delete)

        show_parser = tags_sub.add_parser(
            "show", parents=[common], help="List bookmarks carrying a tag"
        )
        show_parser.add_argument("name", help="Tag name")
        show_parser.set_defaults(handler=self._cmd_tags_show)

    def _add_bundle_commands(self, subparsers, common) -> None:
        bundles_parser = subparsers.add_parser(
            "bundles", parents=[common], help="Manage bundles (saved searches)"
        )
        bundles_parser.set_defaults(handler=self._cmd_bundles_list)
        bundles_sub = bundles_parser.add_subparsers(
            dest="bundles_command", metavar="<action>"
        )

        list_parser = bundles_sub.add_parser(
            "list", parents=[common], help="List all bundles"
        )
        list_parser.set_defaults(handler=self._cmd_bundles_list)

        get_parser = bundles_sub.add_parser(
            "get", parents=[common], help="Show one bundle"
        )
        get_parser.add_argument("id", type=int, help="Bundle ID")
        get_parser.set_defaults(handler=self._cmd_bundles_get)

        create_parser = bundles_sub.add_parser(
            "create", parents=[common], help="Create a bundle"
        )
        create_parser.add_argument("name", help="Bundle name")
        self._add_bundle_field_arguments(create_parser)
        create_parser.set_defaults(handler=self._cmd_bundles_create)

        update_parser = bundles_sub.add_parser(
            "update", parents=[common], help="Update a bundle"
        )
        update_parser.add_argument("id", type=int, help="Bundle ID")
        update_parser.add_argument("--name", help="New name")
        self._add_bundle_field_arguments(update_parser)
        update_parser.set_defaults(handler=self._cmd_bundles_update)

        delete_parser = bundles_sub.add_parser(
            "delete", parents=[common], help="Delete a bundle"
        )
        delete_parser.add_argument("id", type=int, help="Bundle ID")
        delete_parser.add_argument(
            "--force", "-f", action="store_true", help="Skip the confirmation prompt"
        )
        delete_parser.set_defaults(handler=self._cmd_bundles_delete)

    @staticmethod
    def _add_bundle_field_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--search", help="Search query")
        parser.add_argument("--any-tags", help="Match bookmarks with any of these tags")
        parser.add_argument("--all-tags", help="Match bookmarks with all of these tags")
        parser.add_argument("--excluded-tags", help="Leave out bookmarks with these tags")
        parser.add_argument("--order", type=int, help="Position in the bundle list")

    def _add_transfer_commands(self, subparsers, common) -> None:
        import_parser = subparsers.add_parser(
            "import", parents=[common], help="Import bookmarks from a file"
        )
        import_parser.add_argument("file", type=Path, help="JSON, HTML or CSV file")
        import_parser.add_argument(
            "--format",
            "-f",
            choices=[AUTO] + FORMAT_CHOICES,
            default=AUTO,
            help="Input format (default: detect from extension)",
        )
        import_parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be imported without making changes",
        )
        import_parser.add_argument(
            "--skip-duplicates",
            action="store_true",
            help="Skip URLs that already exist (default: update them)",
        )
        import_parser.add_argument(
            "--add-tags",
            "-T",
            action="append",
            help="Add these tags to every imported bookmark",
        )
        import_parser.set_defaults(handler=self._cmd_import)

        export_parser = subparsers.add_parser(
            "export", parents=[common], help="Export bookmarks"
        )
        export_parser.add_argument(
            "--format",
            "-f",
            choices=FORMAT_CHOICES,
            default=BookmarkFormat.JSON.value,
            help="Output format (default: json)",
        )
        export_parser.add_argument(
            "--output", "-o", type=Path, help="Output file (default: stdout)"
        )
        export_parser.add_argument(
            "--tags", "-T", action="append", help="Export only bookmarks with these tags"
        )
        export_parser.add_argument(
            "--no-archived",
            dest="include_archived",
            action="store_false",
            help="Leave out archived bookmarks",
        )
        export_parser.set_defaults(handler=self._cmd_export)

        backup_parser = subparsers.add_parser(
            "backup", parents=[common], help="Write a timestamped JSON backup"
        )
        backup_parser.add_argument(
            "--output",
            "-o",
            type=Path,
            default=Path("."),
            help="Output directory (default: current directory)",
        )
        backup_parser.add_argument(
            "--prefix", default=BACKUP_PREFIX, help="File name prefix"
        )
        backup_parser.set_defaults(handler=self._cmd_backup)

        restore_parser = subparsers.add_parser(
            "restore", parents=[common], help="Restore bookmarks from a backup"
        )
        restore_parser.add_argument("file", type=Path, help="Backup file")
        restore_parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be restored without making changes",
        )
        restore_parser.add_argument(
            "--wipe",
            action="store_true",
            help="Delete all existing bookmarks before restoring (DANGEROUS)",
        )
        restore_parser.set_defaults(handler=self._cmd_restore)

    def parse_args(self, args=None) -> argparse.Namespace:
        """Parse command line arguments."""
        return self.parser.parse_args(args)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _status(self, text: str) -> None:
        """Human status line on stderr; silent in JSON mode."""
        if not self.formatter.json_mode:
            print(text, file=self.stderr)

    def _prompt(self, text: str) -> str:
        self.stderr.write(text)
        self.stderr.flush()
        return self.stdin.readline().strip()

    def _prompt_secret(self, text: str) -> str:
        if self.stdin.isatty():
            return getpass.getpass(text, stream=self.stderr).strip()
        return self._prompt(text)

    def _confirm(self, text: str) -> bool:
        return self._prompt(text).lower() in ("y", "yes")

    def _require_force(self, args: argparse.Namespace) -> None:
        if self.formatter.json_mode and not args.force:
            raise CommandError(
                "Confirmation is required. Use --force together with --json"
            )

    def _load_config(self, args: argparse.Namespace) -> Configuration:
        config = Configuration(args.config, environ=self.environ)
        if args.timeout is not None:
            config.update_from_args({"timeout": args.timeout})
        return config

    def _connect(self, args: argparse.Namespace):
        """Load configuration and build the client and aggregator."""
        config = self._load_config(args)
        self.logger.info(f"Using linkding at {config.url}")
        client = self.client_factory(config)
        return client, PaginationAggregator(config.page_size)

    # ------------------------------------------------------------------
    # config
    # ------------------------------------------------------------------

    def _cmd_config_init(self, args: argparse.Namespace) -> int:
        url = args.url or self._prompt("linkding URL: ")
        token = args.token or self._prompt_secret("API Token: ")
        if not url or not token:
            raise ConfigurationError("URL and token are required")

        try:
            config = LinkdingConfig(url=url, token=token)
        except ValidationError as e:
            raise ConfigurationError(format_config_error(e))

        path = save_config(config, args.config)
        self.formatter.message(
            f"{ICONS['complete']} Configuration saved to {path}",
            {"status": "success", "path": str(path)},
        )
        return 0

    def _cmd_config_show(self, args: argparse.Namespace) -> int:
        config = self._load_config(args)
        data = config.to_display_dict()
        if self.formatter.json_mode:
            self.formatter.print_json(data)
            return 0

        self.formatter.message(f"URL: {data['url']}")
        self.formatter.message(f"Token: {data['token']}")
        self.formatter.message(f"Timeout: {data['timeout']}s")
        self.formatter.message(f"Max retries: {data['max_retries']}")
        self.formatter.message(f"Page size: {data['page_size']}")
        if data["config_file"]:
            self.formatter.message(f"Config file: {data['config_file']}")
        return 0

    def _cmd_config_test(self, args: argparse.Namespace) -> int:
        client, _ = self._connect(args)
        client.test_connection()
        self.formatter.message(
            f"{ICONS['complete']} Successfully connected to {client.base_url}",
            {"status": "success", "url": client.base_url},
        )
        return 0

    def _cmd_user_profile(self, args: argparse.Namespace) -> int:
        client, _ = self._connect(args)
        self.formatter.print_profile(client.get_user_profile())
        return 0

    # ------------------------------------------------------------------
    # Bookmarks
    # ------------------------------------------------------------------

    def _cmd_list(self, args: argparse.Namespace) -> int:
        client, _ = self._connect(args)
        page = client.get_bookmarks(
            query=args.query,
            tags=split_tags(args.tags),
            unread=args.unread,
            archived=args.archived,
            limit=args.limit,
            offset=args.offset,
        )
        self.formatter.print_bookmarks(page.items, total=page.count)
        if page.has_next:
            self._status(f"Use --offset {args.offset + args.limit} to see more")
        return 0

    def _cmd_add(self, args: argparse.Namespace) -> int:
        client, _ = self._connect(args)
        record = BookmarkRecord(
            url=args.url,
            title=args.title,
            description=args.description,
            notes=args.notes,
            tag_names=tuple(split_tags(args.tags)),
            unread=args.unread,
            shared=args.shared,
        )
        bookmark = client.create_bookmark(record)
        self._status(f"{ICONS['complete']} Bookmark added")
        self.formatter.print_bookmark(bookmark)
        return 0

    def _cmd_get(self, args: argparse.Namespace) -> int:
        client, _ = self._connect(args)
        self.formatter.print_bookmark(client.get_bookmark(args.id))
        return 0

    def _cmd_update(self, args: argparse.Namespace) -> int:
        fields: Dict[str, Any] = {}
        for name in ("url", "title", "description", "notes", "unread", "shared"):
            value = getattr(args, name)
            if value is not None:
                fields[name] = value
        if args.archive:
            fields["is_archived"] = True
        elif args.unarchive:
            fields["is_archived"] = False

        tag_changes = args.tags or args.add_tags or args.remove_tags
        if not fields and not tag_changes:
            raise CommandError("No updates specified")

        client, _ = self._connect(args)

        if tag_changes:
            if args.tags:
                tags = split_tags(args.tags)
            else:
                tags = list(client.get_bookmark(args.id).tag_names)
            tags = list(merge_tags(tags, split_tags(args.add_tags)))
            removed = {tag.lower() for tag in split_tags(args.remove_tags)}
            fields["tag_names"] = [tag for tag in tags if tag.lower() not in removed]

        bookmark = client.update_bookmark(args.id, fields)
        self._status(f"{ICONS['complete']} Bookmark updated")
        self.formatter.print_bookmark(bookmark)
        return 0

    def _cmd_delete(self, args: argparse.Namespace) -> int:
        self._require_force(args)
        client, _ = self._connect(args)

        if not args.force:
            bookmark = client.get_bookmark(args.id)
            self._status("About to delete bookmark:")
            self._status(f"  ID:    {bookmark.id}")
            self._status(f"  Title: {bookmark.display_title}")
            self._status(f"  URL:   {bookmark.url}")
            if not self._confirm("Are you sure? (y/N): "):
                self._status("Delete cancelled")
                return 0

        client.delete_bookmark(args.id)
        self.formatter.message(
            f"{ICONS['complete']} Bookmark {args.id} deleted",
            {"deleted": True, "id": args.id},
        )
        return 0

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def _cmd_tags(self, args: argparse.Namespace) -> int:
        client, aggregator = self._connect(args)
        tags = TagManager(client, aggregator).count_tags(
            sort=args.sort, unused_only=args.unused
        )
        self.formatter.print_tags(tags)
        if tags:
            self._status(f"\nTotal: {len(tags)} tags")
        return 0

    def _cmd_tags_rename(self, args: argparse.Namespace) -> int:
        self._require_force(args)
        client, aggregator = self._connect(args)
        manager = TagManager(client, aggregator)

        bookmarks = manager.bookmarks_with_tag(args.old_name)
        if not bookmarks:
            raise CommandError(f"No bookmarks found with tag '{args.old_name}'")

        if not args.force:
            self._status(
                f"This will rename tag '{args.old_name}' to '{args.new_name}' "
                f"on {len(bookmarks)} bookmark(s)."
            )
            if not self._confirm("Continue? (y/N): "):
                self._status("Aborted")
                return 0

        with ProgressBar(
            "Renaming", stream=self.stderr, enabled=not self.formatter.json_mode
        ) as progress:
            result = manager.rename_tag(
                args.old_name,
                args.new_name,
                bookmarks=bookmarks,
                progress_callback=progress.update,
            )

        self.formatter.print_bulk_result(
            f"Renamed '{args.old_name}' to '{args.new_name}'", result
        )
        if result.has_errors:
            raise PartialFailureError(result.failed)
        return 0

    def _cmd_tags_delete(self, args: argparse.Namespace) -> int:
        self._require_force(args)
        client, aggregator = self._connect(args)
        manager = TagManager(client, aggregator)

        bookmarks = manager.bookmarks_with_tag(args.name)
        if not args.force and bookmarks:
            self._status(
                f"This will remove tag '{args.name}' from {len(bookmarks)} bookmark(s)."
            )
            if not self._confirm("Continue? (y/N): "):
                self._status("Aborted")
                return 0

        with ProgressBar(
            "Removing", stream=self.stderr, enabled=not self.formatter.json_mode
        ) as progress:
            result = manager.remove_tag(
                args.name, bookmarks=bookmarks, progress_callback=progress.update
            )

        self.formatter.print_bulk_result(f"Removed '{args.name}'", result)
        if result.has_errors:
            raise PartialFailureError(result.failed)
        return 0

    def _cmd_tags_show(self, args: argparse.Namespace) -> int:
        client, aggregator = self._connect(args)
        bookmarks = TagManager(client, aggregator).bookmarks_with_tag(args.name)
        self.formatter.print_bookmarks(bookmarks)
        return 0

    # ------------------------------------------------------------------
    # Bundles
    # ------------------------------------------------------------------

    @staticmethod
    def _bundle_fields(args: argparse.Namespace) -> Dict[str, Any]:
        """Bundle fields given on the command line; omitted flags are left out."""
        fields = {
            "search": args.search,
            "any_tags": bundle_tags(args.any_tags),
            "all_tags": bundle_tags(args.all_tags),
            "excluded_tags": bundle_tags(args.excluded_tags),
            "order": args.order,
        }
        return {key: value for key, value in fields.items() if value is not None}

    def _cmd_bundles_list(self, args: argparse.Namespace) -> int:
        client, aggregator = self._connect(args)
        bundles = fetch_all_bundles(client, aggregator)
        self.formatter.print_bundles(bundles)
        if bundles:
            self._status(f"\nTotal: {len(bundles)} bundles")
        return 0

    def _cmd_bundles_get(self, args: argparse.Namespace) -> int:
        client, _ = self._connect(args)
        self.formatter.print_bundle(client.get_bundle(args.id))
        return 0

    def _cmd_bundles_create(self, args: argparse.Namespace) -> int:
        name = args.name.strip()
        if not name:
            raise CommandError("Bundle name cannot be empty")

        client, _ = self._connect(args)
        bundle = client.create_bundle(name, **self._bundle_fields(args))
        self._status(f"{ICONS['complete']} Bundle created")
        self.formatter.print_bundle(bundle)
        return 0

    def _cmd_bundles_update(self, args: argparse.Namespace) -> int:
        fields = self._bundle_fields(args)
        if args.name is not None:
            if not args.name.strip():
                raise CommandError("Bundle name cannot be empty")
            fields["name"] = args.name.strip()
        if not fields:
            raise CommandError(
                "No updates specified (use --name, --search, --any-tags, "
                "--all-tags, --excluded-tags or --order)"
            )

        client, _ = self._connect(args)
        bundle = client.update_bundle(args.id, fields)
        self._status(f"{ICONS['complete']} Bundle updated")
        self.formatter.print_bundle(bundle)
        return 0

    def _cmd_bundles_delete(self, args: argparse.Namespace) -> int:
        self._require_force(args)
        client, _ = self._connect(args)

        if not args.force:
            bundle = client.get_bundle(args.id)
            self._status(f"About to delete bundle '{bundle.name}' (ID {bundle.id})")
            if not self._confirm("Are you sure? (y/N): "):
                self._status("Delete cancelled")
                return 0

        client.delete_bundle(args.id)
        self.formatter.message(
            f"{ICONS['complete']} Bundle {args.id} deleted",
            {"deleted": True, "id": args.id},
        )
        return 0

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def _run_import(self, importer: BookmarkImporter, parse_result: ParseResult) -> int:
        with ProgressBar(
            "Importing", stream=self.stderr, enabled=not self.formatter.json_mode
        ) as progress:
            importer.progress_callback = progress.update
            result = importer.import_parsed(parse_result)

        self.formatter.print_import_result(result, dry_run=importer.options.dry_run)
        if result.has_errors:
            raise PartialFailureError(len(result.errors))
        return 0

    def _cmd_import(self, args: argparse.Namespace) -> int:
        options = ImportOptions(
            format=args.format,
            dry_run=args.dry_run,
            skip_duplicates=args.skip_duplicates,
            add_tags=tuple(split_tags(args.add_tags)),
        )
        client, aggregator = self._connect(args)
        importer = BookmarkImporter(client, options, aggregator=aggregator)
        return self._run_import(importer, importer.load_file(args.file))

    def _cmd_export(self, args: argparse.Namespace) -> int:
        options = ExportOptions(
            format=BookmarkFormat.from_name(args.format),
            tags=tuple(split_tags(args.tags)),
            include_archived=args.include_archived,
        )
        client, aggregator = self._connect(args)
        manager = BookmarkExportManager(client, options, aggregator=aggregator)

        if args.output is None:
            manager.export_to_stream(self.stdout)
            return 0

        result = manager.export_to_file(args.output)
        if self.formatter.json_mode:
            self.formatter.print_json(result.to_dict())
        else:
            self._status(f"Exported {result.count} bookmarks to {result.path}")
        return 0

    def _cmd_backup(self, args: argparse.Namespace) -> int:
        client, aggregator = self._connect(args)
        result = create_backup(
            client, args.output, prefix=args.prefix, aggregator=aggregator
        )
        if self.formatter.json_mode:
            self.formatter.print_json({"file": str(result.path)})
        else:
            self._status(f"Backup created: {result.path}")
        return 0

    def _cmd_restore(self, args: argparse.Namespace) -> int:
        options = ImportOptions(format=AUTO, dry_run=args.dry_run, skip_duplicates=False)
        client, aggregator = self._connect(args)
        importer = BookmarkImporter(client, options, aggregator=aggregator)

        # The backup must be readable before anything is deleted
        parse_result = importer.load_file(args.file)
        if args.wipe:
            self._wipe(client, aggregator, dry_run=args.dry_run)

        return self._run_import(importer, parse_result)

    def _wipe(self, client, aggregator: PaginationAggregator, dry_run: bool) -> None:
        """Delete every bookmark, archived ones included, after confirmation."""
        bookmarks = fetch_all_bookmarks(
            client, include_archived=True, aggregator=aggregator
        )
        if not bookmarks:
            self._status("No existing bookmarks to delete.")
            return

        if dry_run:
            self._status(f"Dry run: Would delete {len(bookmarks)} existing bookmarks")
            return

        if self.formatter.json_mode:
            raise CommandError(
                "--wipe requires interactive confirmation. Cannot use with --json"
            )

        self._status(
            f"WARNING: This will delete ALL {len(bookmarks)} existing bookmarks "
            f"before restoring."
        )
        if self._prompt("Type 'yes' to confirm: ").lower() != "yes":
            raise CommandError("Restore cancelled")

        deleted = 0
        failed = 0
        for bookmark in bookmarks:
            try:
                client.delete_bookmark(bookmark.id)
                deleted += 1
            except ServiceError as e:
                self.logger.warning(f"Failed to delete bookmark {bookmark.id}: {e}")
                failed += 1

        if failed:
            self._status(f"Deleted {deleted} bookmarks, {failed} failed")
        else:
            self._status(f"Deleted {deleted} bookmarks")

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self, args=None) -> int:
        """Execute CLI interface."""
        parsed_args = self.parse_args(args)

        setup_logging(debug=parsed_args.debug, log_file=parsed_args.log_file)
        self.formatter = OutputFormatter(self.stdout, json_mode=parsed_args.json)

        handler = getattr(parsed_args, "handler", None)
        if handler is None:
            self.parser.print_help(self.stderr)
            return 1

        try:
            return handler(parsed_args)
        except LinkdingCLIError as e:
            self.logger.debug(f"Command failed: {type(e).__name__}: {e}")
            print(f"Error: {e}", file=self.stderr)
            return 1
        except KeyboardInterrupt:
            print("\nInterrupted", file=self.stderr)
            return 130
        except Exception as e:
            self.logger.exception("Unexpected error in CLI")
            print(f"Error: {e}", file=self.stderr)
            return 1


def main(args=None):
    """Main entry point for the CLI."""
    cli = CLIInterface()
    return cli.run(args)
