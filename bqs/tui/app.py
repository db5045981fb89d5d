"""Interactive dataset browser."""

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import DataTable, Footer, Header, Static, Tree

from bqs.bigquery.client import BigQueryClient
from bqs.bigquery.models import SchemaField, TableInfo, TableMetadata
from bqs.core.errors import ClassifiedError, OperationCancelledError
from bqs.core.structlog_logger import get_struct_logger_with_context
from bqs.tui.schema_tree import populate_tree
from bqs.utils.format import format_bytes, format_time, table_type_icon


CACHED_MARKER = "●"


class BrowserApp(App[None]):
    """Browse the tables of a dataset and inspect their metadata and schema."""

    TITLE = "bqs browse"

    CSS = """
    #tables {
        width: 1fr;
    }
    #detail-pane {
        width: 2fr;
    }
    #details {
        height: auto;
        padding: 0 1;
    }
    #schema {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("r", "refresh", "Refresh"),
        Binding("y", "copy_table_id", "Copy ID"),
    ]

    def __init__(
        self,
        client: BigQueryClient,
        project: str,
        dataset: str,
        table: str | None = None,
    ) -> None:
        super().__init__()
        self.client = client
        self.project = project
        self.dataset = dataset
        self.initial_table = table
        self.current_table: str | None = None
        self.tables: list[TableInfo] = []
        self.cancel_event = client.cancel_event
        self.client.on_retry = self._report_retry
        self.logger = get_struct_logger_with_context(
            __name__, project=project, dataset=dataset
        )

    @property
    def dataset_id(self) -> str:
        return f"{self.project}.{self.dataset}"

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            yield DataTable(id="tables", cursor_type="row")
            with Vertical(id="detail-pane"):
                yield Static("Select a table and press enter", id="details")
                yield Tree("Schema", id="schema")
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = self.dataset_id
        table = self.query_one("#tables", DataTable)
        table.add_column("", key="icon")
        table.add_column("Table", key="name")
        table.add_column("Type", key="type")
        table.add_column("Cached", key="cached")
        self.load_tables()
        if self.initial_table:
            self.load_table(self.initial_table)

    def on_unmount(self) -> None:
        # Stop pending retry waits in worker threads
        self.cancel_event.set()

    @work(thread=True, exclusive=True, group="tables")
    def load_tables(self) -> None:
        try:
            tables = self.client.list_tables(self.project, self.dataset)
            cached = {
                info.name: self.client.is_table_metadata_cached(
                    self.project, self.dataset, info.name
                )
                for info in tables
            }
        except OperationCancelledError:
            return
        except ClassifiedError as e:
            self.call_from_thread(self._show_error, e)
            return
        self.call_from_thread(self._populate_tables, tables, cached)

    @work(thread=True, exclusive=True, group="details")
    def load_table(self, table_id: str) -> None:
        try:
            metadata = self.client.get_table_metadata(
                self.project, self.dataset, table_id
            )
        except OperationCancelledError:
            return
        except ClassifiedError as e:
            self.call_from_thread(self._show_error, e)
            return
        self.call_from_thread(self._show_metadata, table_id, metadata)

    def _populate_tables(self, tables: list[TableInfo], cached: dict[str, bool]) -> None:
        self.tables = tables
        table = self.query_one("#tables", DataTable)
        table.clear()
        for info in tables:
            table.add_row(
                table_type_icon(info.type),
                info.name,
                info.type,
                CACHED_MARKER if cached.get(info.name) else "",
                key=info.name,
            )
        if not tables:
            self.query_one("#details", Static).update(
                "No tables found in this dataset"
            )
        self.logger.debug("tables_loaded", count=len(tables))

    def _show_metadata(self, table_id: str, metadata: TableMetadata) -> None:
        self.current_table = table_id
        details = self.query_one("#details", Static)
        details.update(
            f"[b]{self.dataset_id}.{table_id}[/b] ({metadata.type or 'UNKNOWN'})\n"
            f"📈 {metadata.num_rows:,} rows • 💾 {format_bytes(metadata.num_bytes)}"
            f" • 🕒 Modified {format_time(metadata.last_modified_time)}"
            + (f"\n{metadata.description}" if metadata.description else "")
        )

        tree: Tree[SchemaField] = self.query_one("#schema", Tree)
        tree.clear()
        tree.root.set_label(f"Schema of {table_id}")
        fields = metadata.table_schema.fields if metadata.table_schema else []
        populate_tree(tree.root, fields)
        tree.root.expand()

        table = self.query_one("#tables", DataTable)
        if table_id in table.rows:
            table.update_cell(table_id, "cached", CACHED_MARKER)

    def _show_error(self, error: ClassifiedError) -> None:
        self.logger.warning("fetch_failed", **error.to_dict())
        self.notify(error.user_friendly_message(), title="Error", severity="error")

    def _report_retry(self, attempt: int, error: BaseException) -> None:
        # Called from worker threads
        self.call_from_thread(
            self.notify,
            f"Retrying (attempt {attempt}): {error}",
            severity="warning",
        )

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.row_key.value is not None:
            self.load_table(str(event.row_key.value))

    def action_refresh(self) -> None:
        """Invalidate cached data and fetch it again."""
        try:
            self.client.invalidate_cache(
                self.project, self.dataset, self.current_table or ""
            )
        except ClassifiedError as e:
            self._show_error(e)
            return
        self.notify("Refreshing from BigQuery")
        self.load_tables()
        if self.current_table:
            self.load_table(self.current_table)

    def action_copy_table_id(self) -> None:
        if self.current_table is None:
            self.notify("No table selected", severity="warning")
            return
        table_id = f"{self.dataset_id}.{self.current_table}"
        self.copy_to_clipboard(table_id)
        self.notify(f"Copied {table_id}")
