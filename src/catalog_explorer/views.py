"""
View models for the search and diff screens.

Each view model owns its load state and tags every request with a
sequence token; a response that arrives after a newer request was
issued is discarded.
"""

from dataclasses import dataclass
from enum import Enum

from catalog_explorer.client.catalog import CatalogServiceClient
from catalog_explorer.client.contracts import CatalogEntry, DiffResult, DiffStatus, VersionInfo
from catalog_explorer.config import get_settings
from catalog_explorer.diff.presenter import STATUS_ALL, DiffView, present
from catalog_explorer.diff.versions import (
    SelectionState,
    VersionSelection,
    default_selection,
    normalize_versions,
    validate_selection,
)
from catalog_explorer.listing.paginator import Page, ResultListView
from catalog_explorer.logger import get_logger
from catalog_explorer.taxonomy.classifier import CategorySelection, Classifier, MatchMode


class LoadState(str, Enum):
    """Lifecycle of a remote load."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class RequestSequencer:
    """Hands out increasing request tokens and tracks the newest one."""

    def __init__(self) -> None:
        self._latest = 0

    def next(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest

    @property
    def latest(self) -> int:
        return self._latest


@dataclass
class LoadStatus:
    state: LoadState = LoadState.IDLE
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.state is LoadState.FAILED


class SearchViewModel:
    """
    Search results with category filters, sorting and paging.

    Example:
        >>> vm = SearchViewModel(client, Classifier(store))
        >>> await vm.load("bgm")
        >>> vm.apply_filters(CategorySelection(media=["audio"]))
        >>> vm.page().items
    """

    def __init__(
        self,
        client: CatalogServiceClient,
        classifier: Classifier,
        *,
        view: ResultListView | None = None,
    ) -> None:
        settings = get_settings()
        self._client = client
        self._classifier = classifier
        self._sequencer = RequestSequencer()
        self._logger = get_logger(__name__, component="search_view")
        self.status = LoadStatus()
        self.all_entries: list[CatalogEntry] = []
        self.selection = CategorySelection()
        self.match_mode = MatchMode.ANY
        self.diff_status: DiffStatus | str = STATUS_ALL
        self.diff_versions = VersionSelection("", "")
        self.diff_error: str | None = None
        self._diff_sequencer = RequestSequencer()
        self._diff_pair: tuple[str, str] = ("", "")
        self._diff_statuses: dict[str, DiffStatus | None] = {}
        self.view = view or ResultListView(
            sort_key=settings.view.sort_key,
            sort_direction=settings.view.sort_direction,
            page_size=settings.view.page_size,
        )

    async def load(self, query: str = "", field: str = "all") -> bool:
        """
        Run a search and apply the current filters to its results.

        Returns:
            bool: False when the response was superseded and discarded
        """
        token = self._sequencer.next()
        self.status = LoadStatus(LoadState.LOADING)
        result = await self._client.search(query, field)

        if not self._sequencer.is_current(token):
            self._logger.debug("Discarding stale search response", token=token)
            return False

        if not result.success:
            self.status = LoadStatus(LoadState.FAILED, result.error_message)
            self.all_entries = []
            self.view.set_entries([])
            return True

        self.all_entries = list(result.data or [])
        self.status = LoadStatus(LoadState.LOADED)
        if self.diff_filter_active:
            await self._ensure_diff_statuses(self._diff_sequencer.next())
            if not self._sequencer.is_current(token):
                return False
        self._refilter()
        return True

    def apply_filters(
        self,
        selection: CategorySelection,
        mode: MatchMode | str = MatchMode.ANY,
    ) -> None:
        """
        Change the category selection.

        Entries newly let through while a diff status filter is active
        stay hidden until their status is known; call
        set_diff_filter() again to look them up.
        """
        self.selection = selection
        self.match_mode = MatchMode(mode)
        self._refilter()

    @property
    def diff_filter_active(self) -> bool:
        """A status is chosen and the version pair can be diffed."""
        pair = self.diff_versions
        return (
            self.diff_status != STATUS_ALL
            and bool(pair.from_version)
            and bool(pair.to_version)
            and pair.from_version != pair.to_version
        )

    async def set_diff_filter(
        self,
        status: DiffStatus | str,
        versions: VersionSelection,
    ) -> bool:
        """
        Keep only entries with the given diff status between two versions.

        Statuses of the currently visible labels are looked up in
        batches and cached per version pair. Labels the service does not
        report are ``missing``. Labels whose lookup failed have no
        status and never pass the filter; ``diff_error`` keeps the
        failure message.

        Args:
            status: ``all`` or a DiffStatus value
            versions: The from/to pair to compare

        Returns:
            bool: False when a newer filter change superseded this one
        """
        self.diff_status = STATUS_ALL if status == STATUS_ALL else DiffStatus(status)
        self.diff_versions = versions
        if self.diff_filter_active:
            if not await self._ensure_diff_statuses(self._diff_sequencer.next()):
                return False
        self._refilter()
        return True

    def diff_status_of(self, label: str) -> DiffStatus | None:
        """Cached status of a label for the current pair, if looked up."""
        return self._diff_statuses.get(label)

    async def _ensure_diff_statuses(self, token: int) -> bool:
        pair = (self.diff_versions.from_version, self.diff_versions.to_version)
        if pair != self._diff_pair:
            self._diff_pair = pair
            self._diff_statuses = {}
            self.diff_error = None

        pending = [
            entry.label
            for entry in self._category_filtered()
            if entry.label not in self._diff_statuses
        ]
        if not pending:
            return True

        result = await self._client.lookup_diff(pair[0], pair[1], pending)
        if not self._diff_sequencer.is_current(token) or pair != self._diff_pair:
            self._logger.debug("Discarding stale diff lookup", token=token)
            return False

        if not result.success or result.data is None:
            self.diff_error = result.error_message
            self._logger.warning(
                "Diff status lookup failed",
                labels=len(pending),
                error=result.error_message,
            )
            for label in pending:
                self._diff_statuses.setdefault(label, None)
            return True

        for label in pending:
            item = result.data.get(label.strip())
            self._diff_statuses[label] = item.status if item else DiffStatus.MISSING
        return True

    def _category_filtered(self) -> list[CatalogEntry]:
        if self.selection.is_empty:
            return self.all_entries
        return self._classifier.filter_entries(
            self.all_entries, self.selection, self.match_mode
        )

    def _refilter(self) -> None:
        filtered = self._category_filtered()
        if self.diff_filter_active:
            filtered = [
                entry
                for entry in filtered
                if self._diff_statuses.get(entry.label) == self.diff_status
            ]
        self.view.set_entries(filtered)

    @property
    def is_empty(self) -> bool:
        """Loaded successfully with nothing to show (distinct from failed)."""
        return self.status.state is LoadState.LOADED and not self.view.entries

    def page(self, number: int | None = None) -> Page[CatalogEntry]:
        if number is not None:
            return self.view.go_to(number)
        return self.view.current_page()


class VersionsViewModel:
    """Known catalog snapshots and the current from/to pick."""

    def __init__(self, client: CatalogServiceClient) -> None:
        self._client = client
        self._sequencer = RequestSequencer()
        self._logger = get_logger(__name__, component="versions_view")
        self.status = LoadStatus()
        self.versions: list[VersionInfo] = []
        self.current = ""
        self.selection = VersionSelection("", "")

    async def load(self) -> bool:
        token = self._sequencer.next()
        self.status = LoadStatus(LoadState.LOADING)
        result = await self._client.fetch_versions()

        if not self._sequencer.is_current(token):
            self._logger.debug("Discarding stale version list", token=token)
            return False

        if not result.success or result.data is None:
            self.status = LoadStatus(LoadState.FAILED, result.error_message)
            self.versions = []
            self.current = ""
            self.selection = VersionSelection("", "")
            return True

        self.versions = normalize_versions(result.data.versions)
        self.current = result.data.current
        self.selection = default_selection(
            self.versions,
            self.current,
            self.selection.from_version,
            self.selection.to_version,
        )
        self.status = LoadStatus(LoadState.LOADED)
        self._logger.info(
            "Versions loaded",
            versions=len(self.versions),
            current=self.current,
        )
        return True

    def select(self, from_version: str, to_version: str) -> SelectionState:
        self.selection = VersionSelection(from_version, to_version)
        return self.selection_state

    @property
    def selection_state(self) -> SelectionState:
        return validate_selection(
            self.selection.from_version,
            self.selection.to_version,
            self.versions,
        )


class DiffViewModel:
    """
    Diff between the selected versions, filtered for display.

    Only the newest request's response is applied.
    """

    def __init__(
        self,
        client: CatalogServiceClient,
        versions: VersionsViewModel,
    ) -> None:
        self._client = client
        self._versions = versions
        self._sequencer = RequestSequencer()
        self._logger = get_logger(__name__, component="diff_view")
        self.status = LoadStatus()
        self.result: DiffResult | None = None
        self.selection_state = SelectionState.UNAVAILABLE
        self._result_to = ""

    async def load(self, limit: int | None = None) -> bool:
        """
        Fetch the diff for the current version selection.

        An invalid selection is reported through ``selection_state``
        and no request is made.

        Returns:
            bool: True if this call's outcome was applied
        """
        self.selection_state = self._versions.selection_state
        if self.selection_state is not SelectionState.READY:
            self._logger.info("Diff not requested", reason=self.selection_state.value)
            self._sequencer.next()
            self.result = None
            self.status = LoadStatus()
            return True

        selection = self._versions.selection
        token = self._sequencer.next()
        self.status = LoadStatus(LoadState.LOADING)
        result = await self._client.fetch_diff(
            selection.from_version, selection.to_version, limit
        )

        if not self._sequencer.is_current(token):
            self._logger.debug(
                "Discarding stale diff response",
                token=token,
                latest=self._sequencer.latest,
            )
            return False

        if not result.success or result.data is None:
            self.status = LoadStatus(LoadState.FAILED, result.error_message)
            self.result = None
            return True

        self.result = result.data
        self._result_to = selection.to_version
        self.status = LoadStatus(LoadState.LOADED)
        return True

    def view(self, status: str = STATUS_ALL, keyword: str = "") -> DiffView | None:
        """Presented diff, or None when nothing is loaded."""
        if self.result is None:
            return None
        return present(
            self.result,
            status,
            keyword,
            selected_to=self._result_to,
            live_version=self._versions.current,
        )
