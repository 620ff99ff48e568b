"""List model exposing the combined feed's render entries."""

from PySide6.QtCore import QAbstractListModel, QModelIndex, Qt

from ..chat.combos import ComboEntry, RenderEntry
from ..chat.session import ChatSession

# Custom roles for accessing entry data
EntryRole = Qt.ItemDataRole.UserRole + 1
RecordRole = Qt.ItemDataRole.UserRole + 2
ComboCountRole = Qt.ItemDataRole.UserRole + 3
HighlightRole = Qt.ItemDataRole.UserRole + 4


class FeedListModel(QAbstractListModel):
    """Read-only model over a ChatSession's render list.

    Rows are reset whenever the session reports a feed update; the view
    re-sticks to the bottom on `feed_updated` when it was at the bottom.
    """

    def __init__(self, session: ChatSession, parent=None):
        super().__init__(parent)
        self._session = session
        self._entries: list[RenderEntry] = session.render_entries()
        session.feed_updated.connect(self._on_feed_updated)

    def rowCount(self, parent=QModelIndex()) -> int:  # noqa: N802
        if parent.isValid():
            return 0
        return len(self._entries)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole):
        if not index.isValid() or index.row() >= len(self._entries):
            return None

        entry = self._entries[index.row()]
        record = entry.record

        if role == Qt.ItemDataRole.DisplayRole:
            if isinstance(entry, ComboEntry):
                return f"{record.body.strip()} x{entry.count}"
            if record.author:
                return f"{record.author}: {record.body}"
            return record.body
        elif role == EntryRole:
            return entry
        elif role == RecordRole:
            return record
        elif role == ComboCountRole:
            return entry.count if isinstance(entry, ComboEntry) else 1
        elif role == HighlightRole:
            return self._session.matching_terms(record)

        return None

    def _on_feed_updated(self, _update_seq: int) -> None:
        self.beginResetModel()
        self._entries = self._session.render_entries()
        self.endResetModel()

    def get_entry(self, row: int) -> RenderEntry | None:
        """Get an entry by row index."""
        if 0 <= row < len(self._entries):
            return self._entries[row]
        return None
