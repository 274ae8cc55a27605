"""Dialog collecting the details of a new file or folder favorite."""

from pathlib import Path
from typing import List, Optional

from PyQt6.QtWidgets import (
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..models.bookmarkable import Bookmarkable, FileBookmark, FolderBookmark, Group

TOP_LEVEL_LABEL = "(top level)"


class FavoriteDialog(QDialog):
    """Asks for label, path, filter (folders only) and target group."""

    def __init__(
        self,
        folder: bool,
        groups: List[Group],
        group: Optional[Group] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.folder = folder
        self.groups = groups

        self.setWindowTitle("Add Folder to Favorites" if folder else "Add File to Favorites")
        self.setMinimumWidth(500)
        self.setup_ui()

        if group is not None and group in groups:
            self.group_combo.setCurrentIndex(groups.index(group) + 1)

    def setup_ui(self):
        """Set up the dialog UI."""
        layout = QVBoxLayout(self)
        form = QFormLayout()

        self.label_input = QLineEdit()
        form.addRow("Label:", self.label_input)

        path_row = QWidget()
        path_layout = QHBoxLayout(path_row)
        path_layout.setContentsMargins(0, 0, 0, 0)
        self.path_input = QLineEdit()
        self.path_input.textChanged.connect(self.on_path_changed)
        path_layout.addWidget(self.path_input)
        browse_btn = QPushButton("Browse...")
        browse_btn.clicked.connect(self.browse)
        path_layout.addWidget(browse_btn)
        form.addRow("Folder:" if self.folder else "File:", path_row)

        self.filter_input = QLineEdit(FolderBookmark.DEFAULT_FILTER)
        self.filter_input.setToolTip("Glob pattern, only matches files (e.g. *.py or **/*.md)")
        if self.folder:
            form.addRow("File filter:", self.filter_input)

        self.group_combo = QComboBox()
        self.group_combo.addItem(TOP_LEVEL_LABEL)
        for group in self.groups:
            text = f"{group.description}/{group.label}" if group.description else group.label
            self.group_combo.addItem(text)
        form.addRow("Group:", self.group_combo)

        layout.addLayout(form)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def browse(self):
        """Pick the file or folder with a native dialog."""
        if self.folder:
            path = QFileDialog.getExistingDirectory(self, "Select the folder to favorite")
        else:
            path, _ = QFileDialog.getOpenFileName(self, "Select the file to favorite")
        if path:
            self.path_input.setText(path)

    def on_path_changed(self, text: str):
        """Suggest the file name as label until the user types one."""
        if not self.label_input.isModified():
            self.label_input.setText(Path(text).name if text else "")

    def accept(self):
        """Validate before closing."""
        if not self.label_input.text().strip():
            QMessageBox.warning(self, "Missing Label", "Please enter a label.")
            return
        if not self.path_input.text().strip():
            QMessageBox.warning(self, "Missing Path", "Please select a file or folder.")
            return
        super().accept()

    def create_bookmark(self) -> Bookmarkable:
        """Build the favorite from the dialog's fields."""
        label = self.label_input.text().strip()
        path = str(Path(self.path_input.text().strip()).expanduser().absolute())

        if self.folder:
            return FolderBookmark(
                label=label,
                resource_path=path,
                filter=self.filter_input.text().strip() or FolderBookmark.DEFAULT_FILTER,
            )
        return FileBookmark(label=label, resource_path=path)

    def selected_group(self) -> Optional[Group]:
        index = self.group_combo.currentIndex()
        return self.groups[index - 1] if index > 0 else None
