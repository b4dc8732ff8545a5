"""Small Qt dialog helpers (binding passed in, never imported here)."""

from __future__ import annotations


def show_info(QtWidgets, parent, title: str, message: str) -> None:
    QtWidgets.QMessageBox.information(parent, title, message)


def show_warning(QtWidgets, parent, title: str, message: str) -> None:
    QtWidgets.QMessageBox.warning(parent, title, message)


def show_error(QtWidgets, parent, title: str, message: str) -> None:
    QtWidgets.QMessageBox.critical(parent, title, message)


def show_message(QtWidgets, parent, title: str, message: str, severity: str = "info") -> None:
    if severity == "error":
        show_error(QtWidgets, parent, title, message)
    elif severity == "warning":
        show_warning(QtWidgets, parent, title, message)
    else:
        show_info(QtWidgets, parent, title, message)


def ask_question(
    QtWidgets,
    parent,
    title: str,
    message: str,
    default_no: bool = True,
) -> bool:
    buttons = QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No
    default_button = QtWidgets.QMessageBox.No if default_no else QtWidgets.QMessageBox.Yes
    reply = QtWidgets.QMessageBox.warning(parent, title, message, buttons, default_button)
    return reply == QtWidgets.QMessageBox.Yes
