from __future__ import annotations

from PySide6.QtWidgets import QWidget

from sedation_chart.application.notifications import ERROR_DURATION_MS, Notification
from sedation_chart.ui.widgets.toast import QtNotifier, ToastManager, toast_manager_for


def test_toast_manager_adds_and_positions_toast(qapp) -> None:
    parent = QWidget()
    parent.resize(800, 600)
    manager = ToastManager(parent)

    toast = manager.show("Saved as draft", level="info", timeout_ms=5000)
    qapp.processEvents()

    assert toast in manager.toasts
    assert toast.x() >= 0
    assert toast.y() >= 0


def test_toast_manager_repositions_on_parent_resize(qapp) -> None:
    parent = QWidget()
    parent.resize(700, 500)
    parent.show()
    manager = ToastManager(parent)

    toast = manager.show("resize", level="success", timeout_ms=5000)
    qapp.processEvents()
    before_x = toast.x()
    parent.resize(900, 500)
    manager._layout_toasts()
    qapp.processEvents()

    assert toast.x() > before_x


def test_show_notification_uses_kind_and_duration(qapp) -> None:  # noqa: ARG001
    parent = QWidget()
    manager = ToastManager(parent)

    toast = manager.show_notification(Notification(kind="error", text="Failed", duration_ms=ERROR_DURATION_MS))

    assert toast.property("toastLevel") == "error"
    assert toast.timeout_ms == ERROR_DURATION_MS


def test_qt_notifier_shows_and_clears_toasts(qapp) -> None:
    parent = QWidget()
    parent.resize(600, 400)
    notifier = QtNotifier(parent)

    notification = notifier.notify("success", "IV sedation form submitted successfully")
    qapp.processEvents()
    manager = toast_manager_for(parent)

    assert notification.duration_ms == 3000
    assert [toast.text for toast in manager.toasts] == ["IV sedation form submitted successfully"]

    notifier.clear()
    qapp.processEvents()
    assert all(toast._closing for toast in manager.toasts)
