from __future__ import annotations

from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication

COL = {
    "bg": "#F7F2EC",
    "surface": "#FFF9F2",
    "surface2": "#FFFDF8",
    "panel": "#EDE8E1",
    "border": "#E3D9CF",
    "text": "#3A3A38",
    "text_primary": "#2F3135",
    "text_muted": "#707070",
    "muted": "#7A7A78",
    "accent": "#A1E3D8",
    "accent2": "#8FDCCF",
    "accent_border": "#6FB9AD",
    "done": "#27AE60",
    "pending_badge": "#D4CEC8",
    "success_bg": "#E6F6EA",
    "success": "#9AD8A6",
    "error_bg": "#FDE7E5",
    "error": "#E18A85",
    "info_bg": "#F2F1EF",
    "info": "#7A7A78",
}


def apply_theme(app: QApplication) -> None:
    app.setStyle("Fusion")
    palette = QPalette()
    palette.setColor(QPalette.ColorRole.Window, QColor(COL["bg"]))
    palette.setColor(QPalette.ColorRole.WindowText, QColor(COL["text"]))
    palette.setColor(QPalette.ColorRole.Base, QColor(COL["surface"]))
    palette.setColor(QPalette.ColorRole.AlternateBase, QColor(COL["surface2"]))
    palette.setColor(QPalette.ColorRole.Text, QColor(COL["text"]))
    palette.setColor(QPalette.ColorRole.Button, QColor(COL["surface"]))
    palette.setColor(QPalette.ColorRole.ButtonText, QColor(COL["text"]))
    palette.setColor(QPalette.ColorRole.Highlight, QColor(COL["accent2"]))
    palette.setColor(QPalette.ColorRole.HighlightedText, QColor(COL["text_primary"]))
    app.setPalette(palette)
    app.setStyleSheet(build_qss())


def build_qss() -> str:
    return f"""
    * {{
        color: {COL["text_primary"]};
        font-size: 12px;
    }}
    QGroupBox {{
        border: 1px solid {COL["border"]};
        border-radius: 10px;
        margin-top: 8px;
    }}
    QGroupBox::title {{
        subcontrol-origin: margin;
        left: 10px;
        padding: 0 4px;
        font-weight: 700;
    }}
    QLabel#sectionTitle {{
        font-size: 16px;
        font-weight: 700;
    }}
    QLabel#muted {{
        color: {COL["text_muted"]};
    }}
    QLabel#bmiValue[obese="true"] {{
        color: {COL["error"]};
        font-weight: 700;
    }}
    QLabel#statusLabel {{
        color: {COL["muted"]};
        background: transparent;
        border: none;
        border-radius: 8px;
        padding: 0;
    }}
    QLabel#statusLabel[statusLevel="info"] {{
        color: {COL["info"]};
        background: {COL["info_bg"]};
        border: 1px solid #C9C6C1;
        padding: 6px 10px;
    }}
    QLabel#statusLabel[statusLevel="success"] {{
        color: {COL["text"]};
        background: {COL["success_bg"]};
        border: 1px solid {COL["success"]};
        padding: 6px 10px;
    }}
    QLabel#statusLabel[statusLevel="error"] {{
        color: {COL["text"]};
        background: {COL["error_bg"]};
        border: 1px solid {COL["error"]};
        padding: 6px 10px;
    }}
    QFrame#wizardStepPanel {{
        background-color: {COL["panel"]};
        border-right: 1px solid {COL["pending_badge"]};
    }}
    QFrame#wizardNavBar {{
        background-color: {COL["surface"]};
        border-top: 1px solid {COL["border"]};
    }}
    QPushButton#stepBadge {{
        border-radius: 15px;
        font-weight: bold;
        min-width: 30px;
        max-width: 30px;
        min-height: 30px;
        max-height: 30px;
        background-color: {COL["pending_badge"]};
        color: {COL["muted"]};
    }}
    QPushButton#stepBadge[stepState="active"] {{
        background-color: {COL["accent2"]};
        color: {COL["text"]};
    }}
    QPushButton#stepBadge[stepState="done"] {{
        background-color: {COL["done"]};
        color: #FFFFFF;
    }}
    QLabel#stepName[stepState="active"] {{
        font-weight: bold;
    }}
    QLabel#stepName[stepState="done"] {{
        color: {COL["done"]};
    }}
    QWidget#toast {{
        border-radius: 12px;
    }}
    QWidget#toast[toastLevel="success"] {{
        background: {COL["success_bg"]};
        border: 1px solid {COL["success"]};
    }}
    QWidget#toast[toastLevel="error"] {{
        background: {COL["error_bg"]};
        border: 1px solid {COL["error"]};
    }}
    QWidget#toast[toastLevel="info"] {{
        background: {COL["info_bg"]};
        border: 1px solid #C9C6C1;
    }}
    QWidget#toast QLabel {{
        background: transparent;
        color: {COL["text"]};
    }}
    """
