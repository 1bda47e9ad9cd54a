from __future__ import annotations

from sedation_chart.ui.theme import COL, apply_theme, build_qss


def test_theme_contains_required_semantic_tokens() -> None:
    required = {
        "bg",
        "surface",
        "border",
        "text_primary",
        "accent2",
        "done",
        "success",
        "error",
        "info",
    }
    assert required.issubset(COL.keys())


def test_qss_styles_wizard_states() -> None:
    qss = build_qss()

    assert 'QPushButton#stepBadge[stepState="done"]' in qss
    assert 'QLabel#bmiValue[obese="true"]' in qss
    assert 'QWidget#toast[toastLevel="error"]' in qss


def test_apply_theme_sets_stylesheet(qapp) -> None:
    apply_theme(qapp)
    assert qapp.styleSheet()
