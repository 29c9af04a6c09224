"""
Theme - dark palette colours and shared widget styles
"""

BG_DARK      = "#1e1e1e"
BG_MEDIUM    = "#252526"
BG_LIGHT     = "#2d2d30"
FG_PRIMARY   = "#d4d4d4"
FG_SECONDARY = "#9d9d9d"
FG_DIM       = "#6a6a6a"
ACCENT        = "#569cd6"
ACCENT_GREEN  = "#4ec9b0"
ACCENT_ORANGE = "#ce9178"
ERROR_RED     = "#f44747"
WARN_ORANGE   = "#d7ba7d"

# Artifact type colours (library dots and tab markers)
TYPE_COLORS = {
    "skill":   ACCENT,
    "command": ACCENT_GREEN,
    "agent":   ACCENT_ORANGE,
}

BTN_STYLE = f"""
    QPushButton {{
        background-color: {BG_LIGHT};
        color: {FG_PRIMARY};
        border: 1px solid #3a3a3d;
        padding: 4px 10px;
        border-radius: 3px;
    }}
    QPushButton:hover {{ background-color: #3a3a3d; }}
    QPushButton:pressed {{ background-color: {ACCENT}; color: #ffffff; }}
    QPushButton:disabled {{ color: {FG_DIM}; }}
"""

INPUT_STYLE = f"""
    QLineEdit, QTextEdit, QPlainTextEdit, QComboBox, QSpinBox {{
        background-color: {BG_MEDIUM};
        color: {FG_PRIMARY};
        border: 1px solid #3a3a3d;
        border-radius: 3px;
        padding: 3px 6px;
    }}
    QLineEdit:focus, QTextEdit:focus, QPlainTextEdit:focus {{
        border-color: {ACCENT};
    }}
"""

LIST_STYLE = f"""
    QTreeWidget, QListWidget {{
        background: {BG_DARK};
        color: {FG_PRIMARY};
        border: 1px solid {BG_LIGHT};
        selection-background-color: {ACCENT};
        font-size: 12px;
    }}
    QTreeWidget::item, QListWidget::item {{ padding: 2px 4px; }}
"""

FORM_LABEL_STYLE = f"color: {FG_SECONDARY}; font-size: 12px;"
SECTION_STYLE    = f"color: {FG_PRIMARY}; font-size: 12px; font-weight: bold; margin-top: 6px;"
