"""CSS custom-property tokens for the estimate summary view."""

LIGHT = "light"
DARK = "dark"

_TOKENS = {
    DARK: {
        "--text-color": "#E4E6EB",
        "--border-color": "#3A3B3D",
        "--input-bg": "#242526",
        "--header-bg": "#1C1E21",
        "--cell-bg": "#242526",
        "--calculated-bg": "#1C1E21",
        "--table-bg": "#1C1E21",
        "--summary-bg": "#242526",
        "--total-bg": "#1C1E21",
        "--input-text": "#E4E6EB",
        "--input-placeholder": "#6B7280",
        "--input-border-focus": "#f26722",
    },
    LIGHT: {
        "--text-color": "#333333",
        "--border-color": "#E5E7EB",
        "--input-bg": "#FFFFFF",
        "--header-bg": "#F9FAFB",
        "--cell-bg": "#FFFFFF",
        "--calculated-bg": "#F9FAFB",
        "--table-bg": "#FFFFFF",
        "--summary-bg": "#F9FAFB",
        "--total-bg": "#F3F4F6",
        "--input-text": "#111827",
        "--input-placeholder": "#9CA3AF",
        "--input-border-focus": "#f26722",
    },
}


def normalize_theme(preference):
    value = str(preference or "").strip().lower()
    return DARK if value == DARK else LIGHT


def compute_theme(preference):
    """Token map for ``preference`` ('dark' or 'light'; anything else is light)."""
    return dict(_TOKENS[normalize_theme(preference)])
