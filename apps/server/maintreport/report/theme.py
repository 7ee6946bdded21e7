from __future__ import annotations

# Print palette of the maintenance report template.
REPORT_COLORS = {
    "header_band": "#1f2937",
    "header_text": "#ffffff",
    "label_bg": "#f5f7fa",
    "label_text": "#505050",
    "value_text": "#141414",
    "table_border": "#c8c8c8",
    "advice_border": "#6366f1",
    "advice_bg": "#f9faff",
    "advice_title": "#4f46e5",
    "advice_text": "#3c3c3c",
    "photo_heading": "#1f2937",
    "photo_border": "#e6e6e6",
    "footer_text": "#b4b4b4",
}
