# Presentation-side helpers: report tables and CSV export.
