"""Qt widgets; importing this package requires PySide6."""
