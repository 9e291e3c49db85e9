"""PyQt6 front end for YogaPlan."""
