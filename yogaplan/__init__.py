"""YogaPlan: compose yoga sessions from cards and play them back on a timeline."""

__app_name__ = "YogaPlan"
__version__ = "0.4.0"
