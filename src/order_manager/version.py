"""Version information for Gestor Pro."""

__app_name__ = "Gestor Pro"
__company__ = "Gestor Pro"
__version__ = "1.0.0"
