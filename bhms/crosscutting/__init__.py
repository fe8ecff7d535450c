"""Crosscutting: configuración, logging y errores tipados."""
