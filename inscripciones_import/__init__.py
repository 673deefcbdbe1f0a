"""Bulk enrollment spreadsheet import.

Reads an enrollment workbook, reconciles its free-text company, executive
and modality names against the reference catalogs and creates one
Inscripcion per Ficha with its participants.
"""

__version__ = "0.1.0"
