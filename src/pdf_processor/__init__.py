"""PyMuPDF, python-docx and Pillow backed collaborators for the layout engine."""
