"""Service helpers backing the MantraSetu views."""
