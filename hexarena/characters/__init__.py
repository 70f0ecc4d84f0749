"""
Characters module - powiązania companionów z właścicielami.

Zawiera:
- CompanionLink: Pojedyncze powiązanie companion -> właściciel
- CompanionRegistry: Tablica powiązań, spawn / cascade / snapshot / restore
"""

from .companion import CompanionLink, CompanionRegistry

__all__ = ["CompanionLink", "CompanionRegistry"]
