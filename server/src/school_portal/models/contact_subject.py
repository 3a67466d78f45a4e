"""Enums for contact messages"""

from enum import Enum


class ContactSubject(str, Enum):
    """Enum for contact form subjects"""

    INFORMACION = "informacion"
    ADMISIONES = "admisiones"
    PROGRAMAS = "programas"
    VESPERTINA = "vespertina"
    SOPORTE = "soporte"
    OTRO = "otro"

    @property
    def label(self) -> str:
        return SUBJECT_LABELS[self]


SUBJECT_LABELS = {
    ContactSubject.INFORMACION: "Información General",
    ContactSubject.ADMISIONES: "Admisiones",
    ContactSubject.PROGRAMAS: "Programas EGB y Bachillerato",
    ContactSubject.VESPERTINA: "Modalidad Vespertina",
    ContactSubject.SOPORTE: "Soporte Técnico",
    ContactSubject.OTRO: "Otro",
}


def subject_label(subject: str) -> str:
    """Human label for a stored subject value, falling back to the raw value."""
    try:
        return ContactSubject(subject).label
    except ValueError:
        return subject
