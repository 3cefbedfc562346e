"""Derive the display strings printed on a certificate.

User-supplied substrings are used exactly as submitted; the only casing change
is the compact transform used by the tech style.
"""

from dataclasses import dataclass

from rendering.styles import NameTransform, SlotRole, StyleDefinition


@dataclass(frozen=True)
class CertificateFields:
    """Structured input for one certificate."""

    first_name: str
    last_name: str
    degree_level: str
    faculty: str
    achievement: str
    certification_date: str | None = None


@dataclass(frozen=True)
class CertificateText:
    full_name: str
    date_line: str
    degree_line: str
    achievement_line: str

    def for_role(self, role: SlotRole) -> str:
        return {
            SlotRole.NAME: self.full_name,
            SlotRole.DATE_LINE: self.date_line,
            SlotRole.DEGREE: self.degree_line,
            SlotRole.ACHIEVEMENT: self.achievement_line,
        }[role]


def build_date_line(certification_date: str | None) -> str:
    """Return the date sentence, or an empty string when there is no date."""
    if not certification_date:
        return ""
    return f"On this {certification_date}, do bestow the degree of:"


def compile_certificate_text(
    fields: CertificateFields, style: StyleDefinition
) -> CertificateText:
    """Build the four certificate lines for a style."""
    full_name = f"{fields.first_name} {fields.last_name}"
    degree_line = f"{fields.degree_level} of {fields.faculty}"

    if style.name_transform is NameTransform.COMPACT:
        full_name = f"{fields.first_name}_{fields.last_name}".upper()
        degree_line = degree_line.upper()

    return CertificateText(
        full_name=full_name,
        date_line=build_date_line(fields.certification_date),
        degree_line=degree_line,
        achievement_line=f"For outstanding achievement in {fields.achievement}",
    )
