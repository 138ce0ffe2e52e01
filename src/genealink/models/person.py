"""Civil-status record models.

Records are read-only inputs owned by the storage layer. They carry free-text
parent names and no foreign keys between persons.
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_name(name: str | None) -> str:
    """Lowercase a name and collapse internal whitespace."""
    if not name:
        return ""
    return " ".join(name.lower().split())


class Sex(str, Enum):
    """Sex as recorded on the birth act."""

    MALE = "M"
    FEMALE = "F"
    UNSPECIFIED = "U"


_SEX_ALIASES = {
    "m": Sex.MALE,
    "male": Sex.MALE,
    "masculin": Sex.MALE,
    "h": Sex.MALE,
    "f": Sex.FEMALE,
    "female": Sex.FEMALE,
    "féminin": Sex.FEMALE,
    "feminin": Sex.FEMALE,
}


def parse_sex(value: object) -> Sex:
    """Map the spellings found in registers to a Sex value."""
    if isinstance(value, Sex):
        return value
    if not value:
        return Sex.UNSPECIFIED
    return _SEX_ALIASES.get(str(value).strip().lower(), Sex.UNSPECIFIED)


class PersonRecord(BaseModel):
    """A birth record from the civil registry."""

    model_config = ConfigDict(frozen=True)

    id: str
    surname: str = ""
    given_names: str = ""
    sex: Sex = Sex.UNSPECIFIED
    birth_date: date | None = None
    birth_place: str | None = None
    father_name: str | None = None
    mother_name: str | None = None
    act_number: str | None = None
    registration_center: str | None = None
    last_updated: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> str:
        """Registers use numeric and textual identifiers alike."""
        return str(v)

    @field_validator("surname", "given_names", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> str:
        return " ".join(str(v).split()) if v else ""

    @field_validator(
        "birth_place",
        "father_name",
        "mother_name",
        "act_number",
        "registration_center",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v: object) -> str | None:
        """Treat empty strings as missing values."""
        if v is None:
            return None
        text = " ".join(str(v).split())
        return text or None

    @field_validator("sex", mode="before")
    @classmethod
    def normalize_sex(cls, v: object) -> Sex:
        return parse_sex(v)

    @property
    def full_name(self) -> str:
        """Surname followed by given names, as printed on the act."""
        return f"{self.surname} {self.given_names}".strip()

    @property
    def birth_year(self) -> int | None:
        return self.birth_date.year if self.birth_date else None

    @property
    def has_both_parents(self) -> bool:
        return bool(self.father_name and self.mother_name)

    def __str__(self) -> str:
        born = f", b. {self.birth_date.isoformat()}" if self.birth_date else ""
        return f"{self.full_name} (#{self.id}{born})"


class MarriageRecord(BaseModel):
    """A marriage record, used only to resolve a spouse reference."""

    model_config = ConfigDict(frozen=True)

    spouse_a_name: str
    spouse_b_name: str
    marriage_date: date | None = None
    marriage_place: str | None = None
    property_regime: str | None = None

    def other_spouse(self, name: str) -> str | None:
        """Return the spouse whose name does not contain ``name``.

        Returns None when neither spouse field contains the name.
        """
        needle = normalize_name(name)
        if not needle:
            return None
        if needle in normalize_name(self.spouse_a_name):
            return self.spouse_b_name
        if needle in normalize_name(self.spouse_b_name):
            return self.spouse_a_name
        return None


class SearchFilters(BaseModel):
    """Structured filters accompanying a free-text search."""

    birth_date_from: date | None = None
    birth_date_to: date | None = None
    birth_place: str | None = None
    sex: Sex | None = None
    limit: int = Field(default=100, ge=1, le=1000)

    @field_validator("sex", mode="before")
    @classmethod
    def normalize_sex(cls, v: object) -> Sex | None:
        return None if v is None or v == "" else parse_sex(v)

    def accepts(self, person: PersonRecord) -> bool:
        """Return True when ``person`` passes every filter that is set."""
        if self.birth_date_from and (
            person.birth_date is None or person.birth_date < self.birth_date_from
        ):
            return False
        if self.birth_date_to and (
            person.birth_date is None or person.birth_date > self.birth_date_to
        ):
            return False
        if self.birth_place and (
            not person.birth_place
            or self.birth_place.lower() not in person.birth_place.lower()
        ):
            return False
        if self.sex and person.sex != self.sex:
            return False
        return True
