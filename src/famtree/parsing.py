"""Loading members and relationships from JSON documents and GEDCOM files."""

from datetime import date
import json
from pathlib import Path
import re
import sqlite3

from ged4py import GedcomReader

from famtree.database import load_data
from famtree.models import PARENT, SPOUSE, Member, Relationship

MONTHS = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}

QUALIFIERS = re.compile(
    r"^(ABT\.?|ABOUT|BEF\.?|BEFORE|AFT\.?|AFTER|EST\.?|CAL\.?|CIRCA|CA\.?|AROUND):?\s*",
    flags=re.IGNORECASE,
)


def _month(name: str) -> int | None:
    # "SEPT", "September" and "Sep." all map through their first three letters
    return MONTHS.get(name.upper().rstrip(".")[:3])


def _make_date(year: int, month: int | None, day: int) -> date | None:
    if month is None:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date_string(date_str: str | None) -> date | None:
    """
    Parse a free-form or GEDCOM date into a date.
    Returns None if the date cannot be parsed.

    Handles formats like:
    - "1954-11-25"
    - "25 NOV 1954"
    - "NOV 1954" / "May, 1837"
    - "1698" / "ABT 1905"
    - "01/27/1920" (month first)
    - "April 17, 1850"
    """
    if not date_str:
        return None

    s = str(date_str).strip().strip("()").rstrip("?")
    s = QUALIFIERS.sub("", s).strip()
    if not s:
        return None

    match = re.match(r"^(\d{4})-(\d{2})-(\d{2})$", s)
    if match:
        return _make_date(int(match.group(1)), int(match.group(2)) or 1, int(match.group(3)) or 1)

    match = re.match(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$", s)
    if match:
        return _make_date(int(match.group(3)), _month(match.group(2)), int(match.group(1)))

    match = re.match(r"^([A-Za-z]+)\.?,?\s*(\d{4})$", s)
    if match:
        return _make_date(int(match.group(2)), _month(match.group(1)), 1)

    match = re.match(r"^(\d{4})$", s)
    if match:
        return date(int(match.group(1)), 1, 1)

    match = re.match(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{4})$", s)
    if match:
        return _make_date(int(match.group(3)), int(match.group(1)), int(match.group(2)))

    match = re.match(r"^([A-Za-z]+)\.?\s*(\d{1,2}),?\s*(\d{4})$", s)
    if match:
        return _make_date(int(match.group(3)), _month(match.group(1)), int(match.group(2)))

    return None


# ============================================================================
# JSON
# ============================================================================


def _field(record: dict, *names: str):
    for name in names:
        if record.get(name) is not None:
            return record[name]
    return None


def member_from_dict(record: dict) -> Member:
    """Build a Member from camelCase API keys or snake_case column names."""
    if not isinstance(record, dict):
        raise ValueError(f"Member record is not an object: {record!r}")
    member_id = _field(record, "id")
    if member_id is None:
        raise ValueError(f"Member record without id: {record}")

    birth_date = _field(record, "birthDate", "birth_date")
    return Member(
        id=str(member_id),
        first_name=_field(record, "firstName", "first_name") or "",
        last_name=_field(record, "lastName", "last_name") or "",
        birth_date=parse_date_string(birth_date) if birth_date else None,
        gender=_field(record, "gender"),
        picture_url=_field(record, "pictureUrl", "picture_url"),
    )


def relationship_from_dict(record: dict) -> Relationship:
    if not isinstance(record, dict):
        raise ValueError(f"Relationship record is not an object: {record!r}")
    member1_id = _field(record, "member1Id", "member1_id")
    member2_id = _field(record, "member2Id", "member2_id")
    if member1_id is None or member2_id is None:
        raise ValueError(f"Relationship record without member ids: {record}")

    return Relationship(
        member1_id=str(member1_id),
        member2_id=str(member2_id),
        relationship_type=str(_field(record, "type", "relationship_type", "relationshipType") or ""),
    )


def load_json(filepath: Path) -> tuple[list[Member], list[Relationship]]:
    """Load a {"members": [...], "relationships": [...]} document."""
    data = json.loads(Path(filepath).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {filepath}")

    records = {}
    for key in ("members", "relationships"):
        records[key] = data.get(key) or []
        if not isinstance(records[key], list):
            raise ValueError(f"Expected \"{key}\" to be a list in {filepath}")

    members = [member_from_dict(r) for r in records["members"]]
    relationships = [relationship_from_dict(r) for r in records["relationships"]]
    return members, relationships


# ============================================================================
# GEDCOM
# ============================================================================


def gedcom_id(xref_id: str) -> str:
    """Strip the @ delimiters from a GEDCOM xref like '@I12@'."""
    return xref_id.strip("@")


def extract_name_parts(indi) -> tuple[str, str]:
    """Extract given name and surname from an individual record."""
    name_rec = indi.sub_tag("NAME")
    if name_rec is None or name_rec.value is None:
        return ("", "")

    # ged4py returns NAME as tuple: (given, surname, suffix)
    if isinstance(name_rec.value, tuple):
        given, surname, _ = name_rec.value
        return (given or "", surname or "")

    # Fallback: string format "Given /Surname/"
    given, _, rest = str(name_rec.value).partition("/")
    return (given.strip(), rest.replace("/", "").strip())


def extract_birth_date(indi) -> date | None:
    birth = indi.sub_tag("BIRT")
    if birth is None:
        return None
    date_rec = birth.sub_tag("DATE")
    if date_rec is None or not date_rec.value:
        return None
    return parse_date_string(str(date_rec.value))


def load_gedcom(filepath: Path) -> tuple[list[Member], list[Relationship]]:
    """
    Extract members and relationships from a GEDCOM file.
    Family records become spouse and parent relationships.
    """
    members: list[Member] = []
    relationships: list[Relationship] = []

    with GedcomReader(str(filepath)) as reader:
        for rec in reader.records0("INDI"):
            if rec.xref_id is None:
                continue
            given_name, surname = extract_name_parts(rec)
            sex = rec.sub_tag("SEX")
            members.append(
                Member(
                    id=gedcom_id(rec.xref_id),
                    first_name=given_name,
                    last_name=surname,
                    birth_date=extract_birth_date(rec),
                    gender=sex.value if sex else None,
                )
            )

        for rec in reader.records0("FAM"):
            partners = [
                gedcom_id(tag.xref_id)
                for tag in (rec.sub_tag("HUSB"), rec.sub_tag("WIFE"))
                if tag is not None and tag.xref_id
            ]
            if len(partners) == 2:
                relationships.append(Relationship(partners[0], partners[1], SPOUSE))

            for child in rec.sub_tags("CHIL"):
                if not child.xref_id:
                    continue
                for parent_id in partners:
                    relationships.append(Relationship(parent_id, gedcom_id(child.xref_id), PARENT))

    return members, relationships


def load_file(filepath: Path) -> tuple[list[Member], list[Relationship]]:
    """Dispatch on file suffix: .json, .ged or .db/.sqlite."""
    filepath = Path(filepath)
    suffix = filepath.suffix.lower()
    if suffix == ".json":
        return load_json(filepath)
    if suffix == ".ged":
        return load_gedcom(filepath)
    if suffix in (".db", ".sqlite", ".sqlite3"):
        if not filepath.is_file():
            raise ValueError(f"Database not found: {filepath}")
        # Read-only, so a mistyped path never creates an empty database
        conn = sqlite3.connect(f"{filepath.resolve().as_uri()}?mode=ro", uri=True)
        try:
            return load_data(conn)
        except sqlite3.Error as exc:
            raise ValueError(f"Cannot read database {filepath}: {exc}") from exc
        finally:
            conn.close()
    raise ValueError(f"Unsupported input format: {filepath.suffix or filepath.name}")
