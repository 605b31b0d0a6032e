"""Tests for booking request parsing (typed commands and classifier entities)."""

from turnero.core.parser import parse_command, parse_entities
from turnero.models import BookingInput, Complete, MalformedFormat, MissingFields


def test_parse_command_complete():
    parsed = parse_command("Juan Pérez|Corte clásico|2025-10-15|11:30|+54911112222")
    assert parsed == Complete(BookingInput(
        name="Juan Pérez",
        service="Corte clásico",
        date="2025-10-15",
        time="11:30",
        phone="+54911112222",
    ))


def test_parse_command_trims_segments():
    parsed = parse_command("  Ana | Barba |2025-10-16| 9:00 | 1234 ")
    assert isinstance(parsed, Complete)
    assert parsed.fields.name == "Ana"
    assert parsed.fields.service == "Barba"
    assert parsed.fields.time == "9:00"
    assert parsed.fields.phone == "1234"


def test_parse_command_too_few_segments():
    parsed = parse_command("A|B|C")
    assert isinstance(parsed, MalformedFormat)
    assert "3" in parsed.reason


def test_parse_command_empty_segments_dropped():
    assert isinstance(parse_command("A||B|C|D"), MalformedFormat)
    parsed = parse_command("A||B|C|D|E")
    assert isinstance(parsed, Complete)
    assert parsed.fields.phone == "E"


def test_parse_command_extra_segments_ignored():
    parsed = parse_command("A|B|2025-10-15|10:00|123|nota extra")
    assert isinstance(parsed, Complete)
    assert parsed.fields.phone == "123"


def test_parse_command_empty_payload():
    assert isinstance(parse_command(""), MalformedFormat)


def test_parse_entities_complete_with_defaults():
    parsed = parse_entities(
        {"fecha": "2025-10-15", "horario": "10:00", "servicio": "Barba"},
        sender_id="5491111",
    )
    assert parsed == Complete(BookingInput(
        name="Cliente", service="Barba", date="2025-10-15", time="10:00", phone="5491111",
    ))


def test_parse_entities_custom_default_name():
    parsed = parse_entities(
        {"fecha": "2025-10-15", "horario": "10:00", "servicio": "Barba"},
        sender_id="1",
        default_name="Invitado",
    )
    assert parsed.fields.name == "Invitado"


def test_parse_entities_explicit_name_and_phone():
    parsed = parse_entities(
        {
            "fecha": "2025-10-15",
            "horario": "10:00",
            "servicio": "Barba",
            "nombre": "Lucía",
            "telefono": "+5492222",
        },
        sender_id="1",
    )
    assert parsed.fields.name == "Lucía"
    assert parsed.fields.phone == "+5492222"


def test_parse_entities_iso_datetimes():
    parsed = parse_entities(
        {
            "fecha": "2025-10-15T00:00:00-03:00",
            "horario": "2025-10-15T16:30:00-03:00",
            "servicio": "Barba",
        },
        sender_id="1",
    )
    assert parsed.fields.date == "2025-10-15"
    assert parsed.fields.time == "16:30"


def test_parse_entities_english_aliases():
    parsed = parse_entities(
        {"date": "2025-10-15", "time": "10:00", "service": "Barba"},
        sender_id="1",
    )
    assert isinstance(parsed, Complete)


def test_parse_entities_missing_fields():
    parsed = parse_entities({"servicio": "Barba", "horario": "  "}, sender_id="1")
    assert parsed == MissingFields(missing=["date", "time"])


def test_parse_entities_empty():
    parsed = parse_entities({}, sender_id="1")
    assert parsed == MissingFields(missing=["date", "time", "service"])
