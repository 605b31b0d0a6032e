"""Tests for the booking engine: routing, booking flow and reply texts."""

import pytest

from turnero.config import Config, SlotsConfig
from turnero.core import replies
from turnero.core.engine import BookingEngine
from turnero.database import Database
from turnero.errors import StoreUnavailableError
from turnero.llm.classifier import IntentClassifier
from turnero.models import IncomingMessage, IntentResult, Service

COMMAND = "reservar Juan Pérez|Corte clásico|2025-10-15|11:30|+54911112222"


class MockClassifier(IntentClassifier):
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def classify(self, text):
        self.calls.append(text)
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def db(tmp_path):
    d = Database(tmp_path / "test.db")
    d.connect()
    d.seed_services([
        Service(id="", name="Corte clásico", duration_minutes=30, price=5000),
        Service(id="", name="Barba", description="Perfilado con navaja"),
    ])
    yield d
    d.close()


@pytest.fixture
def engine(db):
    return BookingEngine(Config(), db)


def _msg(text, **kwargs) -> IncomingMessage:
    kwargs.setdefault("sender_id", "5491111")
    return IncomingMessage(channel="telegram", sender_name="Ana", text=text, **kwargs)


async def _reply(engine, text, **kwargs):
    response = await engine.handle_message(_msg(text, **kwargs))
    return response.text


# ── Filtering ────────────────────────────────────────────


@pytest.mark.asyncio
async def test_group_message_gets_no_reply(engine):
    assert await engine.handle_message(_msg(COMMAND, is_group=True)) is None
    assert engine.registry.list() == []


@pytest.mark.asyncio
async def test_own_message_gets_no_reply(engine):
    assert await engine.handle_message(_msg("hola", from_me=True)) is None


@pytest.mark.asyncio
async def test_blank_message_gets_no_reply(engine):
    assert await engine.handle_message(_msg("   ")) is None


# ── Commands ─────────────────────────────────────────────


@pytest.mark.asyncio
async def test_greeting_shows_help(engine):
    response = await engine.handle_message(_msg("hola"))
    assert response.text == replies.HELP_MESSAGE
    assert response.metadata["action"] == "show_help"


@pytest.mark.asyncio
async def test_unknown_text_fallback_verbatim(engine):
    text = await _reply(engine, "asdkjh")
    assert text == "No entiendo tu mensaje. Escribe *menu* para ver los comandos disponibles."


@pytest.mark.asyncio
async def test_list_services(engine):
    text = await _reply(engine, "servicios")
    assert text.startswith("Estos son los servicios disponibles:")
    assert "• Barba (Duración no informada) - Sin precio\nPerfilado con navaja" in text
    assert "• Corte clásico (30 min) - $5000.00" in text


@pytest.mark.asyncio
async def test_list_bookings_empty(engine):
    assert await _reply(engine, "turnos") == "No hay turnos registrados por ahora."


@pytest.mark.asyncio
async def test_list_bookings_capped_at_five(engine):
    for hour in range(9, 16):
        await _reply(engine, f"reservar Cliente {hour}|Barba|2025-10-15|{hour}:00|+54{hour}")

    text = await _reply(engine, "turnos")
    lines = text.split("\n")
    assert lines[0] == "Próximos turnos:"
    assert lines[2] == "• 2025-10-15 09:00 - Cliente 9 (+549)"
    assert len([line for line in lines if line.startswith("•")]) == 5


@pytest.mark.asyncio
async def test_list_services_store_failure(engine, db):
    def broken():
        raise StoreUnavailableError("locked")

    db.list_services = broken
    assert await _reply(engine, "servicios") == replies.SERVICES_UNAVAILABLE


# ── Booking via command ──────────────────────────────────


@pytest.mark.asyncio
async def test_reserve_command_creates_booking(engine):
    text = await _reply(engine, COMMAND)

    assert text == "Turno reservado: 2025-10-15 11:30 - Corte clásico. Nos vemos pronto!"
    bookings = engine.registry.list()
    assert len(bookings) == 1
    assert bookings[0].name == "Juan Pérez"
    assert bookings[0].phone == "+54911112222"


@pytest.mark.asyncio
async def test_reserve_resolves_service_case_insensitively(engine):
    text = await _reply(engine, "reservar Ana|CORTE CLÁSICO|2025-10-15|9:00|123")
    assert text == "Turno reservado: 2025-10-15 09:00 - Corte clásico. Nos vemos pronto!"
    assert engine.registry.list()[0].service == "Corte clásico"


@pytest.mark.asyncio
async def test_reserve_malformed(engine):
    text = await _reply(engine, "reservar A|B|C")
    assert text == "Formato inválido. Usa: reservar Nombre|Servicio|YYYY-MM-DD|HH:mm|Telefono"


@pytest.mark.asyncio
async def test_reserve_unknown_service(engine):
    text = await _reply(engine, "reservar Ana|Manicura|2025-10-15|10:00|123")
    assert text == replies.SERVICE_NOT_FOUND
    assert engine.registry.list() == []


@pytest.mark.asyncio
async def test_reserve_invalid_date(engine):
    text = await _reply(engine, "reservar Ana|Barba|15/10/2025|10:00|123")
    assert text.startswith("Revisá estos datos: fecha (YYYY-MM-DD).")


@pytest.mark.asyncio
async def test_reserve_invalid_time(engine):
    text = await _reply(engine, "reservar Ana|Barba|2025-10-15|10hs|123")
    assert text.startswith("Revisá estos datos: horario (HH:mm).")


@pytest.mark.asyncio
async def test_reserve_taken_slot_suggests_alternatives(engine):
    await _reply(engine, COMMAND)
    text = await _reply(engine, "reservar Otra|Corte clásico|2025-10-15|11:30|999")

    assert text == "Ese turno no está libre. ¿Te sirven estos horarios? 10:30, 11:00, 12:00"
    assert len(engine.registry.list()) == 1


@pytest.mark.asyncio
async def test_reserve_taken_slot_no_alternatives(db):
    config = Config(slots=SlotsConfig(opening_time="09:00", closing_time="10:00"))
    engine = BookingEngine(config, db)
    await _reply(engine, "reservar A|Barba|2025-10-15|09:00|1")
    await _reply(engine, "reservar B|Barba|2025-10-15|09:30|2")

    text = await _reply(engine, "reservar C|Barba|2025-10-15|09:00|3")
    assert text == replies.SLOT_TAKEN_NO_ALTERNATIVES


@pytest.mark.asyncio
async def test_reserve_lost_race_suggests_alternatives(engine, monkeypatch):
    await _reply(engine, COMMAND)
    # Availability check passes but the store rejects the write
    monkeypatch.setattr(engine.registry, "is_slot_available", lambda *a: True)

    text = await _reply(engine, "reservar Otra|Corte clásico|2025-10-15|11:30|999")
    assert text.startswith("Ese turno no está libre.")
    assert len(engine.registry.list()) == 1


@pytest.mark.asyncio
async def test_reserve_store_failure(engine, db):
    def broken(booking):
        raise StoreUnavailableError("disk full")

    db.insert_booking = broken
    assert await _reply(engine, COMMAND) == replies.BOOKING_FAILED


# ── Booking via classifier ───────────────────────────────


@pytest.mark.asyncio
async def test_classifier_not_called_for_commands(db):
    classifier = MockClassifier(IntentResult("saludo"))
    engine = BookingEngine(Config(), db, classifier)
    await _reply(engine, "servicios")
    await _reply(engine, COMMAND)
    assert classifier.calls == []


@pytest.mark.asyncio
async def test_classifier_booking_uses_sender_as_phone(db):
    classifier = MockClassifier(IntentResult(
        "agendar_turno",
        {"fecha": "2025-10-15", "horario": "10:00", "servicio": "barba"},
    ))
    engine = BookingEngine(Config(), db, classifier)

    text = await _reply(engine, "quiero arreglarme la barba el miércoles a las 10", sender_id="5493333")

    assert text == "Turno reservado: 2025-10-15 10:00 - Barba. Nos vemos pronto!"
    booking = engine.registry.list()[0]
    assert booking.phone == "5493333"
    assert booking.name == "Cliente"
    assert classifier.calls == ["quiero arreglarme la barba el miércoles a las 10"]


@pytest.mark.asyncio
async def test_classifier_booking_missing_fields(db):
    classifier = MockClassifier(IntentResult("agendar_turno", {"servicio": "Barba"}))
    engine = BookingEngine(Config(), db, classifier)
    assert await _reply(engine, "quiero un turno") == replies.MISSING_FIELDS


@pytest.mark.asyncio
async def test_classifier_list_services(db):
    engine = BookingEngine(Config(), db, MockClassifier(IntentResult("consultar_servicios")))
    text = await _reply(engine, "qué hacen?")
    assert text.startswith("Estos son los servicios disponibles:")


@pytest.mark.asyncio
async def test_classifier_unknown_uses_fulfillment(db):
    classifier = MockClassifier(IntentResult("desconocido", {}, "Abrimos de 9 a 19."))
    engine = BookingEngine(Config(), db, classifier)
    assert await _reply(engine, "a qué hora abren?") == "Abrimos de 9 a 19."


@pytest.mark.asyncio
async def test_classifier_unknown_without_fulfillment(db):
    engine = BookingEngine(Config(), db, MockClassifier(IntentResult("desconocido")))
    assert await _reply(engine, "???") == replies.UNKNOWN_INTENT


@pytest.mark.asyncio
async def test_classifier_failure_falls_back_to_command_reply(db):
    engine = BookingEngine(Config(), db, MockClassifier(error=RuntimeError("api down")))
    assert await _reply(engine, "asdkjh") == replies.UNKNOWN_COMMAND
