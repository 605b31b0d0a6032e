"""Reply texts and formatters for the chat channel."""

from __future__ import annotations

from ..models import Booking, Service
from .parser import COMMAND_TEMPLATE

MAX_LISTED_BOOKINGS = 5

HELP_MESSAGE = "\n".join([
    "Hola! Soy el asistente de turnos.",
    "",
    "Comandos disponibles:",
    "- menu: Ver esta ayuda.",
    "- servicios: Listar servicios activos.",
    "- turnos: Mostrar los próximos turnos.",
    f"- {COMMAND_TEMPLATE}: Crear un turno rápido.",
])

UNKNOWN_COMMAND = "No entiendo tu mensaje. Escribe *menu* para ver los comandos disponibles."
UNKNOWN_INTENT = "Perdón, todavía no entiendo eso. ¿Podés reformularlo?"

INVALID_FORMAT = f"Formato inválido. Usa: {COMMAND_TEMPLATE}"
MISSING_FIELDS = (
    "Necesito fecha, horario y servicio para agendar. Por favor, envíame esos datos."
)
INVALID_FIELDS = "Todos los campos son obligatorios. Revisa el formato solicitado."
SERVICE_NOT_FOUND = (
    "No encontré ese servicio. Escribe *servicios* para ver la lista disponible."
)
SLOT_TAKEN_NO_ALTERNATIVES = (
    "Ese turno ya está ocupado y no encuentro alternativas cercanas."
)
BOOKING_FAILED = (
    "Tuvimos un problema al agendar el turno. Intentá de nuevo en unos minutos."
)
SERVICES_UNAVAILABLE = "No pude recuperar la lista de servicios. Intenta más tarde."
BOOKINGS_UNAVAILABLE = "No pude recuperar los turnos. Intenta más tarde."

FIELD_LABELS = {
    "name": "nombre",
    "service": "servicio",
    "date": "fecha (YYYY-MM-DD)",
    "time": "horario (HH:mm)",
    "phone": "teléfono",
}


def invalid_fields(fields: list[str]) -> str:
    if not fields:
        return INVALID_FIELDS
    labels = ", ".join(FIELD_LABELS.get(f, f) for f in fields)
    return f"Revisá estos datos: {labels}. Formato: {COMMAND_TEMPLATE}"


def slot_taken(suggestions: list[str]) -> str:
    if not suggestions:
        return SLOT_TAKEN_NO_ALTERNATIVES
    return f"Ese turno no está libre. ¿Te sirven estos horarios? {', '.join(suggestions)}"


def booking_confirmed(booking: Booking) -> str:
    return (
        f"Turno reservado: {booking.date} {booking.time} - {booking.service}. "
        "Nos vemos pronto!"
    )


def format_services(services: list[Service]) -> str:
    if not services:
        return "No hay servicios configurados en este momento."

    items = []
    for service in services:
        duration = (
            f"{service.duration_minutes} min"
            if service.duration_minutes is not None
            else "Duración no informada"
        )
        price = f"${service.price:.2f}" if service.price is not None else "Sin precio"
        description = f"\n{service.description}" if service.description else ""
        items.append(f"• {service.name} ({duration}) - {price}{description}")

    return "Estos son los servicios disponibles:\n\n" + "\n\n".join(items)


def format_bookings(bookings: list[Booking]) -> str:
    if not bookings:
        return "No hay turnos registrados por ahora."

    items = [
        f"• {b.date} {b.time} - {b.name} ({b.phone})"
        for b in bookings[:MAX_LISTED_BOOKINGS]
    ]
    return "Próximos turnos:\n\n" + "\n".join(items)
