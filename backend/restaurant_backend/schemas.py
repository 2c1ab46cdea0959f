from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from .domain.capacity import ResolvedCapacity, SlotAvailability
from .models import CapacityConfig, ContactMessage, Reservation, ReservationStatus


def _utc_iso(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.replace(tzinfo=timezone.utc).isoformat()


class ApiModel(BaseModel):
    """Python field names inside, the site's Spanish camelCase names on the wire."""

    model_config = ConfigDict(populate_by_name=True)


class ConfigurationInfo(ApiModel):
    tier: str = Field(alias="tipo")
    description: str = Field(alias="descripcion")

    @classmethod
    def from_resolved(cls, resolved: ResolvedCapacity) -> "ConfigurationInfo":
        return cls(tier=str(resolved.tier), description=resolved.description)


class SlotStatusRead(ApiModel):
    max_capacity: int = Field(alias="capacidadMaxima")
    already_booked: int = Field(alias="personasReservadas")
    remaining: int = Field(alias="espaciosDisponibles")
    fits_party: bool = Field(alias="disponibleParaGrupo")
    occupancy_percentage: float = Field(alias="porcentajeOcupacion")
    status: str = Field(alias="estado")

    @classmethod
    def from_availability(cls, availability: SlotAvailability, *, party_size: int) -> "SlotStatusRead":
        return cls(
            max_capacity=availability.max_capacity,
            already_booked=availability.already_booked,
            remaining=availability.remaining,
            fits_party=availability.fits(party_size),
            occupancy_percentage=availability.occupancy_percentage,
            status=availability.status(party_size),
        )


class AvailabilitySummary(ApiModel):
    total_slots: int = Field(alias="totalHorarios")
    available_slots: int = Field(alias="horariosDisponibles")
    full_slots: int = Field(alias="horariosLlenos")
    insufficient_slots: int = Field(alias="horariosInsuficientes")


class AvailabilityRead(ApiModel):
    booking_date: date = Field(alias="fecha")
    party_size: int = Field(alias="personasSolicitadas")
    configuration: ConfigurationInfo = Field(alias="configuracion")
    slots: dict[str, SlotStatusRead] = Field(alias="horarios")
    summary: AvailabilitySummary = Field(alias="resumen")


class AvailableSlot(ApiModel):
    slot: str = Field(alias="hora")
    max_capacity: int = Field(alias="capacidadMaxima")
    already_booked: int = Field(alias="personasReservadas")
    remaining: int = Field(alias="espaciosDisponibles")
    available: bool = Field(default=True, alias="disponible")


class AvailableSlotsRead(ApiModel):
    booking_date: date = Field(alias="fecha")
    configuration: ConfigurationInfo = Field(alias="configuracion")
    slots: list[AvailableSlot] = Field(alias="horariosDisponibles")
    total: int


class ReservationCreate(ApiModel):
    booking_date: Optional[date] = Field(default=None, alias="fecha")
    slot: Optional[str] = Field(default=None, alias="hora")
    party_size: Optional[int] = Field(default=None, alias="personas")
    name: Optional[str] = Field(default=None, alias="nombre")
    email: Optional[str] = None
    phone: Optional[str] = Field(default=None, alias="telefono")
    notes: Optional[str] = Field(default=None, alias="notas")


class ReservationUpdate(ApiModel):
    id: Optional[int] = None
    booking_date: Optional[date] = Field(default=None, alias="fecha")
    slot: Optional[str] = Field(default=None, alias="hora")
    party_size: Optional[int] = Field(default=None, alias="personas")
    status: Optional[ReservationStatus] = Field(default=None, alias="estado")
    name: Optional[str] = Field(default=None, alias="nombre")
    email: Optional[str] = None
    phone: Optional[str] = Field(default=None, alias="telefono")
    notes: Optional[str] = Field(default=None, alias="notas")

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_unset=True, exclude={"id"})


class ReservationRead(ApiModel):
    reservation_id: int = Field(alias="id")
    booking_date: date = Field(alias="fecha")
    slot: str = Field(alias="hora")
    starts_at: datetime = Field(alias="fechaHora")
    party_size: int = Field(alias="personas")
    status: ReservationStatus = Field(alias="estado")
    name: Optional[str] = Field(default=None, alias="nombre")
    email: Optional[str] = None
    phone: Optional[str] = Field(default=None, alias="telefono")
    notes: Optional[str] = Field(default=None, alias="notas")

    @field_serializer("starts_at")
    def _ser_starts_at(self, dt: datetime) -> str:
        return dt.replace(tzinfo=None).isoformat()

    @classmethod
    def from_db(cls, *, reservation: Reservation) -> "ReservationRead":
        return cls(
            reservation_id=reservation.id,
            booking_date=reservation.booking_date,
            slot=reservation.slot,
            starts_at=reservation.starts_at,
            party_size=reservation.party_size,
            status=reservation.status,
            name=reservation.name,
            email=reservation.email,
            phone=reservation.phone,
            notes=reservation.notes,
        )


class ReservationCreated(ApiModel):
    success: bool = True
    data: ReservationRead
    configuration: ConfigurationInfo = Field(alias="configuracion")
    message: str


class ReservationChanged(ApiModel):
    success: bool = True
    data: ReservationRead
    message: str


class ContactCreate(ApiModel):
    name: Optional[str] = Field(default=None, alias="nombre")
    email: Optional[str] = None
    phone: Optional[str] = Field(default=None, alias="telefono")
    subject: Optional[str] = Field(default=None, alias="asunto")
    message: Optional[str] = Field(default=None, alias="mensaje")


class ContactUpdate(ApiModel):
    id: Optional[int] = None
    status: Optional[str] = Field(default=None, alias="estado")
    admin_notes: Optional[str] = Field(default=None, alias="notasAdmin")


class ContactRead(ApiModel):
    message_id: int = Field(alias="id")
    name: str = Field(alias="nombre")
    email: str
    phone: Optional[str] = Field(default=None, alias="telefono")
    subject: str = Field(alias="asunto")
    message: str = Field(alias="mensaje")
    status: str = Field(alias="estado")
    admin_notes: Optional[str] = Field(default=None, alias="notasAdmin")
    created_at: datetime = Field(alias="fechaCreacion")
    replied_at: Optional[datetime] = Field(default=None, alias="fechaRespuesta")
    archived_at: Optional[datetime] = Field(default=None, alias="fechaArchivado")

    @field_serializer("created_at", "replied_at", "archived_at")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return _utc_iso(dt)

    @classmethod
    def from_db(cls, *, message: ContactMessage) -> "ContactRead":
        return cls(
            message_id=message.id,
            name=message.name,
            email=message.email,
            phone=message.phone,
            subject=message.subject,
            message=message.message,
            status=str(message.status),
            admin_notes=message.admin_notes,
            created_at=message.created_at,
            replied_at=message.replied_at,
            archived_at=message.archived_at,
        )


class ContactReceipt(ApiModel):
    message_id: int = Field(alias="id")
    status: str = Field(alias="estado")


class ContactCreated(ApiModel):
    success: bool = True
    data: ContactReceipt
    message: str


class ContactListMeta(ApiModel):
    total: int
    page: int = Field(alias="pagina")
    limit: int = Field(alias="limite")


class ContactList(ApiModel):
    success: bool = True
    data: list[ContactRead]
    meta: ContactListMeta


class ContactChanged(ApiModel):
    success: bool = True
    data: ContactRead
    message: str


class CapacityConfigCreate(ApiModel):
    specific_date: Optional[date] = Field(default=None, alias="fechaEspecifica")
    day_of_week: Optional[int] = Field(default=None, alias="diaSemana")
    capacity_by_slot: dict[str, int] = Field(alias="capacidadPorHorario")
    description: str = Field(default="", alias="descripcion")
    active: bool = Field(default=True, alias="activo")


class CapacityConfigRead(ApiModel):
    config_id: int = Field(alias="id")
    specific_date: Optional[date] = Field(default=None, alias="fechaEspecifica")
    day_of_week: Optional[int] = Field(default=None, alias="diaSemana")
    capacity_by_slot: dict[str, int] = Field(alias="capacidadPorHorario")
    description: str = Field(alias="descripcion")
    active: bool = Field(alias="activo")

    @classmethod
    def from_db(cls, *, config: CapacityConfig) -> "CapacityConfigRead":
        return cls(
            config_id=config.id,
            specific_date=config.specific_date,
            day_of_week=config.day_of_week,
            capacity_by_slot=dict(config.capacity_by_slot or {}),
            description=config.description,
            active=config.active,
        )
