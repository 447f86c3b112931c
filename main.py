import logging
from datetime import date
from typing import Optional

from fastapi import FastAPI, APIRouter, Body, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from config import Settings, load_settings
from db import build_engine, build_session_factory, init_db
from errors import AppointmentError, Unexpected
from listing import DateRange
from notifications import Notifier, build_notifier
from schemas import (
  AppointmentOut, CancelAppointment, CancelResult, CreateAppointment, DayGroup,
  RescheduleAppointment, UpdateAppointment,
)
from service import AppointmentService
from store import AppointmentStore

logger = logging.getLogger(__name__)

router = APIRouter()


def get_db(request: Request):
  db = request.app.state.session_factory()
  try:
    yield db
  finally:
    db.close()


def get_service(request: Request, db: Session = Depends(get_db)) -> AppointmentService:
  return AppointmentService(AppointmentStore(db), notifier=request.app.state.notifier)


def _unexpected(action: str) -> Unexpected:
  logger.exception("Error trying to %s", action)
  return Unexpected(f"Failed to {action}")


@router.get("/api/health")
def health():
  return {"ok": True}


@router.get("/appointments", response_model=list[AppointmentOut])
def list_appointments(
  date_range: DateRange = Query(DateRange.all, alias="range"),
  on: Optional[date] = Query(None),
  service: AppointmentService = Depends(get_service),
):
  try:
    appts = service.list_appointments(date_range, on=on)
  except AppointmentError:
    raise
  except Exception:
    raise _unexpected("fetch appointments")
  return [AppointmentOut.model_validate(a) for a in appts]


@router.get("/appointments/by-day", response_model=list[DayGroup])
def list_appointments_by_day(
  date_range: DateRange = Query(DateRange.all, alias="range"),
  on: Optional[date] = Query(None),
  service: AppointmentService = Depends(get_service),
):
  try:
    groups = service.list_by_day(date_range, on=on)
  except AppointmentError:
    raise
  except Exception:
    raise _unexpected("fetch appointments")
  return [
    DayGroup(day=day, appointments=[AppointmentOut.model_validate(a) for a in appts])
    for day, appts in groups
  ]


@router.post("/appointments", response_model=AppointmentOut, status_code=201)
def create_appointment(payload: CreateAppointment, service: AppointmentService = Depends(get_service)):
  try:
    appt = service.create(payload)
  except AppointmentError:
    raise
  except Exception:
    raise _unexpected("create appointment")
  return AppointmentOut.model_validate(appt)


@router.put("/appointments", response_model=AppointmentOut)
def update_appointment(payload: UpdateAppointment, service: AppointmentService = Depends(get_service)):
  try:
    appt = service.update(payload)
  except AppointmentError:
    raise
  except Exception:
    raise _unexpected("update appointment")
  return AppointmentOut.model_validate(appt)


@router.delete("/appointments", response_model=CancelResult)
def cancel_appointment(
  id: Optional[str] = Query(None),
  payload: Optional[CancelAppointment] = Body(None),
  service: AppointmentService = Depends(get_service),
):
  try:
    reason = service.cancel(id, payload.cancellation_reason if payload else None)
  except AppointmentError:
    raise
  except Exception:
    raise _unexpected("cancel appointment")
  return CancelResult(message="Appointment cancelled successfully", cancellation_reason=reason)


@router.put("/appointments/{appointment_id}/reschedule", response_model=AppointmentOut)
def reschedule_appointment(
  appointment_id: str,
  payload: RescheduleAppointment,
  service: AppointmentService = Depends(get_service),
):
  try:
    appt = service.reschedule(appointment_id, payload.new_date, payload.client_email)
  except AppointmentError:
    raise
  except Exception:
    raise _unexpected("reschedule appointment")
  return AppointmentOut.model_validate(appt)


async def appointment_error_handler(request: Request, exc: AppointmentError):
  return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
  errors = exc.errors()
  if not errors:
    return JSONResponse(status_code=400, content={"error": "Invalid request"})
  first = errors[0]
  field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
  message = f"{field}: {first['msg']}" if field else first["msg"]
  return JSONResponse(status_code=400, content={"error": message})


def create_app(
  settings: Optional[Settings] = None,
  engine: Optional[Engine] = None,
  notifier: Optional[Notifier] = None,
) -> FastAPI:
  settings = settings or load_settings()
  logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
  )

  if engine is None:
    engine = build_engine(settings.database_url, ssl_ca=settings.mysql_ssl_ca)
  init_db(engine)

  app = FastAPI(title="Appointment Booker API")
  app.state.settings = settings
  app.state.session_factory = build_session_factory(engine)
  app.state.notifier = notifier or build_notifier(settings)

  app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
  )
  app.add_exception_handler(AppointmentError, appointment_error_handler)
  app.add_exception_handler(RequestValidationError, validation_error_handler)
  app.include_router(router)
  return app


app = create_app()
