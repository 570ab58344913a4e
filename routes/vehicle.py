from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pymongo.database import Database

from auth import require_login
from config import Settings, get_settings
from database import get_db
from responses import Responder, get_responder
from services import vehicles
from sessions import Session

router = APIRouter(tags=["Vehicle"])


@router.post("/vehicle-details")
def vehicle_details(session: Session = Depends(require_login),
                    vehicleNumber: Optional[str] = Form(None),
                    vehicleType: Optional[str] = Form(None),
                    brandModel: Optional[str] = Form(None),
                    registrationYear: Optional[str] = Form(None),
                    documents: Optional[UploadFile] = File(None),
                    db: Database = Depends(get_db),
                    settings: Settings = Depends(get_settings),
                    respond: Responder = Depends(get_responder)):
    fields = {
        "vehicleNumber": vehicleNumber,
        "vehicleType": vehicleType,
        "brandModel": brandModel,
        "registrationYear": registrationYear,
    }
    vehicle = vehicles.submit_vehicle(db, session.user, fields, documents, settings.UPLOAD_DIR)
    return respond.success("Vehicle saved", status_code=201,
                           redirect_to=settings.PAYMENT_PAGE_PATH, vehicle=vehicle)


@router.get("/vehicles")
def my_vehicles(session: Session = Depends(require_login),
                db: Database = Depends(get_db)):
    return {"vehicles": vehicles.list_vehicles(db, session.user)}
