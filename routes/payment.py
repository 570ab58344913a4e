import logging
import os

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from auth import require_login
from config import Settings, get_settings
from errors import StorageError
from responses import Responder, get_responder
from services.payments import PaymentSimulator, get_payment_simulator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Payment"])


@router.post("/process-payment", dependencies=[Depends(require_login)])
def process_payment(simulator: PaymentSimulator = Depends(get_payment_simulator),
                    settings: Settings = Depends(get_settings),
                    respond: Responder = Depends(get_responder)):
    simulator.process_payment()
    return respond.success("Payment successful", redirect_to=settings.STICKER_PAGE_PATH)


@router.get("/download-sticker", dependencies=[Depends(require_login)])
def download_sticker(settings: Settings = Depends(get_settings)):
    # any logged-in user may download, payment outcome is not checked
    if not os.path.isfile(settings.STICKER_PATH):
        logger.error(f"Sticker download error: {settings.STICKER_PATH} not found")
        raise StorageError("Download failed", "sticker file not found")
    return FileResponse(settings.STICKER_PATH, media_type="image/png", filename="sticker.png")
