import logging
import os
import secrets
import shutil
from typing import List

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.database import Database
from pymongo.errors import PyMongoError

from errors import StorageError, ValidationError
from models import VehicleForm, parse, vehicle_out

logger = logging.getLogger(__name__)


def _owner_id(user: dict):
    try:
        return ObjectId(user["_id"])
    except (InvalidId, TypeError):
        return user["_id"]


def store_document(upload, upload_dir: str) -> str:
    """Copy an uploaded file into ``upload_dir`` under a random name and return the path."""
    os.makedirs(upload_dir, exist_ok=True)
    path = os.path.join(upload_dir, secrets.token_hex(16))
    try:
        with open(path, "wb") as out:
            shutil.copyfileobj(upload.file, out)
    except OSError as e:
        logger.error(f"Document upload failed: {e}")
        raise StorageError("Failed to save vehicle", str(e))
    return path


def submit_vehicle(db: Database, user: dict, fields: dict, document,
                   upload_dir: str) -> dict:
    form = parse(VehicleForm, fields)
    if document is None or not getattr(document, "filename", None):
        raise ValidationError("documents: a document file is required")

    document_path = store_document(document, upload_dir)
    vehicle = form.dict()
    vehicle["documentPath"] = document_path
    vehicle["userId"] = _owner_id(user)
    try:
        vehicle["_id"] = db.vehicles.insert_one(vehicle).inserted_id
    except PyMongoError as e:
        logger.error(f"Vehicle save error: {e}; orphaned upload at {document_path}")
        raise StorageError("Failed to save vehicle", str(e))
    logger.info("Saved vehicle %s for user %s", vehicle["_id"], user["_id"])
    return vehicle_out(vehicle)


def list_vehicles(db: Database, user: dict) -> List[dict]:
    try:
        docs = list(db.vehicles.find({"userId": _owner_id(user)}))
    except PyMongoError as e:
        logger.error(f"Vehicle lookup error: {e}")
        raise StorageError("Failed to load vehicles", str(e))
    return [vehicle_out(doc) for doc in docs]