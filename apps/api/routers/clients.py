"""
API router for clients
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from core.database.connection import get_db
from apps.api.schemas import ClientCreate, ClientResponse
from apps.api.services.client_service_db import ClientServiceDB

router = APIRouter(prefix="/clients", tags=["clients"])


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
def create_client(client_data: ClientCreate, db: Session = Depends(get_db)):
    """Create a client."""
    return ClientServiceDB(db).create_client(client_data)


@router.get("", response_model=List[ClientResponse])
def list_clients(
    search: Optional[str] = Query(None, description="Name, company or phone fragment"),
    db: Session = Depends(get_db),
):
    return ClientServiceDB(db).list_clients(search)


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(client_id: int, db: Session = Depends(get_db)):
    return ClientServiceDB(db).get_client(client_id)
