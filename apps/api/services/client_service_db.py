"""
Client persistence service
"""

from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from core.errors import NotFoundError
from core.logging.logger import logger
from domain.entities.client import Client
from apps.api.schemas import ClientCreate


class ClientServiceDB:
    """Client CRUD."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def create_client(self, client_data: ClientCreate) -> Client:
        client = Client(**client_data.model_dump())
        self.db.add(client)
        self.db.commit()
        self.db.refresh(client)
        logger.info("Client created", client_id=client.id)
        return client

    def get_client(self, client_id: int) -> Client:
        client = self.db.get(Client, client_id)
        if client is None:
            raise NotFoundError("Client", client_id)
        return client

    def list_clients(self, search: Optional[str] = None) -> List[Client]:
        query = select(Client)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(
                Client.name.ilike(pattern),
                Client.company.ilike(pattern),
                Client.phone.ilike(pattern),
            ))
        return list(self.db.execute(query.order_by(Client.name, Client.id)).scalars().all())
