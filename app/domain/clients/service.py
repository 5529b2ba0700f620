"""Client service - Business logic for client operations"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Client, CoachingSession, Profile
from .repository import ClientRepository
from .schemas import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_clients(self, user: Profile) -> list[Client]:
        return self.repo.get_clients(self.db, user.user_id)

    def get_client(self, client_id: int, user: Profile) -> Client:
        client = self.repo.get_client_by_id(self.db, client_id, user.user_id)
        if not client:
            raise HTTPException(status_code=404, detail="Client not found")
        return client

    def create_client(self, data: ClientCreate, user: Profile) -> Client:
        logger.info(f"📥 Creating client for user_id: {user.user_id}")
        return self.repo.create_client(self.db, user.user_id, **data.model_dump())

    def update_client(self, client_id: int, data: ClientUpdate, user: Profile) -> Client:
        client = self.get_client(client_id, user)
        updates = data.model_dump(exclude_unset=True)

        # Name and email are required columns; ignore attempts to blank them
        for required in ("name", "email"):
            if required in updates and not updates[required]:
                updates.pop(required)

        return self.repo.update_client(self.db, client, **updates)

    def delete_client(self, client_id: int, user: Profile) -> None:
        client = self.get_client(client_id, user)
        # Sessions keep their client_name; only the link is dropped
        self.db.query(CoachingSession).filter(CoachingSession.client_id == client.id).update(
            {CoachingSession.client_id: None}
        )
        self.repo.delete_client(self.db, client)
        logger.info(f"🗑️ Deleted client {client_id} for user {user.user_id}")
