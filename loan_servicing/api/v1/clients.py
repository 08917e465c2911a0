"""/v1/clients - borrower registration"""

import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from loan_servicing.api.v1.schemas import ClientCreateRequest, ClientResponse
from loan_servicing.infrastructure.database.models import ClientRecord
from loan_servicing.infrastructure.database.session import get_db
from loan_servicing.infrastructure.database.repositories import ClientRepository

router = APIRouter()


def _to_response(client: ClientRecord) -> ClientResponse:
    return ClientResponse(
        client_id=str(client.id),
        manager_id=client.manager_id,
        full_name=client.full_name,
        dni=client.dni,
        phone=client.phone,
        email=client.email,
    )


@router.post("/clients", response_model=ClientResponse, status_code=201)
def create_client(request_body: ClientCreateRequest, db: Session = Depends(get_db)):
    client_repo = ClientRepository(db)
    client = client_repo.create_client(
        manager_id=request_body.manager_id,
        full_name=request_body.full_name,
        dni=request_body.dni,
        phone=request_body.phone,
        email=request_body.email,
    )
    db.commit()
    return _to_response(client)


@router.get("/clients/{client_id}", response_model=ClientResponse)
def get_client(client_id: str, db: Session = Depends(get_db)):
    try:
        client_uuid = uuid.UUID(client_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid client ID format")

    client = ClientRepository(db).get_client_by_id(client_uuid)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    return _to_response(client)
