"""
Certificate registry collaborator.

Ticket ownership lives behind this narrow interface. The sale engine only
mints and labels certificates and reads ownership back; transfer rules
belong to the registry, not to the ticketing core.
"""
from typing import Optional, Protocol
from sqlalchemy import func
from sqlalchemy.orm import Session

from tixly.errors import NotFound, ValidationFailed
from tixly.models.certificate import Certificate

ERC165_INTERFACE_ID = 0x01ffc9a7
ERC721_INTERFACE_ID = 0x80ac58cd
ERC721_METADATA_INTERFACE_ID = 0x5b5e139f

SUPPORTED_INTERFACES = frozenset({
    ERC165_INTERFACE_ID,
    ERC721_INTERFACE_ID,
    ERC721_METADATA_INTERFACE_ID,
})


class CertificateRegistry(Protocol):
    def mint(self, owner: str, token_id: int) -> None: ...

    def set_descriptor(self, token_id: int, text: str) -> None: ...

    def owner_of(self, token_id: int) -> str: ...

    def balance_of(self, owner: str) -> int: ...

    def descriptor_of(self, token_id: int) -> Optional[str]: ...

    def supports_interface(self, interface_id: int) -> bool: ...


class SQLCertificateRegistry:
    """Registry stored in the caller's session, so it commits and rolls back with the sale."""

    def __init__(self, db: Session):
        self.db = db

    def mint(self, owner: str, token_id: int) -> None:
        if not owner:
            raise ValidationFailed("Cannot mint to an empty owner")
        if self.db.get(Certificate, token_id) is not None:
            raise ValidationFailed(f"Certificate {token_id} already minted")
        self.db.add(Certificate(token_id=token_id, owner=owner))
        self.db.flush()

    def set_descriptor(self, token_id: int, text: str) -> None:
        certificate = self._get(token_id)
        certificate.descriptor = text

    def owner_of(self, token_id: int) -> str:
        return self._get(token_id).owner

    def balance_of(self, owner: str) -> int:
        if not owner:
            raise ValidationFailed("Balance query for an empty owner")
        return self.db.query(func.count(Certificate.token_id)).filter(
            Certificate.owner == owner
        ).scalar()

    def descriptor_of(self, token_id: int) -> Optional[str]:
        return self._get(token_id).descriptor

    def supports_interface(self, interface_id: int) -> bool:
        return interface_id in SUPPORTED_INTERFACES

    def _get(self, token_id: int) -> Certificate:
        certificate = self.db.get(Certificate, token_id)
        if certificate is None:
            raise NotFound(f"Certificate {token_id} does not exist")
        return certificate
